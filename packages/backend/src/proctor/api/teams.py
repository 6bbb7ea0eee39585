"""Team API routes.

Reads are open to any authenticated identity; renaming and deleting a
team is admin-only. Teams have no owner, so no ability check applies.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.api.resolvers import resolve_team
from proctor.auth.dependencies import require_roles
from proctor.auth.roles import ADMIN
from proctor.db.engine import get_db
from proctor.db.models import Team
from proctor.paths import TEAMS_PATH, team_path
from proctor.schemas.pubkey import PubkeyRead
from proctor.schemas.team import TeamRead, TeamUpdate
from proctor.schemas.user import UserRead
from proctor.services.team_service import TeamService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> TeamService:
    return TeamService(db)


@router.get(TEAMS_PATH, response_model=list[TeamRead])
async def list_teams(svc: TeamService = Depends(_svc)):
    return await svc.list_teams()


@router.get(TEAMS_PATH + "/{name}", response_model=TeamRead)
async def get_team(team: Team = Depends(resolve_team)):
    return team


@router.patch(
    TEAMS_PATH + "/{name}",
    response_model=TeamRead,
    dependencies=[Depends(resolve_team), Depends(require_roles(ADMIN))],
)
async def update_team(
    body: TeamUpdate,
    response: Response,
    team: Team = Depends(resolve_team),
    svc: TeamService = Depends(_svc),
):
    team = await svc.update_team(team, name=body.name)
    response.headers["Location"] = team_path(team.name)
    return team


@router.delete(
    TEAMS_PATH + "/{name}",
    status_code=204,
    dependencies=[Depends(resolve_team), Depends(require_roles(ADMIN))],
)
async def delete_team(
    team: Team = Depends(resolve_team),
    svc: TeamService = Depends(_svc),
):
    await svc.delete_team(team)
    return Response(status_code=204)


@router.get(TEAMS_PATH + "/{name}/users", response_model=list[UserRead])
async def list_team_users(
    team: Team = Depends(resolve_team),
    svc: TeamService = Depends(_svc),
):
    return await svc.list_users(team)


@router.get(TEAMS_PATH + "/{name}/pubkeys", response_model=list[PubkeyRead])
async def list_team_pubkeys(
    team: Team = Depends(resolve_team),
    svc: TeamService = Depends(_svc),
):
    return await svc.list_pubkeys(team)
