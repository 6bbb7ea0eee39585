"""Membership API routes — link and unlink a user and a team by name.

A successful link answers 201 with the team's path as Location and no
body. Unlink always answers 204, whether or not a link existed.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.auth.dependencies import require_roles
from proctor.auth.roles import ADMIN
from proctor.db.engine import get_db
from proctor.paths import MEMBERSHIPS_PATH, team_path
from proctor.schemas.team import MembershipBody
from proctor.services.membership_service import MembershipService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> MembershipService:
    return MembershipService(db)


@router.post(
    MEMBERSHIPS_PATH,
    status_code=201,
    dependencies=[Depends(require_roles(ADMIN))],
)
async def link_membership(
    body: Optional[MembershipBody] = Body(default=None),
    svc: MembershipService = Depends(_svc),
):
    body = body or MembershipBody()
    team = await svc.link(body.user, body.team)
    return Response(status_code=201, headers={"Location": team_path(team.name)})


@router.delete(
    MEMBERSHIPS_PATH,
    status_code=204,
    dependencies=[Depends(require_roles(ADMIN))],
)
async def unlink_membership(
    body: Optional[MembershipBody] = Body(default=None),
    svc: MembershipService = Depends(_svc),
):
    body = body or MembershipBody()
    await svc.unlink(body.user, body.team)
    return Response(status_code=204)
