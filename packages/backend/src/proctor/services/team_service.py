"""Team service — teams, their members, and their members' keys.

A team's pubkeys are not stored: they are every pubkey owned by a
current member, read through the memberships table.
"""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.db.models import Membership, Pubkey, Team, User
from proctor.errors import ValidationFailed
from proctor.services.conflicts import commit_or_conflict

logger = structlog.get_logger()

NAME_TAKEN = "Name has already been taken"


class TeamService:
    """Business logic for team management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_teams(self) -> list[Team]:
        result = await self.db.execute(select(Team).order_by(Team.name))
        return list(result.scalars().all())

    async def get_team(self, name: str) -> Team | None:
        result = await self.db.execute(select(Team).where(Team.name == name))
        return result.scalars().first()

    async def update_team(self, team: Team, name: str | None = None) -> Team:
        if name is not None and name != team.name:
            if await self.get_team(name) is not None:
                raise ValidationFailed([NAME_TAKEN])
            team.name = name

        await commit_or_conflict(self.db, NAME_TAKEN)
        logger.info("team.updated", team=team.name)
        return team

    async def delete_team(self, team: Team) -> None:
        name = team.name
        await self.db.execute(delete(Membership).where(Membership.team_id == team.id))
        await self.db.delete(team)
        await self.db.commit()
        logger.info("team.deleted", team=name)

    async def list_users(self, team: Team) -> list[User]:
        result = await self.db.execute(
            select(User)
            .join(Membership, Membership.user_id == User.id)
            .where(Membership.team_id == team.id)
            .order_by(User.name)
        )
        return list(result.scalars().all())

    async def list_pubkeys(self, team: Team) -> list[Pubkey]:
        result = await self.db.execute(
            select(Pubkey)
            .join(Membership, Membership.user_id == Pubkey.user_id)
            .join(User, User.id == Pubkey.user_id)
            .where(Membership.team_id == team.id)
            .order_by(User.name, Pubkey.title)
        )
        return list(result.scalars().all())
