"""Membership service — linking users to teams by name.

Link validates both names and reports every problem at once, in a fixed
order (user first, then team, then duplicate link). A team that does not
exist yet is created by its first link. Unlink is idempotent: removing a
link that is not there is still a success.
"""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.db.models import Membership, Team, User
from proctor.errors import ValidationFailed
from proctor.services.conflicts import commit_or_conflict, flush_or_conflict

logger = structlog.get_logger()

USER_BLANK = "User can't be blank"
USER_MISSING = "User must exist"
TEAM_BLANK = "Team can't be blank"
TEAM_INVALID = "Team is invalid"
TEAM_TAKEN = "Team has already been taken"
ALREADY_MEMBER = "User is already a member of this team"

MAX_TEAM_NAME = 100


class MembershipService:
    """Business logic for user ↔ team links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def link(self, user_name: str, team_name: str) -> Team:
        """Link a user to a team. Returns the team the user now belongs to."""
        errors = []

        user = None
        if not user_name:
            errors.append(USER_BLANK)
        else:
            user = await self._find_user(user_name)
            if user is None:
                errors.append(USER_MISSING)

        team = None
        if not team_name:
            errors.append(TEAM_BLANK)
        elif "/" in team_name or len(team_name) > MAX_TEAM_NAME:
            errors.append(TEAM_INVALID)
        else:
            team = await self._find_team(team_name)

        if user is not None and team is not None and await self._linked(user, team):
            errors.append(ALREADY_MEMBER)

        if errors:
            raise ValidationFailed(errors)

        if team is None:
            team = Team(name=team_name)
            self.db.add(team)
            await flush_or_conflict(self.db, TEAM_TAKEN)
            logger.info("team.created", team=team_name)

        self.db.add(Membership(user_id=user.id, team_id=team.id))
        await commit_or_conflict(self.db, ALREADY_MEMBER)

        logger.info("membership.linked", user=user_name, team=team_name)
        return team

    async def unlink(self, user_name: str, team_name: str) -> int:
        """Remove the link if present. Returns the number of rows removed."""
        if not user_name or not team_name:
            return 0
        result = await self.db.execute(
            delete(Membership).where(
                Membership.user_id.in_(select(User.id).where(User.name == user_name)),
                Membership.team_id.in_(select(Team.id).where(Team.name == team_name)),
            )
        )
        await self.db.commit()
        logger.info(
            "membership.unlinked",
            user=user_name,
            team=team_name,
            removed=result.rowcount,
        )
        return result.rowcount

    async def _find_user(self, name: str) -> User | None:
        result = await self.db.execute(select(User).where(User.name == name))
        return result.scalars().first()

    async def _find_team(self, name: str) -> Team | None:
        result = await self.db.execute(select(Team).where(Team.name == name))
        return result.scalars().first()

    async def _linked(self, user: User, team: Team) -> bool:
        result = await self.db.execute(
            select(Membership.user_id).where(
                Membership.user_id == user.id, Membership.team_id == team.id
            )
        )
        return result.first() is not None
