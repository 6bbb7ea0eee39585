"""User service — business logic for users and their team listing.

Routes resolve and authorize; this layer validates and writes. Deleting
a user removes their pubkeys and memberships in the same transaction.
"""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.auth.password import hash_password
from proctor.db.models import Membership, Pubkey, Team, User
from proctor.errors import ValidationFailed
from proctor.services.conflicts import commit_or_conflict

logger = structlog.get_logger()

NAME_TAKEN = "Name has already been taken"


class UserService:
    """Business logic for user management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.name))
        return list(result.scalars().all())

    async def get_user(self, name: str) -> User | None:
        result = await self.db.execute(select(User).where(User.name == name))
        return result.scalars().first()

    async def create_user(self, name: str, password: str, role: str = "user") -> User:
        if await self._name_taken(name):
            raise ValidationFailed([NAME_TAKEN])

        user = User(name=name, role=role, password_hash=hash_password(password))
        self.db.add(user)
        await commit_or_conflict(self.db, NAME_TAKEN)

        logger.info("user.created", user=name, role=role)
        return user

    async def update_user(
        self,
        user: User,
        name: str | None = None,
        role: str | None = None,
        password: str | None = None,
    ) -> User:
        if name is not None and name != user.name and await self._name_taken(name):
            raise ValidationFailed([NAME_TAKEN])

        if name is not None:
            user.name = name
        if role is not None:
            user.role = role
        if password is not None:
            user.password_hash = hash_password(password)

        await commit_or_conflict(self.db, NAME_TAKEN)
        logger.info("user.updated", user=user.name)
        return user

    async def delete_user(self, user: User) -> None:
        name = user.name
        await self.db.execute(delete(Pubkey).where(Pubkey.user_id == user.id))
        await self.db.execute(delete(Membership).where(Membership.user_id == user.id))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", user=name)

    async def list_teams(self, user: User) -> list[Team]:
        result = await self.db.execute(
            select(Team)
            .join(Membership, Membership.team_id == Team.id)
            .where(Membership.user_id == user.id)
            .order_by(Team.name)
        )
        return list(result.scalars().all())

    async def _name_taken(self, name: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.name == name))
        return result.first() is not None
