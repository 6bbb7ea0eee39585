"""Pubkey service — SSH keys scoped to their owning user.

Titles are unique per owner, not globally: two users may both have a
key called "laptop". Key material is validated and normalized before it
is stored.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.db.models import Pubkey, User
from proctor.errors import ValidationFailed
from proctor.services.conflicts import commit_or_conflict
from proctor.sshkeys import InvalidKeyError, normalize_key

logger = structlog.get_logger()

TITLE_TAKEN = "Title has already been taken"
KEY_INVALID = "Key is not a valid OpenSSH public key"


class PubkeyService:
    """Business logic for a user's pubkeys."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_pubkeys(self, user: User) -> list[Pubkey]:
        result = await self.db.execute(
            select(Pubkey).where(Pubkey.user_id == user.id).order_by(Pubkey.title)
        )
        return list(result.scalars().all())

    async def get_pubkey(self, user: User, title: str) -> Pubkey | None:
        result = await self.db.execute(
            select(Pubkey).where(Pubkey.user_id == user.id, Pubkey.title == title)
        )
        return result.scalars().first()

    async def create_pubkey(self, user: User, title: str, key: str) -> Pubkey:
        errors = []
        if await self._title_taken(user, title):
            errors.append(TITLE_TAKEN)
        normalized = self._normalize(key, errors)
        if errors:
            raise ValidationFailed(errors)

        pubkey = Pubkey(user_id=user.id, title=title, key=normalized)
        self.db.add(pubkey)
        await commit_or_conflict(self.db, TITLE_TAKEN)

        logger.info("pubkey.created", user=user.name, title=title)
        return pubkey

    async def update_pubkey(
        self,
        pubkey: Pubkey,
        title: str | None = None,
        key: str | None = None,
    ) -> Pubkey:
        errors = []
        if (
            title is not None
            and title != pubkey.title
            and await self._title_taken(pubkey.owner, title)
        ):
            errors.append(TITLE_TAKEN)
        normalized = self._normalize(key, errors) if key is not None else None
        if errors:
            raise ValidationFailed(errors)

        if title is not None:
            pubkey.title = title
        if normalized is not None:
            pubkey.key = normalized

        await commit_or_conflict(self.db, TITLE_TAKEN)
        logger.info("pubkey.updated", user=pubkey.owner.name, title=pubkey.title)
        return pubkey

    async def delete_pubkey(self, pubkey: Pubkey) -> None:
        owner, title = pubkey.owner.name, pubkey.title
        await self.db.delete(pubkey)
        await self.db.commit()
        logger.info("pubkey.deleted", user=owner, title=title)

    @staticmethod
    def _normalize(key: str, errors: list[str]) -> str | None:
        try:
            return normalize_key(key)
        except InvalidKeyError:
            errors.append(KEY_INVALID)
            return None

    async def _title_taken(self, user: User, title: str) -> bool:
        result = await self.db.execute(
            select(Pubkey.id).where(Pubkey.user_id == user.id, Pubkey.title == title)
        )
        return result.first() is not None
