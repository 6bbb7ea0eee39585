"""Store write helpers that turn uniqueness violations into 422s.

Services pre-check uniqueness for friendly messages, but they are not the
only writer: a concurrent request can win the race between the check and
the write. The database constraint catches that, and these helpers turn
the IntegrityError into ValidationFailed after rolling back.
"""

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.errors import ValidationFailed

logger = structlog.get_logger()


async def flush_or_conflict(db: AsyncSession, message: str) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("store.conflict", message=message, error=str(e.orig))
        raise ValidationFailed([message]) from e


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info("store.conflict", message=message, error=str(e.orig))
        raise ValidationFailed([message]) from e
