"""Identity resolution — principal name to User, once per request.

A principal with a user row gets that row. A principal without one gets
a transient User carrying settings.unregistered_principal_role. The
transient User is never added to a session, so it disappears with the
request and the next request looks the name up again.

With the default role of "admin", every request from a principal that
authenticated but has no row yet is an admin request. That currently
only happens for the bootstrap admin.
"""

import structlog
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.db.models import User

logger = structlog.get_logger()


class IdentityResolver:
    """Looks up or synthesizes the User behind a principal name."""

    def __init__(self, db: AsyncSession, unregistered_role: str):
        self.db = db
        self.unregistered_role = unregistered_role

    async def resolve(self, principal: str, user: User | None = None) -> User:
        """Return the User behind principal.

        A row the caller already loaded for this principal is used as is;
        otherwise the name is looked up.
        """
        if user is None or user.name != principal:
            result = await self.db.execute(select(User).where(User.name == principal))
            user = result.scalars().first()
        if user is not None:
            return user

        logger.warning(
            "identity.unregistered_principal",
            principal=principal,
            role=self.unregistered_role,
        )
        return User(name=principal, role=self.unregistered_role)


def is_registered(user: User) -> bool:
    """True when the User is backed by a stored row."""
    return inspect(user).has_identity
