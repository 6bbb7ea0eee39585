"""FastAPI auth dependencies.

get_context is applied to every protected router, so it runs first and
FastAPI caches it for the rest of the request: the identity is resolved
once per request and never shared between requests.

require_roles and require_ability are route-level guards. Declare them
in a route's dependencies list after the resolvers they read from:

    dependencies=[
        Depends(resolve_user),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("user")),
    ]
"""

from typing import Callable

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.auth.basic import Principal, get_principal
from proctor.auth.context import RequestContext
from proctor.auth.identity import IdentityResolver, is_registered
from proctor.auth.roles import require_any_role
from proctor.config import settings
from proctor.db.engine import get_db
from proctor.db.models import User
from proctor.errors import Forbidden

logger = structlog.get_logger()


async def get_identity(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> User:
    resolver = IdentityResolver(db, settings.unregistered_principal_role)
    return await resolver.resolve(principal.name, principal.user)


async def get_context(identity: User = Depends(get_identity)) -> RequestContext:
    return RequestContext(identity)


def require_roles(*roles: str) -> Callable:
    """Route guard: the identity must hold one of the given roles."""
    allowed = frozenset(roles)

    async def guard(ctx: RequestContext = Depends(get_context)) -> None:
        try:
            require_any_role(ctx.identity, allowed)
        except Forbidden:
            logger.info(
                "authz.role_denied",
                identity=ctx.identity.name,
                role=ctx.identity.role,
                registered=is_registered(ctx.identity),
                allowed=sorted(allowed),
            )
            raise

    return guard


def require_ability(*refs: str) -> Callable:
    """Route guard: the identity must be able to use every referenced resource.

    References are checked in the order given; the first failure stops
    the rest.
    """

    async def guard(ctx: RequestContext = Depends(get_context)) -> None:
        for ref in refs:
            if not ctx.ability.can_use(ctx.resource(ref)):
                logger.info(
                    "authz.ability_denied",
                    identity=ctx.identity.name,
                    resource=ref,
                )
                raise Forbidden()

    return guard
