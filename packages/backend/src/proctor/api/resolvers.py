"""Resource resolution — path segments to existing entities.

Each resolver looks one segment up, raises NotFound when it is absent,
and binds the result into the request context. The pubkey resolver
depends on the user resolver, so a missing user stops the request
before any pubkey lookup happens. Routes list resolvers ahead of their
guards, which makes a 404 win over a 403 for the same path.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.auth.context import RequestContext
from proctor.auth.dependencies import get_context
from proctor.db.engine import get_db
from proctor.db.models import Pubkey, Team, User
from proctor.errors import NotFound
from proctor.services.pubkey_service import PubkeyService
from proctor.services.team_service import TeamService
from proctor.services.user_service import UserService


async def resolve_user(
    name: str,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await UserService(db).get_user(name)
    if user is None:
        raise NotFound()
    ctx.bind("user", user)
    return user


async def resolve_pubkey(
    title: str,
    user: User = Depends(resolve_user),
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
) -> Pubkey:
    pubkey = await PubkeyService(db).get_pubkey(user, title)
    if pubkey is None:
        raise NotFound()
    ctx.bind("pubkey", pubkey)
    return pubkey


async def resolve_team(
    name: str,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
) -> Team:
    team = await TeamService(db).get_team(name)
    if team is None:
        raise NotFound()
    ctx.bind("team", team)
    return team
