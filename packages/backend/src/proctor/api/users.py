"""User, pubkey, and user-team API routes.

Routes handle HTTP concerns (status codes, Location headers); services
handle validation and writes. Each guarded route lists its dependencies
in evaluation order: resolvers (404), then role guard, then ability
guard (403).
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.api.resolvers import resolve_pubkey, resolve_user
from proctor.auth.dependencies import require_ability, require_roles
from proctor.auth.roles import ADMIN, USER
from proctor.db.engine import get_db
from proctor.db.models import Pubkey, User
from proctor.paths import USERS_PATH, user_path, user_pubkey_path
from proctor.schemas.pubkey import PubkeyCreate, PubkeyRead, PubkeyUpdate
from proctor.schemas.team import TeamRead
from proctor.schemas.user import UserCreate, UserRead, UserUpdate
from proctor.services.pubkey_service import PubkeyService
from proctor.services.user_service import UserService

router = APIRouter()


def _users(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _pubkeys(db: AsyncSession = Depends(get_db)) -> PubkeyService:
    return PubkeyService(db)


# ─── Users ──────────────────────────────────────────────

@router.get(USERS_PATH, response_model=list[UserRead])
async def list_users(svc: UserService = Depends(_users)):
    return await svc.list_users()


@router.get(USERS_PATH + "/{name}", response_model=UserRead)
async def get_user(user: User = Depends(resolve_user)):
    return user


@router.post(
    USERS_PATH,
    response_model=UserRead,
    status_code=201,
    dependencies=[Depends(require_roles(ADMIN))],
)
async def create_user(
    body: UserCreate,
    response: Response,
    svc: UserService = Depends(_users),
):
    user = await svc.create_user(name=body.name, password=body.password, role=body.role)
    response.headers["Location"] = user_path(user.name)
    return user


@router.patch(
    USERS_PATH + "/{name}",
    response_model=UserRead,
    dependencies=[
        Depends(resolve_user),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("user")),
    ],
)
async def update_user(
    body: UserUpdate,
    response: Response,
    user: User = Depends(resolve_user),
    svc: UserService = Depends(_users),
):
    user = await svc.update_user(
        user, name=body.name, role=body.role, password=body.password
    )
    response.headers["Location"] = user_path(user.name)
    return user


@router.delete(
    USERS_PATH + "/{name}",
    status_code=204,
    dependencies=[
        Depends(resolve_user),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("user")),
    ],
)
async def delete_user(
    user: User = Depends(resolve_user),
    svc: UserService = Depends(_users),
):
    await svc.delete_user(user)
    return Response(status_code=204)


@router.get(USERS_PATH + "/{name}/teams", response_model=list[TeamRead])
async def list_user_teams(
    user: User = Depends(resolve_user),
    svc: UserService = Depends(_users),
):
    return await svc.list_teams(user)


# ─── Pubkeys ────────────────────────────────────────────

@router.get(USERS_PATH + "/{name}/pubkeys", response_model=list[PubkeyRead])
async def list_pubkeys(
    user: User = Depends(resolve_user),
    svc: PubkeyService = Depends(_pubkeys),
):
    return await svc.list_pubkeys(user)


@router.get(USERS_PATH + "/{name}/pubkeys/{title}", response_model=PubkeyRead)
async def get_pubkey(pubkey: Pubkey = Depends(resolve_pubkey)):
    return pubkey


@router.post(
    USERS_PATH + "/{name}/pubkeys",
    response_model=PubkeyRead,
    status_code=201,
    dependencies=[
        Depends(resolve_user),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("user")),
    ],
)
async def create_pubkey(
    body: PubkeyCreate,
    response: Response,
    user: User = Depends(resolve_user),
    svc: PubkeyService = Depends(_pubkeys),
):
    pubkey = await svc.create_pubkey(user, title=body.title, key=body.key)
    response.headers["Location"] = user_pubkey_path(user.name, pubkey.title)
    return pubkey


@router.patch(
    USERS_PATH + "/{name}/pubkeys/{title}",
    response_model=PubkeyRead,
    dependencies=[
        Depends(resolve_pubkey),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("pubkey")),
    ],
)
async def update_pubkey(
    body: PubkeyUpdate,
    response: Response,
    user: User = Depends(resolve_user),
    pubkey: Pubkey = Depends(resolve_pubkey),
    svc: PubkeyService = Depends(_pubkeys),
):
    pubkey = await svc.update_pubkey(pubkey, title=body.title, key=body.key)
    response.headers["Location"] = user_pubkey_path(user.name, pubkey.title)
    return pubkey


@router.delete(
    USERS_PATH + "/{name}/pubkeys/{title}",
    status_code=204,
    dependencies=[
        Depends(resolve_pubkey),
        Depends(require_roles(ADMIN, USER)),
        Depends(require_ability("pubkey")),
    ],
)
async def delete_pubkey(
    pubkey: Pubkey = Depends(resolve_pubkey),
    svc: PubkeyService = Depends(_pubkeys),
):
    await svc.delete_pubkey(pubkey)
    return Response(status_code=204)
