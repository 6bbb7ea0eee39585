"""HTTP Basic authentication — credentials in, verified principal name out.

A name with a user row must match that row's bcrypt hash. A name without
one is accepted only as the bootstrap admin from settings. Everything
else is 401 with a Basic challenge. The row loaded for the password
check travels with the Principal so identity resolution does not fetch
it again.
"""

import secrets
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proctor.auth.password import verify_password
from proctor.config import settings
from proctor.db.engine import get_db
from proctor.db.models import User

logger = structlog.get_logger()

REALM = "proctor"

basic_scheme = HTTPBasic(realm=REALM)


@dataclass(frozen=True)
class Principal:
    """An authenticated name, plus its user row when one was loaded."""

    name: str
    user: Optional[User] = None


def is_bootstrap_admin(username: str, password: str) -> bool:
    """Check credentials against the configured bootstrap admin."""
    if not settings.admin_username or not settings.admin_password:
        return False
    name_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    return name_ok and password_ok


async def get_principal(
    credentials: HTTPBasicCredentials = Depends(basic_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """FastAPI dependency — the authenticated principal."""
    result = await db.execute(select(User).where(User.name == credentials.username))
    user = result.scalars().first()

    if user is not None:
        authenticated = verify_password(credentials.password, user.password_hash)
    else:
        authenticated = is_bootstrap_admin(credentials.username, credentials.password)

    if not authenticated:
        logger.info("auth.rejected", principal=credentials.username)
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )
    return Principal(name=credentials.username, user=user)
