"""Roles — the coarse authorization tier on every User."""

from proctor.db.models import User
from proctor.errors import Forbidden

ADMIN = "admin"
USER = "user"


def has_any_role(identity: User, roles: frozenset[str]) -> bool:
    return identity.role in roles


def require_any_role(identity: User, roles: frozenset[str]) -> None:
    """Raise Forbidden unless the identity holds one of the roles."""
    if not has_any_role(identity, roles):
        raise Forbidden()
