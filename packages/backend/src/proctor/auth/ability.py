"""Ability engine — may this identity act on this resource instance?

Admins may use anything. Everyone else may use only what they own, and
what "own" means depends on the kind of resource. Each kind gets a
CapabilityChecker; the engine picks one by the resource's type, so a new
kind adds a checker and leaves call sites alone. A kind with no checker
is denied to non-admins.
"""

from collections.abc import Mapping
from typing import Protocol

from proctor.auth.roles import ADMIN
from proctor.db.models import Pubkey, User


class CapabilityChecker(Protocol):
    """Ownership rule for one resource kind."""

    def owned_by(self, resource, identity: User) -> bool:
        ...


class UserCapability:
    """A user owns their own User record."""

    def owned_by(self, resource: User, identity: User) -> bool:
        return resource.name == identity.name


class PubkeyCapability:
    """A user owns the pubkeys attached to them."""

    def owned_by(self, resource: Pubkey, identity: User) -> bool:
        return resource.owner.name == identity.name


DEFAULT_CHECKERS: Mapping[type, CapabilityChecker] = {
    User: UserCapability(),
    Pubkey: PubkeyCapability(),
}


class Ability:
    """Capability checks for one identity."""

    def __init__(
        self,
        identity: User,
        checkers: Mapping[type, CapabilityChecker] = DEFAULT_CHECKERS,
    ):
        self.identity = identity
        self.checkers = checkers

    def can_use(self, resource) -> bool:
        if self.identity.role == ADMIN:
            return True

        checker = self._checker_for(type(resource))
        if checker is None:
            return False
        return checker.owned_by(resource, self.identity)

    def _checker_for(self, kind: type) -> CapabilityChecker | None:
        for klass in kind.__mro__:
            if klass in self.checkers:
                return self.checkers[klass]
        return None
