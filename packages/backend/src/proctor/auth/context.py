"""Per-request context — the identity and every resource resolved so far.

Resolvers bind resources under stable reference names ("user", "pubkey",
"team") as they walk the path left to right. A name is bound at most
once; later stages read it and never look it up again.
"""

from proctor.auth.ability import Ability
from proctor.db.models import User


class RequestContext:
    """Identity plus named resource references for one request."""

    def __init__(self, identity: User):
        self.identity = identity
        self.ability = Ability(identity)
        self._resources: dict[str, object] = {}

    def bind(self, ref: str, resource: object) -> None:
        if ref in self._resources:
            raise RuntimeError(f"Resource reference {ref!r} is already bound")
        self._resources[ref] = resource

    def resource(self, ref: str) -> object:
        try:
            return self._resources[ref]
        except KeyError:
            raise LookupError(
                f"Resource reference {ref!r} was never resolved for this route"
            ) from None

    def is_bound(self, ref: str) -> bool:
        return ref in self._resources
