"""Authorization unit tests — ability engine, role guard, request context.

These run on plain model instances; no database involved.

Pattern: test_<subject>_<scenario>
"""

import pytest

from proctor.auth.ability import DEFAULT_CHECKERS, Ability
from proctor.auth.context import RequestContext
from proctor.auth.roles import ADMIN, USER, has_any_role, require_any_role
from proctor.db.models import Pubkey, Team, User
from proctor.errors import Forbidden


def _user(name: str, role: str = USER) -> User:
    return User(name=name, role=role)


def _pubkey(owner: User, title: str = "laptop") -> Pubkey:
    return Pubkey(title=title, key="ssh-ed25519 AAAA", owner=owner)


# ═══════════════════════════════════════════════════════════
# Ability engine
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize("target", ["alice", "bob", "ghost", "Alice", ""])
def test_user_role_can_use_only_own_user(target):
    """A user-role identity may use a User record iff the names match."""
    ability = Ability(_user("alice"))
    assert ability.can_use(_user(target)) is (target == "alice")


@pytest.mark.parametrize("target", ["alice", "bob", "ghost"])
def test_admin_can_use_any_user(target):
    ability = Ability(_user("root", ADMIN))
    assert ability.can_use(_user(target)) is True


def test_user_role_can_use_own_pubkey():
    alice = _user("alice")
    assert Ability(alice).can_use(_pubkey(alice)) is True


def test_user_role_cannot_use_someone_elses_pubkey():
    bob = _user("bob")
    assert Ability(_user("alice")).can_use(_pubkey(bob)) is False


def test_pubkey_ownership_compares_owner_name_not_instance():
    """A different instance with the owner's name still owns the key."""
    key = _pubkey(_user("alice"))
    assert Ability(_user("alice")).can_use(key) is True


def test_admin_can_use_any_pubkey():
    assert Ability(_user("root", ADMIN)).can_use(_pubkey(_user("bob"))) is True


def test_admin_can_use_kinds_without_checker():
    assert Ability(_user("root", ADMIN)).can_use(Team(name="ops")) is True


def test_user_role_denied_for_kinds_without_checker():
    assert Ability(_user("alice")).can_use(Team(name="ops")) is False
    assert Ability(_user("alice")).can_use(object()) is False


def test_new_kind_is_added_with_a_checker():
    """Extending the engine means supplying a checker, not editing call sites."""

    class TeamLeadCapability:
        def owned_by(self, resource, identity):
            return resource.name == f"{identity.name}-team"

    checkers = {**DEFAULT_CHECKERS, Team: TeamLeadCapability()}
    ability = Ability(_user("alice"), checkers=checkers)
    assert ability.can_use(Team(name="alice-team")) is True
    assert ability.can_use(Team(name="bob-team")) is False
    # Existing kinds keep their rules
    assert ability.can_use(_user("alice")) is True


# ═══════════════════════════════════════════════════════════
# Role guard
# ═══════════════════════════════════════════════════════════


def test_role_guard_allows_member_role():
    require_any_role(_user("alice"), frozenset({ADMIN, USER}))


def test_role_guard_rejects_non_member_role():
    with pytest.raises(Forbidden):
        require_any_role(_user("alice"), frozenset({ADMIN}))


def test_has_any_role():
    assert has_any_role(_user("root", ADMIN), frozenset({ADMIN}))
    assert not has_any_role(_user("alice"), frozenset({ADMIN}))
    assert not has_any_role(_user("alice"), frozenset())


# ═══════════════════════════════════════════════════════════
# Request context
# ═══════════════════════════════════════════════════════════


def test_context_binds_and_returns_resources():
    ctx = RequestContext(_user("alice"))
    target = _user("bob")
    ctx.bind("user", target)
    assert ctx.resource("user") is target
    assert ctx.is_bound("user")
    assert not ctx.is_bound("pubkey")


def test_context_reference_is_bound_once():
    ctx = RequestContext(_user("alice"))
    ctx.bind("user", _user("bob"))
    with pytest.raises(RuntimeError):
        ctx.bind("user", _user("carol"))


def test_context_unresolved_reference_is_an_error():
    ctx = RequestContext(_user("alice"))
    with pytest.raises(LookupError):
        ctx.resource("pubkey")


def test_context_ability_uses_its_identity():
    ctx = RequestContext(_user("alice"))
    assert ctx.ability.can_use(_user("alice"))
    assert not ctx.ability.can_use(_user("bob"))
