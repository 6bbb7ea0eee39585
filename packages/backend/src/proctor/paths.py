"""Canonical resource paths, used for routing and Location headers."""

from urllib.parse import quote

USERS_PATH = "/users"
TEAMS_PATH = "/teams"
MEMBERSHIPS_PATH = "/memberships"


def _segment(value: str) -> str:
    return quote(value, safe="")


def user_path(name: str) -> str:
    return f"{USERS_PATH}/{_segment(name)}"


def user_pubkey_path(name: str, title: str) -> str:
    return f"{user_path(name)}/pubkeys/{_segment(title)}"


def team_path(name: str) -> str:
    return f"{TEAMS_PATH}/{_segment(name)}"
