"""Proctor CLI — manage users, SSH keys, and teams on a Proctor server.

Usage:
    proctor users                                # List users
    proctor add-user alice --role user -p s3cret # Create a user (admin)
    proctor keys alice                           # List alice's keys
    proctor add-key alice laptop ~/.ssh/id_ed25519.pub
    proctor link alice ops                       # Add alice to team ops (admin)
    proctor team-keys ops >> authorized_keys     # Every key of every ops member

Credentials come from PROCTOR_USERNAME / PROCTOR_PASSWORD, the server
from PROCTOR_API_URL.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

from proctor import __version__
from proctor.paths import (
    MEMBERSHIPS_PATH,
    TEAMS_PATH,
    USERS_PATH,
    team_path,
    user_path,
    user_pubkey_path,
)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("PROCTOR_API_URL", DEFAULT_API_URL).rstrip("/")


def _credentials() -> Optional[tuple[str, str]]:
    username = os.environ.get("PROCTOR_USERNAME")
    if not username:
        return None
    return username, os.environ.get("PROCTOR_PASSWORD", "")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Proctor server."""
    return httpx.AsyncClient(base_url=_api_url(), auth=_credentials(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Inside an already running loop (e.g. an async test) the coroutine is
    offloaded to a worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> None:
    """Exit with the server's error messages unless the response succeeded."""
    if r.is_success:
        return

    errors = None
    try:
        payload = r.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        errors = payload.get("errors")

    if errors:
        for message in errors:
            click.secho(f"Error: {message}", fg="red", err=True)
    else:
        click.secho(f"Error: HTTP {r.status_code}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


async def _request(method: str, path: str, json: dict | None = None) -> httpx.Response:
    async with _client() as c:
        r = await c.request(method, path, json=json)
    _check(r)
    return r


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="proctor")
def main():
    """Proctor — users, SSH public keys, and teams."""


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@main.command()
def users():
    """List all users."""
    r = _run(_request("GET", USERS_PATH))
    _print_table(r.json(), [("NAME", "name", 30), ("ROLE", "role", 8)])


@main.command()
@click.argument("name")
def user(name: str):
    """Show a user, their teams, and their keys."""
    r = _run(_request("GET", user_path(name)))
    data = r.json()
    teams = _run(_request("GET", user_path(name) + "/teams")).json()
    keys = _run(_request("GET", user_path(name) + "/pubkeys")).json()

    click.secho(data["name"], bold=True)
    click.echo(f"  role:  {data['role']}")
    click.echo(f"  teams: {', '.join(t['name'] for t in teams) or '—'}")
    for key in keys:
        click.echo(f"  key:   {key['title']}  {key['fingerprint']}")


@main.command("add-user")
@click.argument("name")
@click.option("--role", "-r", type=click.Choice(["admin", "user"]), default="user")
@click.option("--password", "-p", prompt=True, hide_input=True,
              confirmation_prompt=True, help="Password for the new user")
def add_user(name: str, role: str, password: str):
    """Create a user (admin only)."""
    r = _run(_request("POST", USERS_PATH, {"name": name, "role": role, "password": password}))
    click.secho(f"Created {r.headers.get('Location', user_path(name))}", fg="green")


@main.command("delete-user")
@click.argument("name")
@click.confirmation_option(prompt="This also removes the user's keys and memberships. Continue?")
def delete_user(name: str):
    """Delete a user with their keys and memberships."""
    _run(_request("DELETE", user_path(name)))
    click.secho(f"Deleted user {name}", fg="green")


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
def keys(name: str):
    """List a user's SSH public keys."""
    r = _run(_request("GET", user_path(name) + "/pubkeys"))
    _print_table(r.json(), [("TITLE", "title", 24), ("FINGERPRINT", "fingerprint", 52)])


@main.command("add-key")
@click.argument("name")
@click.argument("title")
@click.argument("keyfile", type=click.File("r"))
def add_key(name: str, title: str, keyfile):
    """Upload the public key in KEYFILE as NAME's key TITLE."""
    body = {"title": title, "key": keyfile.read().strip()}
    r = _run(_request("POST", user_path(name) + "/pubkeys", body))
    click.secho(f"Added {r.json()['fingerprint']} as {title}", fg="green")


@main.command("delete-key")
@click.argument("name")
@click.argument("title")
def delete_key(name: str, title: str):
    """Delete one of a user's keys."""
    _run(_request("DELETE", user_pubkey_path(name, title)))
    click.secho(f"Deleted key {title} of {name}", fg="green")


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


@main.command()
def teams():
    """List all teams."""
    r = _run(_request("GET", TEAMS_PATH))
    for team in r.json():
        click.echo(team["name"])


@main.command("team-keys")
@click.argument("team")
def team_keys(team: str):
    """Print every key of every member of TEAM, authorized_keys style."""
    r = _run(_request("GET", team_path(team) + "/pubkeys"))
    for key in r.json():
        click.echo(key["key"])


@main.command()
@click.argument("user_name", metavar="USER")
@click.argument("team")
def link(user_name: str, team: str):
    """Add USER to TEAM, creating the team if needed (admin only)."""
    r = _run(_request("POST", MEMBERSHIPS_PATH, {"user": user_name, "team": team}))
    click.secho(f"Linked {user_name} → {r.headers.get('Location', team_path(team))}", fg="green")


@main.command()
@click.argument("user_name", metavar="USER")
@click.argument("team")
def unlink(user_name: str, team: str):
    """Remove USER from TEAM (admin only)."""
    _run(_request("DELETE", MEMBERSHIPS_PATH, {"user": user_name, "team": team}))
    click.secho(f"Unlinked {user_name} from {team}", fg="green")


if __name__ == "__main__":
    main()
