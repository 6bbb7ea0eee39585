"""Proctor — directory of users, their SSH public keys, and teams.

Serves users, pubkeys, teams, and team memberships over HTTP, guarded
by role membership and owner-based ability checks.
"""

__version__ = "0.1.0"
