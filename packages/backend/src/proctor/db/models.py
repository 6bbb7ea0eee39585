"""SQLAlchemy ORM models — single source of truth for the database schema.

Four tables: users own pubkeys, and memberships link users to teams.
Uniqueness lives in the database so concurrent writers are caught at
commit time:
- users.name and teams.name are globally unique
- pubkeys.title is unique per owning user only
- a (user, team) pair has at most one membership row

Foreign keys cascade on delete; services also delete dependents
explicitly so stores without FK enforcement behave the same.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from proctor.sshkeys import fingerprint


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A person with a login, a role, and SSH keys.

    A User built for an unregistered principal is never added to a
    session; see proctor.auth.identity.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user"
    )  # admin, user
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    pubkeys: Mapped[list["Pubkey"]] = relationship(
        back_populates="owner",
        cascade="all",
        passive_deletes=True,
    )
    memberships: Mapped[list["Membership"]] = relationship(
        back_populates="user",
        cascade="all",
        passive_deletes=True,
    )


class Pubkey(Base):
    """An SSH public key owned by exactly one user."""

    __tablename__ = "pubkeys"
    __table_args__ = (
        UniqueConstraint("user_id", "title", name="uq_pubkeys_user_title"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Owner is always needed for ability checks, so load it with the key.
    owner: Mapped["User"] = relationship(back_populates="pubkeys", lazy="joined")

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.key)


class Team(Base):
    """A named group of users. Its pubkeys are its members' pubkeys."""

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    memberships: Mapped[list["Membership"]] = relationship(
        back_populates="team",
        cascade="all",
        passive_deletes=True,
    )


class Membership(Base):
    """Pure link between a user and a team, keyed by the pair."""

    __tablename__ = "memberships"
    __table_args__ = (Index("ix_memberships_team_id", "team_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True
    )

    user: Mapped["User"] = relationship(back_populates="memberships")
    team: Mapped["Team"] = relationship(back_populates="memberships")
