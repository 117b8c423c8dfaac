"""Team models for multi-tenant scoping."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from promptspace.models.base import TimestampedUUIDModel
from .roles import TeamRole


class Team(TimestampedUUIDModel):
    """Team/tenant entity owning team-scoped resources."""

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Owner/creator
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class TeamMember(TimestampedUUIDModel):
    """User membership in a team with role-based access."""

    __tablename__ = "team_members"
    __table_args__ = (
        # One active membership per (team, user); deactivated rows are history
        Index(
            "uq_team_members_active_pair",
            "team_id",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Role within the team
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TeamRole.VIEWER.value
    )  # owner, admin, editor, viewer

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    invited_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    @property
    def team_role(self) -> TeamRole:
        return TeamRole(self.role)
