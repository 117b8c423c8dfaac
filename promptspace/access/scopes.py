"""Scope partitioning shared by every access-controlled resource."""

import enum
import uuid
from typing import ClassVar, Optional

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class ScopeType(str, enum.Enum):
    PERSONAL = "personal"
    TEAM = "team"
    PUBLIC = "public"


class ScopedResourceMixin:
    """Resource partitioned by an explicit scope discriminant.

    ``scope_id`` is the owning user for PERSONAL, the team for TEAM and
    NULL for PUBLIC.
    """

    scope_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    @property
    def scope(self) -> ScopeType:
        return ScopeType(self.scope_type)

    @property
    def owner_ref(self) -> uuid.UUID:
        return self.created_by

    @property
    def is_publicly_visible(self) -> bool:
        return self.scope is ScopeType.PUBLIC

    @property
    def read_team_id(self) -> Optional[uuid.UUID]:
        return self.scope_id if self.scope is ScopeType.TEAM else None


class OwnedResourceMixin:
    """Resource keyed by its owner with optional team and a public flag."""

    # Whether active membership in ``team_id`` grants read access
    team_grants_read: ClassVar[bool] = True

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @declared_attr
    def team_id(cls) -> Mapped[uuid.UUID | None]:
        return mapped_column(Uuid, ForeignKey("teams.id"), nullable=True, index=True)

    @property
    def owner_ref(self) -> uuid.UUID:
        return self.owner_id

    @property
    def is_publicly_visible(self) -> bool:
        return bool(self.is_public)

    @property
    def read_team_id(self) -> Optional[uuid.UUID]:
        return self.team_id if self.team_grants_read else None
