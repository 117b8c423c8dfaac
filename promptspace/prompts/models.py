"""Prompt models: the materialized prompt and its immutable version ledger."""

import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from promptspace.access.scopes import OwnedResourceMixin
from promptspace.core.errors import InvariantViolationError
from promptspace.models.base import TimestampedUUIDModel, UUIDModel

CONTENT_FIELDS = ("title", "content", "description", "category", "tags")


class Prompt(OwnedResourceMixin, TimestampedUUIDModel):
    """Prompt whose content fields mirror its latest version record."""

    __tablename__ = "prompts"

    # Prompt reads are public or owner only; team_id is informational
    team_grants_read = False

    project_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("projects.id"), nullable=True, index=True
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("prompts.id"), nullable=True
    )
    is_template: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Written only by the version history engine; 0 until version 1 exists
    current_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Materialized content of the latest version
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)

    def snapshot(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in CONTENT_FIELDS}


class PromptVersion(UUIDModel):
    """Immutable content snapshot; one row per prompt version."""

    __tablename__ = "prompt_versions"
    __table_args__ = (
        UniqueConstraint("prompt_id", "version", name="uq_prompt_versions_prompt_version"),
        CheckConstraint("version > 0", name="ck_prompt_versions_positive"),
    )

    prompt_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("prompts.id"), nullable=False, index=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)

    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    change_log: Mapped[str | None] = mapped_column(Text, nullable=True)

    def snapshot(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in CONTENT_FIELDS}


@event.listens_for(PromptVersion, "before_update")
def _reject_version_update(mapper, connection, target):
    raise InvariantViolationError(
        f"Version {target.version} of prompt {target.prompt_id} is immutable"
    )


@event.listens_for(PromptVersion, "before_delete")
def _reject_version_delete(mapper, connection, target):
    raise InvariantViolationError(
        f"Version {target.version} of prompt {target.prompt_id} cannot be deleted"
    )
