"""Project model grouping prompts around shared background context."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptspace.access.scopes import OwnedResourceMixin
from promptspace.models.base import TimestampedUUIDModel


class Project(OwnedResourceMixin, TimestampedUUIDModel):
    """Project owned by a user, optionally shared with a team."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Project background, used as system-level context for its prompts
    background: Mapped[str] = mapped_column(Text, nullable=False)
