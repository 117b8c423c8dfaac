"""Category model scoped to a user, a team, or everyone."""

from sqlalchemy import CheckConstraint, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from promptspace.access.scopes import ScopedResourceMixin
from promptspace.models.base import TimestampedUUIDModel


class Category(ScopedResourceMixin, TimestampedUUIDModel):
    """Prompt category owned by a personal, team or public scope."""

    __tablename__ = "categories"
    __table_args__ = (
        CheckConstraint(
            "(scope_type = 'public' AND scope_id IS NULL) OR "
            "(scope_type IN ('personal', 'team') AND scope_id IS NOT NULL)",
            name="ck_categories_scope_discriminant",
        ),
        # PUBLIC rows have a NULL scope_id, so their names are checked in the service
        Index(
            "uq_categories_active_scope_name",
            "scope_type",
            "scope_id",
            "name",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index("ix_categories_scope", "scope_type", "scope_id", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)  # Hex color
