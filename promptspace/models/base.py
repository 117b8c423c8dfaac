import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base declarative class."""


class UUIDModel(Base):
    """Abstract base with UUID PK and creation timestamp."""

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TimestampedUUIDModel(UUIDModel):
    """Abstract base with timestamps, soft delete and audit fields."""

    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Soft delete: inactive rows are never removed
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deleted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    def soft_delete(self, deleted_by: uuid.UUID) -> None:
        self.is_active = False
        self.deleted_at = datetime.now(timezone.utc)
        self.deleted_by = deleted_by
