"""Pydantic schemas for categories."""

import uuid
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from promptspace.access.scopes import ScopeType

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Category name is required")
    return value


CategoryName = Annotated[str, Field(min_length=1, max_length=100), AfterValidator(_clean_name)]


class CategoryCreate(BaseModel):
    """Schema for creating a category."""
    name: CategoryName
    description: Optional[str] = None
    scope_type: ScopeType
    scope_id: Optional[uuid.UUID] = None  # Team ID for team categories
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class CategoryUpdate(BaseModel):
    """Schema for updating a category."""
    name: Optional[CategoryName] = None
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
