"""Pydantic schemas for projects."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Schema for creating a project."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    background: str = Field(..., min_length=1)
    team_id: Optional[uuid.UUID] = None
    is_public: bool = False


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    background: Optional[str] = Field(None, min_length=1)
    is_public: Optional[bool] = None
