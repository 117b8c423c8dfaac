"""Pydantic schemas for team management."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from promptspace.core import messages
from .roles import TeamRole


class TeamCreate(BaseModel):
    """Schema for creating a team."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(messages.TEAM_NAME_REQUIRED)
        return value


class TeamUpdate(BaseModel):
    """Schema for updating a team."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError(messages.TEAM_NAME_REQUIRED)
        return value


class MemberRoleUpdate(BaseModel):
    """Schema for assigning a member role."""
    role: TeamRole
