"""Pydantic schemas for prompts and their versions."""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PromptContent(BaseModel):
    """Full content of a prompt version."""
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None


class PromptCreate(PromptContent):
    """Schema for creating a prompt."""
    is_public: bool = False
    is_template: bool = False
    team_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    change_log: Optional[str] = None


class PromptPatch(BaseModel):
    """Content fields to overlay on the previous version; unset fields are inherited."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None

    @field_validator("title", "content")
    @classmethod
    def reject_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PromptUpdate(PromptPatch):
    """Schema for updating a prompt: settings plus a content patch."""
    is_public: Optional[bool] = None
    is_template: Optional[bool] = None
    change_log: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(
            exclude_unset=True,
            exclude={"is_public", "is_template", "change_log"},
        )

    def settings(self) -> dict:
        return {
            field: getattr(self, field)
            for field in ("is_public", "is_template")
            if field in self.model_fields_set and getattr(self, field) is not None
        }


class RevertRequest(BaseModel):
    """Schema for reverting to an earlier version."""
    version: int = Field(..., ge=1)
    change_log: Optional[str] = None
