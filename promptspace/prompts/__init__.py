"""Prompts and their append-only version history."""

from .models import Prompt, PromptVersion
from .schemas import PromptContent, PromptCreate, PromptPatch, PromptUpdate, RevertRequest
from .ledger import VersionHistoryEngine
from .service import PromptService

__all__ = [
    "Prompt",
    "PromptVersion",
    "PromptContent",
    "PromptCreate",
    "PromptPatch",
    "PromptUpdate",
    "RevertRequest",
    "VersionHistoryEngine",
    "PromptService",
]
