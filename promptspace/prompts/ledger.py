"""Append-only version history for prompts.

Each prompt owns a ledger of immutable snapshots numbered 1..n. The prompt
row's content fields and ``current_version`` are a projection of the highest
numbered record and are only ever written here, in the same transaction as
the record they mirror.

Version assignment for one prompt is linearized three ways: the prompt row is
locked (``SELECT ... FOR UPDATE``), ``(prompt_id, version)`` is unique, and the
projection moves with a compare-and-swap on ``current_version``. Losing any of
these races raises ``ConflictError``; the caller decides whether to retry.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptspace.access.resolver import ScopeResolver
from promptspace.core import messages
from promptspace.core.database import atomic
from promptspace.core.errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    conflict_from_integrity,
    parse_payload,
)
from .models import Prompt, PromptVersion
from .schemas import PromptPatch


logger = logging.getLogger("promptspace.prompts.ledger")


class VersionHistoryEngine:
    """Maintains the per-prompt snapshot ledger and its current projection."""

    @staticmethod
    def max_version(db: Session, prompt_id: uuid.UUID) -> int:
        """Highest recorded version number, 0 when the prompt has none."""
        latest = (
            db.query(func.max(PromptVersion.version))
            .filter(PromptVersion.prompt_id == prompt_id)
            .scalar()
        )
        return latest or 0

    @staticmethod
    def _get_prompt(db: Session, prompt_id: uuid.UUID, lock: bool = False) -> Prompt:
        query = db.query(Prompt).filter(
            Prompt.id == prompt_id,
            Prompt.is_active.is_(True),
        )
        if lock:
            query = query.with_for_update().populate_existing()
        prompt = query.first()
        if not prompt:
            raise NotFoundError(messages.PROMPT_NOT_FOUND)
        return prompt

    @staticmethod
    def _append(
        db: Session,
        prompt: Prompt,
        snapshot: Dict[str, Any],
        author_id: uuid.UUID,
        change_log: Optional[str],
    ) -> PromptVersion:
        """Write the next record and move the projection onto it.

        Runs inside the caller's transaction and never commits.
        """
        prompt_id = prompt.id
        expected = prompt.current_version
        next_version = VersionHistoryEngine.max_version(db, prompt_id) + 1

        if next_version <= expected:
            logger.error(
                "Ledger behind projection: prompt_id=%s, next_version=%s, current_version=%s",
                prompt_id,
                next_version,
                expected,
            )
            raise InvariantViolationError(
                messages.VERSION_NOT_INCREASING.format(
                    next_version=next_version, current_version=expected
                )
            )

        record = PromptVersion(
            prompt_id=prompt_id,
            version=next_version,
            author_id=author_id,
            change_log=change_log,
            **snapshot,
        )
        db.add(record)
        try:
            db.flush()
        except IntegrityError as exc:
            logger.warning(
                "Version %s of prompt %s was taken by a concurrent writer",
                next_version,
                prompt_id,
            )
            raise conflict_from_integrity(exc, messages.VERSION_CONFLICT)

        result = db.execute(
            update(Prompt)
            .where(Prompt.id == prompt_id, Prompt.current_version == expected)
            .values(current_version=next_version, **snapshot)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Prompt %s moved past version %s during append",
                prompt_id,
                expected,
            )
            raise ConflictError(messages.VERSION_CONFLICT)

        db.expire(prompt)
        logger.info(
            "Prompt version appended: prompt_id=%s, version=%s, author_id=%s",
            prompt_id,
            next_version,
            author_id,
        )
        return record

    @staticmethod
    def create(
        db: Session,
        prompt: Prompt,
        author_id: uuid.UUID,
        change_log: Optional[str] = None,
    ) -> PromptVersion:
        """Write version 1 mirroring the prompt's initial content.

        The prompt must already be flushed; the caller owns the transaction.
        """
        return VersionHistoryEngine._append(
            db,
            prompt,
            prompt.snapshot(),
            author_id,
            change_log or messages.VERSION_INITIAL_CHANGE_LOG,
        )

    @staticmethod
    def apply_patch(
        db: Session,
        prompt_id: uuid.UUID,
        principal_id: uuid.UUID,
        changes: Dict[str, Any],
        change_log: Optional[str] = None,
    ) -> PromptVersion:
        """Overlay ``changes`` on the latest snapshot inside the caller's transaction.

        Always appends, so an empty patch records a change-log-only checkpoint.
        """
        prompt = VersionHistoryEngine._get_prompt(db, prompt_id, lock=True)
        ScopeResolver.require_write(principal_id, prompt)

        snapshot = {**prompt.snapshot(), **changes}
        return VersionHistoryEngine._append(db, prompt, snapshot, principal_id, change_log)

    @staticmethod
    def amend(
        db: Session,
        prompt_id: uuid.UUID,
        principal_id: uuid.UUID,
        patch,
        change_log: Optional[str] = None,
    ) -> PromptVersion:
        """Record a new version with ``patch`` overlaid on the previous content."""
        data = parse_payload(PromptPatch, patch)
        changes = data.changes()

        # Authorize before taking the row lock
        ScopeResolver.require_write(principal_id, VersionHistoryEngine._get_prompt(db, prompt_id))

        with atomic(db):
            record = VersionHistoryEngine.apply_patch(
                db, prompt_id, principal_id, changes, change_log
            )
        db.refresh(record)
        return record

    @staticmethod
    def revert(
        db: Session,
        prompt_id: uuid.UUID,
        principal_id: uuid.UUID,
        target_version: int,
        change_log: Optional[str] = None,
    ) -> PromptVersion:
        """Copy ``target_version`` verbatim into a new highest version."""
        ScopeResolver.require_write(principal_id, VersionHistoryEngine._get_prompt(db, prompt_id))
        target = VersionHistoryEngine.get_version(db, prompt_id, target_version)

        with atomic(db):
            prompt = VersionHistoryEngine._get_prompt(db, prompt_id, lock=True)
            ScopeResolver.require_write(principal_id, prompt)
            record = VersionHistoryEngine._append(
                db,
                prompt,
                target.snapshot(),
                principal_id,
                change_log or messages.VERSION_REVERT_CHANGE_LOG.format(version=target_version),
            )
        db.refresh(record)
        return record

    @staticmethod
    def history(db: Session, prompt_id: uuid.UUID) -> List[PromptVersion]:
        """All records of a prompt, most recent first."""
        return (
            db.query(PromptVersion)
            .filter(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.version.desc())
            .all()
        )

    @staticmethod
    def get_version(db: Session, prompt_id: uuid.UUID, version: int) -> PromptVersion:
        record = (
            db.query(PromptVersion)
            .filter(
                PromptVersion.prompt_id == prompt_id,
                PromptVersion.version == version,
            )
            .first()
        )
        if not record:
            raise NotFoundError(messages.VERSION_NOT_FOUND)
        return record

    @staticmethod
    def compare(
        db: Session,
        prompt_id: uuid.UUID,
        from_version: int,
        to_version: int,
    ) -> Dict[str, Dict[str, Any]]:
        """Fields that differ between two versions, as ``{field: {"from", "to"}}``."""
        before = VersionHistoryEngine.get_version(db, prompt_id, from_version).snapshot()
        after = VersionHistoryEngine.get_version(db, prompt_id, to_version).snapshot()
        return {
            field: {"from": before[field], "to": after[field]}
            for field in before
            if before[field] != after[field]
        }
