"""Prompt coordinator: authorization plus delegation to the version history engine."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from promptspace.access.resolver import ScopeResolver
from promptspace.core import messages
from promptspace.core.database import atomic
from promptspace.core.errors import NotFoundError, parse_payload
from promptspace.projects.service import ProjectService
from promptspace.teams.crud import MembershipDirectory
from promptspace.teams.roles import TeamRole
from .ledger import VersionHistoryEngine
from .models import Prompt, PromptVersion
from .schemas import PromptCreate, PromptUpdate, RevertRequest


logger = logging.getLogger("promptspace.prompts.service")


class PromptService:
    """Entry points for prompt reads, mutations and version history."""

    @staticmethod
    def get_by_id(db: Session, prompt_id: uuid.UUID) -> Optional[Prompt]:
        return (
            db.query(Prompt)
            .filter(
                Prompt.id == prompt_id,
                Prompt.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def get_or_404(db: Session, prompt_id: uuid.UUID) -> Prompt:
        prompt = PromptService.get_by_id(db, prompt_id)
        if not prompt:
            raise NotFoundError(messages.PROMPT_NOT_FOUND)
        return prompt

    @staticmethod
    def create(db: Session, principal_id: uuid.UUID, payload) -> Prompt:
        """Create a prompt and its first version."""
        data = parse_payload(PromptCreate, payload)

        if data.team_id is not None:
            MembershipDirectory.require_role(db, data.team_id, principal_id, TeamRole.VIEWER)
        if data.project_id is not None:
            project = ProjectService.get_or_404(db, data.project_id)
            ScopeResolver.require_write(principal_id, project)

        with atomic(db):
            prompt = Prompt(
                owner_id=principal_id,
                team_id=data.team_id,
                project_id=data.project_id,
                is_public=data.is_public,
                is_template=data.is_template,
                title=data.title,
                content=data.content,
                description=data.description,
                category=data.category,
                tags=data.tags,
            )
            db.add(prompt)
            db.flush()
            VersionHistoryEngine.create(db, prompt, principal_id, data.change_log)

        db.refresh(prompt)
        logger.info("Prompt created: prompt_id=%s, owner_id=%s", prompt.id, principal_id)
        return prompt

    @staticmethod
    def get(db: Session, principal_id: Optional[uuid.UUID], prompt_id: uuid.UUID) -> Prompt:
        prompt = PromptService.get_or_404(db, prompt_id)
        ScopeResolver.require_read(db, principal_id, prompt)
        return prompt

    @staticmethod
    def list_visible(
        db: Session,
        principal_id: Optional[uuid.UUID],
        category: Optional[str] = None,
        is_template: Optional[bool] = None,
    ) -> List[Prompt]:
        """Public prompts plus the principal's own, most recently updated first."""
        query = ScopeResolver.visible_query(db, principal_id, Prompt)
        if category:
            query = query.filter(Prompt.category == category)
        if is_template is not None:
            query = query.filter(Prompt.is_template.is_(is_template))
        return query.order_by(Prompt.updated_at.desc()).all()

    @staticmethod
    def list_owned(db: Session, principal_id: uuid.UUID) -> List[Prompt]:
        return (
            db.query(Prompt)
            .filter(
                Prompt.owner_id == principal_id,
                Prompt.is_active.is_(True),
            )
            .order_by(Prompt.updated_at.desc())
            .all()
        )

    @staticmethod
    def list_for_project(
        db: Session,
        principal_id: Optional[uuid.UUID],
        project_id: uuid.UUID,
    ) -> List[Prompt]:
        """Readable prompts attached to a readable project."""
        project = ProjectService.get(db, principal_id, project_id)
        return (
            ScopeResolver.visible_query(db, principal_id, Prompt)
            .filter(Prompt.project_id == project.id)
            .order_by(Prompt.updated_at.desc())
            .all()
        )

    @staticmethod
    def update(
        db: Session,
        principal_id: uuid.UUID,
        prompt_id: uuid.UUID,
        payload,
    ) -> Prompt:
        """Apply settings and content changes; content changes add a version."""
        data = parse_payload(PromptUpdate, payload)
        prompt = PromptService.get_or_404(db, prompt_id)
        ScopeResolver.require_write(principal_id, prompt)

        with atomic(db):
            for field, value in data.settings().items():
                setattr(prompt, field, value)
            db.add(prompt)
            db.flush()

            changes = data.changes()
            if changes:
                VersionHistoryEngine.apply_patch(
                    db, prompt_id, principal_id, changes, data.change_log
                )

        db.refresh(prompt)
        return prompt

    @staticmethod
    def revert(
        db: Session,
        principal_id: uuid.UUID,
        prompt_id: uuid.UUID,
        payload,
    ) -> Prompt:
        """Restore an earlier version's content as a new version."""
        data = parse_payload(RevertRequest, payload)
        PromptService.get_or_404(db, prompt_id)
        VersionHistoryEngine.revert(db, prompt_id, principal_id, data.version, data.change_log)
        prompt = PromptService.get_or_404(db, prompt_id)
        db.refresh(prompt)
        return prompt

    @staticmethod
    def history(
        db: Session,
        principal_id: Optional[uuid.UUID],
        prompt_id: uuid.UUID,
    ) -> List[PromptVersion]:
        PromptService.get(db, principal_id, prompt_id)
        return VersionHistoryEngine.history(db, prompt_id)

    @staticmethod
    def get_version(
        db: Session,
        principal_id: Optional[uuid.UUID],
        prompt_id: uuid.UUID,
        version: int,
    ) -> PromptVersion:
        PromptService.get(db, principal_id, prompt_id)
        return VersionHistoryEngine.get_version(db, prompt_id, version)

    @staticmethod
    def compare(
        db: Session,
        principal_id: Optional[uuid.UUID],
        prompt_id: uuid.UUID,
        from_version: int,
        to_version: int,
    ) -> Dict[str, Dict[str, Any]]:
        PromptService.get(db, principal_id, prompt_id)
        return VersionHistoryEngine.compare(db, prompt_id, from_version, to_version)

    @staticmethod
    def fork(db: Session, principal_id: uuid.UUID, prompt_id: uuid.UUID) -> Prompt:
        """Copy a readable prompt into a new private prompt owned by the principal."""
        source = PromptService.get(db, principal_id, prompt_id)
        source_version = source.current_version
        content = source.snapshot()
        # The fork must not share the source's mutable JSON value
        if content["tags"] is not None:
            content["tags"] = list(content["tags"])

        with atomic(db):
            fork = Prompt(
                owner_id=principal_id,
                parent_id=source.id,
                is_public=False,
                is_template=source.is_template,
                **content,
            )
            db.add(fork)
            db.flush()
            VersionHistoryEngine.create(
                db,
                fork,
                principal_id,
                messages.VERSION_FORK_CHANGE_LOG.format(
                    prompt_id=source.id, version=source_version
                ),
            )

        db.refresh(fork)
        logger.info(
            "Prompt forked: prompt_id=%s, parent_id=%s, owner_id=%s",
            fork.id,
            prompt_id,
            principal_id,
        )
        return fork

    @staticmethod
    def delete(db: Session, principal_id: uuid.UUID, prompt_id: uuid.UUID) -> None:
        """Soft delete a prompt; its version history is kept."""
        prompt = PromptService.get_or_404(db, prompt_id)
        ScopeResolver.require_write(principal_id, prompt)

        with atomic(db):
            prompt.soft_delete(principal_id)
            db.add(prompt)

        logger.info("Prompt deleted: prompt_id=%s, by=%s", prompt_id, principal_id)
