"""Project coordinator."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from promptspace.access.resolver import ScopeResolver
from promptspace.core import messages
from promptspace.core.database import atomic
from promptspace.core.errors import NotFoundError, parse_payload
from promptspace.teams.crud import MembershipDirectory
from promptspace.teams.roles import TeamRole
from .models import Project
from .schemas import ProjectCreate, ProjectUpdate


logger = logging.getLogger("promptspace.projects.service")


class ProjectService:
    """Entry points for project reads and mutations."""

    @staticmethod
    def get_by_id(db: Session, project_id: uuid.UUID) -> Optional[Project]:
        return (
            db.query(Project)
            .filter(
                Project.id == project_id,
                Project.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def get_or_404(db: Session, project_id: uuid.UUID) -> Project:
        project = ProjectService.get_by_id(db, project_id)
        if not project:
            raise NotFoundError(messages.PROJECT_NOT_FOUND)
        return project

    @staticmethod
    def create(db: Session, principal_id: uuid.UUID, payload) -> Project:
        """Create a project; team projects require team membership."""
        data = parse_payload(ProjectCreate, payload)

        if data.team_id is not None:
            MembershipDirectory.require_role(db, data.team_id, principal_id, TeamRole.VIEWER)

        with atomic(db):
            project = Project(
                name=data.name,
                description=data.description,
                background=data.background,
                owner_id=principal_id,
                team_id=data.team_id,
                is_public=data.is_public,
            )
            db.add(project)

        db.refresh(project)
        logger.info(
            "Project created: project_id=%s, owner_id=%s, team_id=%s",
            project.id,
            principal_id,
            data.team_id,
        )
        return project

    @staticmethod
    def get(db: Session, principal_id: Optional[uuid.UUID], project_id: uuid.UUID) -> Project:
        project = ProjectService.get_or_404(db, project_id)
        ScopeResolver.require_read(db, principal_id, project)
        return project

    @staticmethod
    def list_visible(
        db: Session,
        principal_id: uuid.UUID,
        team_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Project]:
        """Projects the principal can read, most recently updated first."""
        query = ScopeResolver.visible_query(db, principal_id, Project)
        if team_id is not None:
            MembershipDirectory.require_role(db, team_id, principal_id, TeamRole.VIEWER)
            query = query.filter(Project.team_id == team_id)
        if search:
            query = query.filter(Project.name.ilike(f"%{search}%"))
        return query.order_by(Project.updated_at.desc()).limit(limit).offset(offset).all()

    @staticmethod
    def list_public(
        db: Session,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Project]:
        query = db.query(Project).filter(
            Project.is_active.is_(True),
            Project.is_public.is_(True),
        )
        if search:
            query = query.filter(Project.name.ilike(f"%{search}%"))
        return query.order_by(Project.updated_at.desc()).limit(limit).offset(offset).all()

    @staticmethod
    def update(
        db: Session,
        principal_id: uuid.UUID,
        project_id: uuid.UUID,
        payload,
    ) -> Project:
        """Update a project (owner only, also for team projects)."""
        data = parse_payload(ProjectUpdate, payload)
        project = ProjectService.get_or_404(db, project_id)
        ScopeResolver.require_write(principal_id, project)

        with atomic(db):
            for field in data.model_fields_set:
                value = getattr(data, field)
                if value is None and field != "description":
                    continue
                setattr(project, field, value)
            db.add(project)

        db.refresh(project)
        return project

    @staticmethod
    def delete(db: Session, principal_id: uuid.UUID, project_id: uuid.UUID) -> None:
        """Soft delete a project (owner only)."""
        project = ProjectService.get_or_404(db, project_id)
        ScopeResolver.require_write(principal_id, project)

        with atomic(db):
            project.soft_delete(principal_id)
            db.add(project)

        logger.info("Project deleted: project_id=%s, by=%s", project_id, principal_id)
