"""Visibility and mutation rights over scoped resources."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session

from promptspace.core import messages
from promptspace.core.errors import ForbiddenError
from promptspace.teams.crud import MembershipDirectory
from .scopes import OwnedResourceMixin, ScopedResourceMixin, ScopeType


logger = logging.getLogger("promptspace.access.resolver")


class ScopeResolver:
    """Decides who may see or mutate personal, team and public resources."""

    @staticmethod
    def visibility_clause(model, principal_id: Optional[uuid.UUID], team_ids: List[uuid.UUID]):
        """SQL condition selecting the rows of ``model`` visible to the principal."""
        if issubclass(model, ScopedResourceMixin):
            conditions = [model.scope_type == ScopeType.PUBLIC.value]
            if principal_id is not None:
                conditions.append(
                    and_(
                        model.scope_type == ScopeType.PERSONAL.value,
                        model.scope_id == principal_id,
                    )
                )
            if team_ids:
                conditions.append(
                    and_(
                        model.scope_type == ScopeType.TEAM.value,
                        model.scope_id.in_(team_ids),
                    )
                )
            return or_(*conditions)

        if issubclass(model, OwnedResourceMixin):
            conditions = [model.is_public.is_(True)]
            if principal_id is not None:
                conditions.append(model.owner_id == principal_id)
            if team_ids and model.team_grants_read:
                conditions.append(model.team_id.in_(team_ids))
            return or_(*conditions)

        raise TypeError(f"{model.__name__} is not an access-controlled resource")

    @staticmethod
    def visible_query(db: Session, principal_id: Optional[uuid.UUID], model) -> Query:
        """Query over the active rows of ``model`` visible to the principal."""
        team_ids = MembershipDirectory.team_ids_for(db, principal_id) if principal_id else []
        return db.query(model).filter(
            model.is_active.is_(True),
            ScopeResolver.visibility_clause(model, principal_id, team_ids),
        )

    @staticmethod
    def visible_set(db: Session, principal_id: Optional[uuid.UUID], model) -> List:
        """Public, personal and team resources of ``model`` visible to the principal."""
        return ScopeResolver.visible_query(db, principal_id, model).all()

    @staticmethod
    def can_read(db: Session, principal_id: Optional[uuid.UUID], resource) -> bool:
        """Public, owned, or shared with a team the principal belongs to."""
        if not resource.is_active:
            return False
        if resource.is_publicly_visible:
            return True
        if principal_id is None:
            return False
        if resource.owner_ref == principal_id:
            return True
        team_id = resource.read_team_id
        if team_id is None:
            return False
        return MembershipDirectory.get_membership(db, team_id, principal_id) is not None

    @staticmethod
    def can_write(principal_id: Optional[uuid.UUID], resource) -> bool:
        """Only the creator/owner may mutate; team roles grant nothing here."""
        return principal_id is not None and resource.owner_ref == principal_id

    @staticmethod
    def require_read(db: Session, principal_id: Optional[uuid.UUID], resource) -> None:
        if not ScopeResolver.can_read(db, principal_id, resource):
            logger.warning(
                "Read denied: principal=%s, %s=%s",
                principal_id,
                type(resource).__name__,
                resource.id,
            )
            raise ForbiddenError(messages.ERROR_PERMISSION_DENIED)

    @staticmethod
    def require_write(principal_id: Optional[uuid.UUID], resource) -> None:
        if not ScopeResolver.can_write(principal_id, resource):
            logger.warning(
                "Write denied: principal=%s, %s=%s, owner=%s",
                principal_id,
                type(resource).__name__,
                resource.id,
                resource.owner_ref,
            )
            raise ForbiddenError(messages.ERROR_PERMISSION_DENIED)
