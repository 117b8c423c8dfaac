"""Category coordinator: validation, scope resolution and creator-only mutation."""

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptspace.access.resolver import ScopeResolver
from promptspace.access.scopes import ScopeType
from promptspace.core import messages
from promptspace.core.config import settings
from promptspace.core.database import atomic
from promptspace.core.errors import (
    ConflictError,
    ForbiddenError,
    InputValidationError,
    NotFoundError,
    conflict_from_integrity,
    parse_payload,
)
from promptspace.prompts.models import Prompt
from promptspace.teams.crud import MembershipDirectory
from promptspace.teams.roles import TeamRole
from .models import Category
from .schemas import CategoryCreate, CategoryUpdate


logger = logging.getLogger("promptspace.categories.service")


class CategoryService:
    """Entry points for category reads and mutations."""

    @staticmethod
    def get_by_id(db: Session, category_id: uuid.UUID) -> Optional[Category]:
        return (
            db.query(Category)
            .filter(
                Category.id == category_id,
                Category.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def get_or_404(db: Session, category_id: uuid.UUID) -> Category:
        category = CategoryService.get_by_id(db, category_id)
        if not category:
            raise NotFoundError(messages.CATEGORY_NOT_FOUND)
        return category

    @staticmethod
    def _check_duplicate_name(
        db: Session,
        name: str,
        scope_type: ScopeType,
        scope_id: Optional[uuid.UUID],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = db.query(Category.id).filter(
            Category.name == name,
            Category.scope_type == scope_type.value,
            Category.is_active.is_(True),
        )
        if scope_id is None:
            query = query.filter(Category.scope_id.is_(None))
        else:
            query = query.filter(Category.scope_id == scope_id)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)

        if query.first() is not None:
            raise ConflictError(messages.CATEGORY_NAME_EXISTS)

    @staticmethod
    def _flush(db: Session) -> None:
        try:
            db.flush()
        except IntegrityError as exc:
            raise conflict_from_integrity(exc, messages.CATEGORY_NAME_EXISTS)

    @staticmethod
    def create(db: Session, principal_id: uuid.UUID, payload) -> Category:
        """Create a category in the requested scope."""
        data = parse_payload(CategoryCreate, payload)

        scope_id: Optional[uuid.UUID]
        if data.scope_type is ScopeType.PERSONAL:
            scope_id = principal_id
        elif data.scope_type is ScopeType.TEAM:
            if data.scope_id is None:
                raise InputValidationError(messages.CATEGORY_TEAM_REQUIRED)
            scope_id = data.scope_id
            MembershipDirectory.require_role(db, scope_id, principal_id, TeamRole.EDITOR)
        else:
            scope_id = None

        CategoryService._check_duplicate_name(db, data.name, data.scope_type, scope_id)

        with atomic(db):
            category = Category(
                name=data.name,
                description=data.description,
                scope_type=data.scope_type.value,
                scope_id=scope_id,
                created_by=principal_id,
                color=data.color,
            )
            db.add(category)
            CategoryService._flush(db)

        db.refresh(category)
        logger.info(
            "Category created: category_id=%s, scope=%s:%s, created_by=%s",
            category.id,
            category.scope_type,
            category.scope_id,
            principal_id,
        )
        return category

    @staticmethod
    def get(db: Session, principal_id: Optional[uuid.UUID], category_id: uuid.UUID) -> Category:
        category = CategoryService.get_or_404(db, category_id)
        ScopeResolver.require_read(db, principal_id, category)
        return category

    @staticmethod
    def update(
        db: Session,
        principal_id: uuid.UUID,
        category_id: uuid.UUID,
        payload,
    ) -> Category:
        """Update a category (creator only)."""
        data = parse_payload(CategoryUpdate, payload)
        category = CategoryService.get_or_404(db, category_id)
        ScopeResolver.require_write(principal_id, category)

        renaming = data.name is not None and data.name != category.name
        if (
            renaming
            and category.scope is ScopeType.PERSONAL
            and settings.DEFAULT_CATEGORY_NAME in (category.name, data.name)
        ):
            logger.warning(
                "User %s attempted to rename default category %s (%r -> %r)",
                principal_id,
                category.id,
                category.name,
                data.name,
            )
            raise ForbiddenError(messages.CATEGORY_DEFAULT_RENAME)

        if renaming:
            CategoryService._check_duplicate_name(
                db, data.name, category.scope, category.scope_id, exclude_id=category.id
            )

        with atomic(db):
            for field in data.model_fields_set:
                value = getattr(data, field)
                if field == "name" and value is None:
                    continue
                setattr(category, field, value)
            db.add(category)
            CategoryService._flush(db)

        db.refresh(category)
        return category

    @staticmethod
    def is_default_category(category: Category, user_id: uuid.UUID) -> bool:
        return (
            category.name == settings.DEFAULT_CATEGORY_NAME
            and category.scope is ScopeType.PERSONAL
            and category.scope_id == user_id
        )

    @staticmethod
    def delete(db: Session, principal_id: uuid.UUID, category_id: uuid.UUID) -> None:
        """Soft delete a category (creator only)."""
        category = CategoryService.get_or_404(db, category_id)

        if CategoryService.is_default_category(category, principal_id):
            raise ForbiddenError(messages.CATEGORY_DEFAULT_UNDELETABLE)

        ScopeResolver.require_write(principal_id, category)

        with atomic(db):
            category.soft_delete(principal_id)
            db.add(category)

        logger.info("Category deleted: category_id=%s, by=%s", category_id, principal_id)

    @staticmethod
    def _find_default_category(db: Session, user_id: uuid.UUID) -> Optional[Category]:
        return (
            db.query(Category)
            .filter(
                Category.name == settings.DEFAULT_CATEGORY_NAME,
                Category.scope_type == ScopeType.PERSONAL.value,
                Category.scope_id == user_id,
                Category.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def ensure_default_category(db: Session, user_id: uuid.UUID) -> Category:
        """Get the user's personal default category, creating it if missing.

        A concurrent first call may insert the row between our lookup and
        insert; the loser re-reads and returns the winner's row.
        """
        existing = CategoryService._find_default_category(db, user_id)
        if existing:
            return existing

        try:
            return CategoryService.create(
                db,
                user_id,
                {
                    "name": settings.DEFAULT_CATEGORY_NAME,
                    "description": settings.DEFAULT_CATEGORY_DESCRIPTION,
                    "scope_type": ScopeType.PERSONAL,
                    "color": settings.DEFAULT_CATEGORY_COLOR,
                },
            )
        except ConflictError:
            db.rollback()
            existing = CategoryService._find_default_category(db, user_id)
            if existing is None:
                raise
            logger.info("Default category for user %s was created concurrently", user_id)
            return existing

    @staticmethod
    def list_visible(db: Session, principal_id: uuid.UUID) -> List[Category]:
        """All categories visible to the principal, their own default first."""
        CategoryService.ensure_default_category(db, principal_id)
        own_default = and_(
            Category.name == settings.DEFAULT_CATEGORY_NAME,
            Category.scope_type == ScopeType.PERSONAL.value,
            Category.scope_id == principal_id,
        )
        return (
            ScopeResolver.visible_query(db, principal_id, Category)
            .order_by(
                case((own_default, 0), else_=1),
                Category.scope_type,
                Category.name,
            )
            .all()
        )

    @staticmethod
    def prompt_counts(db: Session, principal_id: uuid.UUID) -> Dict[Optional[str], int]:
        """Active prompts per category name that are public or owned by the principal.

        Prompts without a category are counted under the ``None`` key.
        """
        rows = (
            db.query(Prompt.category, func.count(Prompt.id).label("prompts"))
            .filter(
                Prompt.is_active.is_(True),
                or_(Prompt.is_public.is_(True), Prompt.owner_id == principal_id),
            )
            .group_by(Prompt.category)
            .all()
        )
        return {row.category: int(row.prompts) for row in rows}

    @staticmethod
    def list_visible_with_counts(
        db: Session, principal_id: uuid.UUID
    ) -> List[Tuple[Category, int]]:
        """``list_visible`` paired with each category's prompt count."""
        categories = CategoryService.list_visible(db, principal_id)
        counts = CategoryService.prompt_counts(db, principal_id)

        result = []
        for category in categories:
            count = counts.get(category.name, 0)
            if CategoryService.is_default_category(category, principal_id):
                count += counts.get(None, 0)
            result.append((category, count))
        return result

    @staticmethod
    def stats(db: Session) -> Dict[str, int]:
        """Number of active categories, overall and per scope type."""
        rows = (
            db.query(Category.scope_type, func.count(Category.id).label("categories"))
            .filter(Category.is_active.is_(True))
            .group_by(Category.scope_type)
            .all()
        )
        per_scope = {row.scope_type: int(row.categories) for row in rows}
        result = {scope.value: per_scope.get(scope.value, 0) for scope in ScopeType}
        result["total"] = sum(per_scope.values())
        return result

    @staticmethod
    def list_for_team(db: Session, principal_id: uuid.UUID, team_id: uuid.UUID) -> List[Category]:
        """Active categories of one team (members only)."""
        MembershipDirectory.require_role(db, team_id, principal_id, TeamRole.VIEWER)
        return (
            db.query(Category)
            .filter(
                Category.scope_type == ScopeType.TEAM.value,
                Category.scope_id == team_id,
                Category.is_active.is_(True),
            )
            .order_by(Category.name)
            .all()
        )

    @staticmethod
    def can_use(db: Session, principal_id: uuid.UUID, category_id: uuid.UUID) -> bool:
        """Whether the principal may file prompts under the category."""
        category = CategoryService.get_by_id(db, category_id)
        if not category:
            return False
        return ScopeResolver.can_read(db, principal_id, category)
