"""Tests for the category coordinator."""

import uuid

import pytest

from promptspace.access import ScopeType
from promptspace.categories import CategoryService
from promptspace.core.config import settings
from promptspace.core.errors import (
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InputValidationError,
    NotFoundError,
)
from promptspace.prompts import PromptService
from promptspace.teams import MembershipDirectory, TeamRole


class TestCreateCategory:
    """Tests for category creation and scope resolution."""

    def test_personal_scope_uses_principal(self, db_session, member_id):
        category = CategoryService.create(
            db_session, member_id, {"name": " Drafts ", "scope_type": "personal", "color": "#112233"}
        )

        assert category.name == "Drafts"
        assert category.scope is ScopeType.PERSONAL
        assert category.scope_id == member_id
        assert category.created_by == member_id

    def test_public_scope_has_no_scope_id(self, db_session, member_id):
        category = CategoryService.create(
            db_session, member_id, {"name": "Shared", "scope_type": "public"}
        )

        assert category.scope_id is None

    def test_team_scope_requires_team_id(self, db_session, member_id):
        with pytest.raises(InputValidationError):
            CategoryService.create(db_session, member_id, {"name": "Support", "scope_type": "team"})

    def test_team_scope_requires_membership(self, db_session, team, outsider_id):
        with pytest.raises(ForbiddenError):
            CategoryService.create(
                db_session,
                outsider_id,
                {"name": "Support", "scope_type": "team", "scope_id": team.id},
            )

    def test_viewer_cannot_create_team_category(self, db_session, team, member_id):
        MembershipDirectory.register(db_session, team.id, member_id, TeamRole.VIEWER)

        with pytest.raises(ForbiddenError):
            CategoryService.create(
                db_session,
                member_id,
                {"name": "Support", "scope_type": "team", "scope_id": team.id},
            )

    def test_editor_creates_team_category(self, db_session, editor_team, member_id):
        category = CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )

        assert category.scope_id == editor_team.id

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "", "scope_type": "personal"},
            {"name": "   ", "scope_type": "personal"},
            {"name": "x" * 101, "scope_type": "personal"},
            {"name": "Colors", "scope_type": "personal", "color": "red"},
            {"name": "Scoped", "scope_type": "galaxy"},
        ],
    )
    def test_invalid_payloads(self, db_session, member_id, payload):
        with pytest.raises(InputValidationError) as exc_info:
            CategoryService.create(db_session, member_id, payload)

        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_duplicate_name_in_scope_conflicts(self, db_session, member_id):
        CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})

        with pytest.raises(ConflictError):
            CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})

    def test_duplicate_public_name_conflicts(self, db_session, member_id, outsider_id):
        CategoryService.create(db_session, member_id, {"name": "Shared", "scope_type": "public"})

        with pytest.raises(ConflictError):
            CategoryService.create(db_session, outsider_id, {"name": "Shared", "scope_type": "public"})

    def test_same_name_in_other_scopes(self, db_session, member_id, outsider_id):
        CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})
        CategoryService.create(db_session, outsider_id, {"name": "Drafts", "scope_type": "personal"})
        CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "public"})

    def test_name_reusable_after_delete(self, db_session, member_id):
        first = CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})
        CategoryService.delete(db_session, member_id, first.id)

        second = CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})

        assert second.id != first.id


class TestMutateCategory:
    """Tests for creator-only update and delete."""

    def test_creator_renames(self, db_session, member_id):
        category = CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})

        updated = CategoryService.update(
            db_session, member_id, category.id, {"name": "Ideas", "description": None}
        )

        assert updated.name == "Ideas"

    def test_rename_into_existing_name_conflicts(self, db_session, member_id):
        CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})
        other = CategoryService.create(db_session, member_id, {"name": "Ideas", "scope_type": "personal"})

        with pytest.raises(ConflictError):
            CategoryService.update(db_session, member_id, other.id, {"name": "Drafts"})

    def test_team_owner_cannot_edit_members_category(self, db_session, editor_team, owner_id, member_id):
        category = CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )

        with pytest.raises(ForbiddenError):
            CategoryService.update(db_session, owner_id, category.id, {"name": "Taken"})
        with pytest.raises(ForbiddenError):
            CategoryService.delete(db_session, owner_id, category.id)

    def test_deleted_category_is_not_found(self, db_session, member_id):
        category = CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})
        CategoryService.delete(db_session, member_id, category.id)

        with pytest.raises(NotFoundError):
            CategoryService.get(db_session, member_id, category.id)

    def test_unknown_category_is_not_found(self, db_session, member_id):
        with pytest.raises(NotFoundError):
            CategoryService.update(db_session, member_id, uuid.uuid4(), {"name": "x"})


class TestDefaultCategory:
    """Tests for the per-user default category."""

    def test_ensure_default_is_idempotent(self, db_session, member_id):
        first = CategoryService.ensure_default_category(db_session, member_id)
        second = CategoryService.ensure_default_category(db_session, member_id)

        assert first.id == second.id
        assert first.name == settings.DEFAULT_CATEGORY_NAME
        assert first.color == settings.DEFAULT_CATEGORY_COLOR

    def test_default_cannot_be_deleted(self, db_session, member_id):
        default = CategoryService.ensure_default_category(db_session, member_id)

        with pytest.raises(ForbiddenError):
            CategoryService.delete(db_session, member_id, default.id)

    def test_list_visible_puts_default_first(self, db_session, editor_team, member_id, outsider_id):
        CategoryService.create(db_session, member_id, {"name": "Alpha", "scope_type": "personal"})
        CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )
        CategoryService.create(db_session, outsider_id, {"name": "Hidden", "scope_type": "personal"})

        names = [c.name for c in CategoryService.list_visible(db_session, member_id)]

        assert names[0] == settings.DEFAULT_CATEGORY_NAME
        assert set(names) == {settings.DEFAULT_CATEGORY_NAME, "Alpha", "Support"}

    def test_only_own_default_sorts_first(self, db_session, editor_team, member_id, outsider_id):
        team_category = CategoryService.create(
            db_session,
            member_id,
            {"name": settings.DEFAULT_CATEGORY_NAME, "scope_type": "team", "scope_id": editor_team.id},
        )
        public_category = CategoryService.create(
            db_session, outsider_id, {"name": settings.DEFAULT_CATEGORY_NAME, "scope_type": "public"}
        )

        listed = CategoryService.list_visible(db_session, member_id)

        assert listed[0].scope is ScopeType.PERSONAL
        assert listed[0].scope_id == member_id
        assert {team_category.id, public_category.id} <= {c.id for c in listed[1:]}

    def test_default_cannot_be_renamed(self, db_session, member_id):
        default = CategoryService.ensure_default_category(db_session, member_id)

        with pytest.raises(ForbiddenError):
            CategoryService.update(db_session, member_id, default.id, {"name": "Inbox"})

        db_session.refresh(default)
        assert default.name == settings.DEFAULT_CATEGORY_NAME

    def test_default_keeps_editable_details(self, db_session, member_id):
        default = CategoryService.ensure_default_category(db_session, member_id)

        updated = CategoryService.update(db_session, member_id, default.id, {"color": "#000000"})

        assert updated.color == "#000000"
        assert updated.name == settings.DEFAULT_CATEGORY_NAME

    def test_cannot_rename_into_default_name(self, db_session, member_id):
        category = CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})

        with pytest.raises(ForbiddenError):
            CategoryService.update(
                db_session, member_id, category.id, {"name": settings.DEFAULT_CATEGORY_NAME}
            )

        db_session.refresh(category)
        assert category.name == "Drafts"

    def test_team_category_named_like_default_can_be_renamed(self, db_session, editor_team, member_id):
        category = CategoryService.create(
            db_session,
            member_id,
            {"name": settings.DEFAULT_CATEGORY_NAME, "scope_type": "team", "scope_id": editor_team.id},
        )

        updated = CategoryService.update(db_session, member_id, category.id, {"name": "Backlog"})

        assert updated.name == "Backlog"


class TestCategoryCounts:
    """Tests for prompt counts and category statistics."""

    def test_counts_public_and_own_prompts(self, db_session, member_id, outsider_id):
        writing = CategoryService.create(
            db_session, member_id, {"name": "Writing", "scope_type": "personal"}
        )
        PromptService.create(db_session, member_id, {"title": "Mine", "content": "c", "category": "Writing"})
        PromptService.create(
            db_session,
            outsider_id,
            {"title": "Shared", "content": "c", "category": "Writing", "is_public": True},
        )
        PromptService.create(db_session, outsider_id, {"title": "Hidden", "content": "c", "category": "Writing"})
        PromptService.create(db_session, member_id, {"title": "Loose", "content": "c"})
        PromptService.create(db_session, outsider_id, {"title": "Other loose", "content": "c"})

        counts = dict(
            (category.id, count)
            for category, count in CategoryService.list_visible_with_counts(db_session, member_id)
        )
        default = CategoryService.ensure_default_category(db_session, member_id)

        assert counts[writing.id] == 2
        assert counts[default.id] == 1

    def test_deleted_prompts_are_not_counted(self, db_session, member_id):
        prompt = PromptService.create(
            db_session, member_id, {"title": "Gone", "content": "c", "category": "Writing"}
        )
        PromptService.delete(db_session, member_id, prompt.id)

        assert CategoryService.prompt_counts(db_session, member_id) == {}

    def test_stats(self, db_session, editor_team, member_id, outsider_id):
        CategoryService.create(db_session, member_id, {"name": "Drafts", "scope_type": "personal"})
        CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )
        removed = CategoryService.create(db_session, outsider_id, {"name": "Old", "scope_type": "personal"})
        CategoryService.delete(db_session, outsider_id, removed.id)
        CategoryService.create(db_session, outsider_id, {"name": "Shared", "scope_type": "public"})

        assert CategoryService.stats(db_session) == {
            "total": 3,
            "personal": 1,
            "team": 1,
            "public": 1,
        }


class TestTeamCategories:
    """Tests for team category listing and usage checks."""

    def test_list_for_team_requires_membership(self, db_session, editor_team, member_id, outsider_id):
        CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )

        assert [c.name for c in CategoryService.list_for_team(db_session, member_id, editor_team.id)] == ["Support"]
        with pytest.raises(ForbiddenError):
            CategoryService.list_for_team(db_session, outsider_id, editor_team.id)

    def test_can_use(self, db_session, editor_team, owner_id, member_id, outsider_id):
        category = CategoryService.create(
            db_session,
            member_id,
            {"name": "Support", "scope_type": "team", "scope_id": editor_team.id},
        )

        assert CategoryService.can_use(db_session, owner_id, category.id) is True
        assert CategoryService.can_use(db_session, outsider_id, category.id) is False
        assert CategoryService.can_use(db_session, owner_id, uuid.uuid4()) is False
