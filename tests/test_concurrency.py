"""Tests for concurrent writers on shared rows.

Uses a file-backed SQLite database so two sessions hold separate connections.
"""

import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from promptspace.categories import Category, CategoryService
from promptspace.core.config import settings
from promptspace.core.errors import ConflictError, ErrorKind
from promptspace.models import load_models
from promptspace.prompts import PromptService, VersionHistoryEngine


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False},
    )
    load_models().create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    engine.dispose()


class TestConcurrentAmend:
    """Two writers computing the same next version."""

    def test_loser_gets_conflict_and_ledger_stays_linear(self, session_factory, monkeypatch):
        owner_id = uuid.uuid4()
        session_a = session_factory()
        session_b = session_factory()

        prompt = PromptService.create(session_a, owner_id, {"title": "Shared", "content": "v1"})
        prompt_id = prompt.id

        real_max_version = VersionHistoryEngine.max_version
        raced = []

        def racing_max_version(db, target_id):
            latest = real_max_version(db, target_id)
            if not raced:
                raced.append(latest)
                # Writer B commits between A's read and A's insert
                VersionHistoryEngine.amend(session_b, target_id, owner_id, {"content": "from B"})
            return latest

        monkeypatch.setattr(VersionHistoryEngine, "max_version", staticmethod(racing_max_version))

        with pytest.raises(ConflictError) as exc_info:
            VersionHistoryEngine.amend(session_a, prompt_id, owner_id, {"content": "from A"})

        assert exc_info.value.kind is ErrorKind.CONFLICT

        check = session_factory()
        try:
            versions = [v.version for v in VersionHistoryEngine.history(check, prompt_id)]
            current = PromptService.get_or_404(check, prompt_id)
            assert versions == [2, 1]
            assert current.current_version == 2
            assert current.content == "from B"
        finally:
            check.close()

        # A retries against the new head
        record = VersionHistoryEngine.amend(session_a, prompt_id, owner_id, {"content": "from A"})
        assert record.version == 3

        session_a.close()
        session_b.close()


class TestConcurrentDefaultCategory:
    """Two first requests creating the same user's default category."""

    def test_loser_returns_winners_row(self, session_factory, monkeypatch):
        user_id = uuid.uuid4()
        session_a = session_factory()
        session_b = session_factory()

        real_create = CategoryService.create
        raced = []

        def racing_create(db, principal_id, payload):
            if not raced:
                raced.append(principal_id)
                # Request B inserts the default between A's lookup and A's insert
                CategoryService.ensure_default_category(session_b, principal_id)
            return real_create(db, principal_id, payload)

        monkeypatch.setattr(CategoryService, "create", staticmethod(racing_create))

        from_a = CategoryService.ensure_default_category(session_a, user_id)

        check = session_factory()
        try:
            defaults = (
                check.query(Category)
                .filter(
                    Category.name == settings.DEFAULT_CATEGORY_NAME,
                    Category.scope_id == user_id,
                    Category.is_active.is_(True),
                )
                .all()
            )
            assert [c.id for c in defaults] == [from_a.id]
        finally:
            check.close()

        assert raced == [user_id]
        assert CategoryService.ensure_default_category(session_b, user_id).id == from_a.id

        session_a.close()
        session_b.close()
