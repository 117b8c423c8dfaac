"""Initial schema: teams, memberships, categories, projects, prompts and version ledger.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list:
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _timestamped_columns() -> list:
    return _base_columns() + [
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Uuid(), nullable=True),
    ]


def upgrade() -> None:
    # 1. Teams
    op.create_table(
        "teams",
        *_timestamped_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
    )
    op.create_index("ix_teams_owner_id", "teams", ["owner_id"])

    # 2. Team members; at most one active row per (team, user)
    op.create_table(
        "team_members",
        *_timestamped_columns(),
        sa.Column(
            "team_id",
            sa.Uuid(),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="viewer"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("invited_by", sa.Uuid(), nullable=True),
    )
    op.create_index("ix_team_members_user_id", "team_members", ["user_id"])
    op.create_index(
        "uq_team_members_active_pair",
        "team_members",
        ["team_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # 3. Categories
    op.create_table(
        "categories",
        *_timestamped_columns(),
        sa.Column("scope_type", sa.String(length=20), nullable=False),
        sa.Column("scope_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=True),
        sa.CheckConstraint(
            "(scope_type = 'public' AND scope_id IS NULL) OR "
            "(scope_type IN ('personal', 'team') AND scope_id IS NOT NULL)",
            name="ck_categories_scope_discriminant",
        ),
    )
    op.create_index("ix_categories_created_by", "categories", ["created_by"])
    op.create_index("ix_categories_name", "categories", ["name"])
    op.create_index("ix_categories_scope", "categories", ["scope_type", "scope_id", "is_active"])
    op.create_index(
        "uq_categories_active_scope_name",
        "categories",
        ["scope_type", "scope_id", "name"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    # 4. Projects
    op.create_table(
        "projects",
        *_timestamped_columns(),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("team_id", sa.Uuid(), sa.ForeignKey("teams.id"), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("background", sa.Text(), nullable=False),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_index("ix_projects_team_id", "projects", ["team_id"])

    # 5. Prompts (content mirrors the latest version)
    op.create_table(
        "prompts",
        *_timestamped_columns(),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("team_id", sa.Uuid(), sa.ForeignKey("teams.id"), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("parent_id", sa.Uuid(), sa.ForeignKey("prompts.id"), nullable=True),
        sa.Column("is_template", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("current_version", sa.Integer(), server_default="0", nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
    )
    op.create_index("ix_prompts_owner_id", "prompts", ["owner_id"])
    op.create_index("ix_prompts_team_id", "prompts", ["team_id"])
    op.create_index("ix_prompts_project_id", "prompts", ["project_id"])

    # 6. Prompt versions (append-only)
    op.create_table(
        "prompt_versions",
        *_base_columns(),
        sa.Column("prompt_id", sa.Uuid(), sa.ForeignKey("prompts.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("change_log", sa.Text(), nullable=True),
        sa.UniqueConstraint("prompt_id", "version", name="uq_prompt_versions_prompt_version"),
        sa.CheckConstraint("version > 0", name="ck_prompt_versions_positive"),
    )
    op.create_index("ix_prompt_versions_prompt_id", "prompt_versions", ["prompt_id"])


def downgrade() -> None:
    op.drop_table("prompt_versions")
    op.drop_table("prompts")
    op.drop_table("projects")
    op.drop_table("categories")
    op.drop_table("team_members")
    op.drop_table("teams")
