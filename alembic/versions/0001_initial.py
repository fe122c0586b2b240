"""Initial schema (users, habits, completions, mood, sync ledger)

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.String(length=128), nullable=False),
        sa.Column("display_name", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("api_key_hash", sa.String(length=64), nullable=True),
        sa.Column("api_key_prefix", sa.String(length=12), nullable=True),
        sa.Column("api_key_last_rotated_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("external_id", name="uq_users_external_id"),
        sa.UniqueConstraint("api_key_hash", name="uq_users_api_key_hash"),
    )
    op.create_index("ix_users_external_id", "users", ["external_id"], unique=False)
    op.create_index("ix_users_api_key_hash", "users", ["api_key_hash"], unique=False)

    op.create_table(
        "habits",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("color", sa.String(length=32), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_habits_user_id", "habits", ["user_id"], unique=False)
    op.create_index("ix_habits_is_archived", "habits", ["is_archived"], unique=False)

    op.create_table(
        "habit_completions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.String(length=64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["habit_id"], ["habits.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "habit_id", "day", name="uq_habit_completions_user_habit_day"),
    )
    op.create_index("ix_habit_completions_user_id", "habit_completions", ["user_id"], unique=False)
    op.create_index("ix_habit_completions_habit_id", "habit_completions", ["habit_id"], unique=False)
    op.create_index("ix_habit_completions_day", "habit_completions", ["day"], unique=False)

    op.create_table(
        "mood_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("mood", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "day", name="uq_mood_entries_user_day"),
    )
    op.create_index("ix_mood_entries_user_id", "mood_entries", ["user_id"], unique=False)
    op.create_index("ix_mood_entries_day", "mood_entries", ["day"], unique=False)

    op.create_table(
        "sync_ops",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("op_id", sa.String(length=64), nullable=False),
        sa.Column("op_type", sa.String(length=32), nullable=False),
        sa.Column("client_created_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "op_id", name="uq_sync_ops_user_op"),
    )
    op.create_index("ix_sync_ops_user_id", "sync_ops", ["user_id"], unique=False)
    op.create_index("ix_sync_ops_op_id", "sync_ops", ["op_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sync_ops_op_id", table_name="sync_ops")
    op.drop_index("ix_sync_ops_user_id", table_name="sync_ops")
    op.drop_table("sync_ops")

    op.drop_index("ix_mood_entries_day", table_name="mood_entries")
    op.drop_index("ix_mood_entries_user_id", table_name="mood_entries")
    op.drop_table("mood_entries")

    op.drop_index("ix_habit_completions_day", table_name="habit_completions")
    op.drop_index("ix_habit_completions_habit_id", table_name="habit_completions")
    op.drop_index("ix_habit_completions_user_id", table_name="habit_completions")
    op.drop_table("habit_completions")

    op.drop_index("ix_habits_is_archived", table_name="habits")
    op.drop_index("ix_habits_user_id", table_name="habits")
    op.drop_table("habits")

    op.drop_index("ix_users_api_key_hash", table_name="users")
    op.drop_index("ix_users_external_id", table_name="users")
    op.drop_table("users")
