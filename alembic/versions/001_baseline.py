"""Baseline: users, groups, memberships, tracked sites, streaks, violations.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("invite_code", sa.String(16), nullable=False, unique=True),
        sa.Column("created_by", sa.String(16), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "group_members",
        sa.Column("group_id", sa.String(16), sa.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(16), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])

    op.create_table(
        "tracked_sites",
        sa.Column("group_id", sa.String(16), sa.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("domain", sa.String(253), primary_key=True),
    )
    op.create_index("ix_tracked_sites_domain", "tracked_sites", ["domain"])

    op.create_table(
        "streaks",
        sa.Column("group_id", sa.String(16), sa.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(16), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("broken_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "violations",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("group_id", sa.String(16), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(16), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("domain", sa.String(253), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_violations_group_user", "violations", ["group_id", "user_id"])


def downgrade() -> None:
    op.drop_index("idx_violations_group_user", table_name="violations")
    op.drop_table("violations")
    op.drop_table("streaks")
    op.drop_index("ix_tracked_sites_domain", table_name="tracked_sites")
    op.drop_table("tracked_sites")
    op.drop_index("ix_group_members_user_id", table_name="group_members")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("users")
