"""initial discussion schema

Revision ID: 5c1f0a9e2b71
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0a9e2b71"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _vote_counters() -> list[sa.Column]:
    return [
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("vote_score", sa.Integer(), nullable=False, server_default="0"),
    ]


def upgrade() -> None:
    """Create users, posts, replies and both vote ledgers."""
    op.create_table(
        "forum_user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('student', 'instructor', 'moderator')", name="ck_forum_user_role"
        ),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("forum_user.id"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("media_id", sa.Text(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reply_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_answered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("answered_by", sa.Integer(), sa.ForeignKey("forum_user.id"), nullable=True),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_vote_counters(),
    )
    op.create_index("ix_post_author_id", "post", ["author_id"])
    op.create_index("ix_post_category", "post", ["category"])
    op.create_index("ix_post_is_answered", "post", ["is_answered"])
    op.create_index("ix_post_created_at", "post", ["created_at"])
    op.create_index("ix_post_last_activity", "post", ["last_activity"])
    op.create_index("ix_post_vote_score", "post", ["vote_score"])

    op.create_table(
        "reply",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "post_id", sa.Integer(), sa.ForeignKey("post.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("forum_user.id"), nullable=False),
        sa.Column(
            "parent_reply_id",
            sa.Integer(),
            sa.ForeignKey("reply.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("depth", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_accepted_answer", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_instructor_reply", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Integer(), sa.ForeignKey("forum_user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_vote_counters(),
        sa.CheckConstraint("depth >= 0", name="ck_reply_depth_non_negative"),
    )
    op.create_index("ix_reply_post_id", "reply", ["post_id"])
    op.create_index("ix_reply_author_id", "reply", ["author_id"])
    op.create_index("ix_reply_parent_reply_id", "reply", ["parent_reply_id"])
    op.create_index("ix_reply_created_at", "reply", ["created_at"])
    op.create_index("ix_reply_vote_score", "reply", ["vote_score"])

    op.create_table(
        "post_vote",
        sa.Column(
            "post_id", sa.Integer(), sa.ForeignKey("post.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "voter_id",
            sa.Integer(),
            sa.ForeignKey("forum_user.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("direction", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint("direction IN (1, -1)", name="ck_post_vote_direction"),
    )
    op.create_index("ix_post_vote_post_id", "post_vote", ["post_id"])

    op.create_table(
        "reply_vote",
        sa.Column(
            "reply_id", sa.Integer(), sa.ForeignKey("reply.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "voter_id",
            sa.Integer(),
            sa.ForeignKey("forum_user.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("direction", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint("direction IN (1, -1)", name="ck_reply_vote_direction"),
    )
    op.create_index("ix_reply_vote_reply_id", "reply_vote", ["reply_id"])


def downgrade() -> None:
    """Drop every discussion table."""
    op.drop_table("reply_vote")
    op.drop_table("post_vote")
    op.drop_table("reply")
    op.drop_table("post")
    op.drop_table("forum_user")
