"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, orgs, owners, org_memberships, follows, messages,
       images, image_attachments, topics, projects and events.
How:   Table order follows foreign key dependencies. Enums are stored as
       VARCHAR (native_enum=False in the models) so new values need no
       ALTER TYPE.

Rollback: downgrade() drops every table in reverse order (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
        nullable=nullable,
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(20), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("headline", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("avatar_image_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # ── orgs ──────────────────────────────────────────────────────────────
    op.create_table(
        "orgs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("headline", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("avatar_image_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orgs_slug", "orgs", ["slug"], unique=True)

    # ── owners ────────────────────────────────────────────────────────────
    # Exactly one of user_id / org_id is set and `type` names which one
    op.create_table(
        "owners",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("org_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["org_id"], ["orgs.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "(user_id IS NULL) <> (org_id IS NULL)",
            name="ck_owners_exactly_one_backing",
        ),
        sa.CheckConstraint(
            "(type = 'USER' AND user_id IS NOT NULL) OR (type = 'ORG' AND org_id IS NOT NULL)",
            name="ck_owners_type_matches_backing",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.UniqueConstraint("org_id"),
    )

    # ── org_memberships ───────────────────────────────────────────────────
    op.create_table(
        "org_memberships",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="MEMBER"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["org_id"], ["orgs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
    )
    op.create_index("ix_org_memberships_org_id", "org_memberships", ["org_id"])
    op.create_index("ix_org_memberships_user_id", "org_memberships", ["user_id"])

    # ── follows ───────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("follower_owner_id", sa.Uuid(), nullable=False),
        sa.Column("following_owner_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["follower_owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["following_owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "follower_owner_id <> following_owner_id", name="ck_follows_not_self"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "follower_owner_id", "following_owner_id", name="uq_follows_pair"
        ),
    )
    op.create_index("ix_follows_follower_owner_id", "follows", ["follower_owner_id"])
    op.create_index("ix_follows_following_owner_id", "follows", ["following_owner_id"])
    op.create_index("ix_follows_created_at", "follows", ["created_at"])

    # ── messages ──────────────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sender_owner_id", sa.Uuid(), nullable=False),
        sa.Column("receiver_owner_id", sa.Uuid(), nullable=False),
        sa.Column("sender_org_id", sa.Uuid(), nullable=True),
        sa.Column("receiver_org_id", sa.Uuid(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("read_at", nullable=True),
        sa.ForeignKeyConstraint(["sender_owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sender_org_id"], ["orgs.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["receiver_org_id"], ["orgs.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_messages_receiver_created", "messages", ["receiver_owner_id", "created_at"]
    )
    op.create_index(
        "idx_messages_sender_created", "messages", ["sender_owner_id", "created_at"]
    )

    # ── images / image_attachments ────────────────────────────────────────
    op.create_table(
        "images",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("alt_text", sa.String(500), nullable=True),
        sa.Column("uploaded_by_owner_id", sa.Uuid(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["uploaded_by_owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_images_uploaded_by_owner_id", "images", ["uploaded_by_owner_id"])

    # target_id is polymorphic (project or event) and has no foreign key
    op.create_table(
        "image_attachments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("image_id", sa.Uuid(), nullable=False),
        sa.Column("target_type", sa.String(20), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["image_id"], ["images.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_image_attachments_target", "image_attachments", ["target_type", "target_id"]
    )

    # ── topics ────────────────────────────────────────────────────────────
    op.create_table(
        "topics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("synonyms", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["parent_id"], ["topics.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_topics_label", "topics", ["label"], unique=True)

    # ── projects / events ─────────────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        _timestamp("starts_at", nullable=True),
        _timestamp("ends_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["owners.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_owner_id", "events", ["owner_id"])
    op.create_index("ix_events_created_at", "events", ["created_at"])


def downgrade() -> None:
    """Drop every table, dependents first. All data is lost."""
    for table in (
        "events",
        "projects",
        "topics",
        "image_attachments",
        "images",
        "messages",
        "follows",
        "org_memberships",
        "owners",
        "orgs",
        "users",
    ):
        op.drop_table(table)
