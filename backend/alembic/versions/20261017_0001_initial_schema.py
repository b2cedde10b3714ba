"""Initial schema: tiers, categories, items, permissions, profiles, announcements.

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PROFILE_STATUSES = ("pending", "approved", "rejected", "suspended")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "membership_tiers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_membership_tiers_name"),
    )
    op.create_index("ix_membership_tiers_name", "membership_tiers", ["name"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_categories_name"),
        sa.UniqueConstraint("order_index", name="uq_categories_order_index"),
    )
    op.create_index("ix_categories_name", "categories", ["name"])

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("link", sa.String(length=2048), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("category_id", "order_index", name="uq_items_category_order"),
    )
    op.create_index("ix_items_category_id", "items", ["category_id"])

    op.create_table(
        "category_passwords",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("category_id", name="uq_category_passwords_category_id"),
    )

    op.create_table(
        "category_permissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "membership_tier_id",
            sa.Integer(),
            sa.ForeignKey("membership_tiers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("can_view", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("can_edit", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("can_delete", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "membership_tier_id",
            "category_id",
            name="uq_category_permissions_tier_category",
        ),
    )
    op.create_index(
        "ix_category_permissions_membership_tier_id",
        "category_permissions",
        ["membership_tier_id"],
    )
    op.create_index("ix_category_permissions_category_id", "category_permissions", ["category_id"])

    profile_status = sa.Enum(*PROFILE_STATUSES, name="profile_status")
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("status", profile_status, nullable=False, server_default="pending"),
        sa.Column(
            "membership_tier_id",
            sa.Integer(),
            sa.ForeignKey("membership_tiers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
        sa.UniqueConstraint("user_id", name="uq_profiles_user_id"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])
    op.create_index("ix_profiles_membership_tier_id", "profiles", ["membership_tier_id"])

    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("announcements")
    op.drop_index("ix_profiles_membership_tier_id", table_name="profiles")
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
    sa.Enum(name="profile_status").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_category_permissions_category_id", table_name="category_permissions")
    op.drop_index("ix_category_permissions_membership_tier_id", table_name="category_permissions")
    op.drop_table("category_permissions")
    op.drop_table("category_passwords")
    op.drop_index("ix_items_category_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_categories_name", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_membership_tiers_name", table_name="membership_tiers")
    op.drop_table("membership_tiers")
