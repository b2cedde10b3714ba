from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel

PERMISSION_FIELDS = ("can_view", "can_edit", "can_delete")


class CategoryPermission(SQLModel, table=True):
    """One grant row per (tier, category); a missing row denies everything."""

    __tablename__ = "category_permissions"
    __table_args__ = (
        UniqueConstraint("membership_tier_id", "category_id", name="uq_category_permissions_tier_category"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    membership_tier_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("membership_tiers.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    category_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    can_view: Optional[bool] = Field(
        default=False,
        sa_column=Column(Boolean, nullable=True, server_default="false"),
    )
    can_edit: Optional[bool] = Field(
        default=False,
        sa_column=Column(Boolean, nullable=True, server_default="false"),
    )
    can_delete: Optional[bool] = Field(
        default=False,
        sa_column=Column(Boolean, nullable=True, server_default="false"),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
