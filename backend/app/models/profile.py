from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlmodel import Enum as SQLEnum, Field, SQLModel


class ProfileStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    suspended = "suspended"


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(sa_column=Column(String(320), unique=True, nullable=False, index=True))
    display_name: Optional[str] = Field(default=None)
    status: ProfileStatus = Field(
        default=ProfileStatus.pending,
        sa_column=Column(
            SQLEnum(ProfileStatus, name="profile_status"),
            nullable=False,
            server_default=ProfileStatus.pending.value,
        ),
    )
    membership_tier_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("membership_tiers.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )
    applied_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    approved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    # Identity-provider user id, bound on the first sign-in after approval.
    user_id: Optional[str] = Field(default=None, sa_column=Column(String(255), unique=True, nullable=True))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
