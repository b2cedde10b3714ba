from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import ProfileStatus


class MembershipApplication(BaseModel):
    # Optional so a missing field reaches the workflow and is reported as
    # MISSING_FIELD instead of a generic schema error.
    email: Optional[str] = Field(default=None, max_length=320)
    display_name: Optional[str] = Field(default=None, max_length=200)
    tier_name: Optional[str] = Field(default=None, max_length=100)


class ApplicationResult(BaseModel):
    ok: bool = True
    message: str
    status: ProfileStatus


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: Optional[str] = None
    status: ProfileStatus
    membership_tier_id: Optional[int] = None
    applied_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    user_id: Optional[str] = None


class ProfileUpdate(BaseModel):
    status: Optional[ProfileStatus] = None
    membership_tier_id: Optional[int] = None


class ApproveRequest(BaseModel):
    membership_tier_id: Optional[int] = None
