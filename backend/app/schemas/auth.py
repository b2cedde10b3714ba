from typing import Optional

from pydantic import BaseModel

from app.models.profile import ProfileStatus


class IdentityPayload(BaseModel):
    sub: Optional[str] = None
    uid: Optional[str] = None


class SessionStatus(BaseModel):
    """What the UI needs after sign-in to decide which screens to show."""

    email: str
    is_global_admin: bool
    profile_id: Optional[int] = None
    status: Optional[ProfileStatus] = None
    membership_tier_id: Optional[int] = None
    bound: bool = False
