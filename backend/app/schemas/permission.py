from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.category import CategoryAccessRead


class PermissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    membership_tier_id: int
    category_id: int
    can_view: Optional[bool] = False
    can_edit: Optional[bool] = False
    can_delete: Optional[bool] = False
    created_at: datetime


class PermissionUpdate(BaseModel):
    """Set one flag of a (tier, category) grant."""

    membership_tier_id: int
    category_id: int
    field: Literal["can_view", "can_edit", "can_delete"]
    value: bool


class PermissionCheckResult(BaseModel):
    category: str
    permission_type: str
    allowed: bool


class CategoryPermissionsResult(CategoryAccessRead):
    category: str


class MatrixEntry(BaseModel):
    category_id: int
    category_name: str
    category_display_name: str
    can_view: bool
    can_edit: bool
    can_delete: bool
