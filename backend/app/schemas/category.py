from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name cannot be empty")
        return v


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=200)


class CategoryAccessRead(BaseModel):
    view: bool
    edit: bool
    delete: bool


class CategoryRead(CategoryBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_index: int
    created_at: datetime
    updated_at: datetime


class CategoryWithAccess(CategoryRead):
    access: CategoryAccessRead


class ItemBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    link: str = Field(..., min_length=1, max_length=2048)
    description: Optional[str] = None


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    link: Optional[str] = Field(default=None, min_length=1, max_length=2048)
    description: Optional[str] = None


class ItemRead(ItemBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    order_index: int
    created_at: datetime
    updated_at: datetime


class MoveResponse(BaseModel):
    """Outcome of a single-step move; ``moved`` is False at either end."""

    element_id: int
    order_index: int
    moved: bool
    swapped_with_id: Optional[int] = None


class CategoryPasswordSet(BaseModel):
    password: str = Field(..., min_length=1, max_length=200)


class CategoryPasswordVerify(BaseModel):
    category_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CategoryPasswordVerifyResult(BaseModel):
    valid: bool
