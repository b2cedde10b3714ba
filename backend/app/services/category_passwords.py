"""Optional shared password guarding a category."""

from __future__ import annotations

import logging

from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ValidationError
from app.core.messages import CategoryMessages
from app.core.security import get_password_hash, verify_password
from app.models.category import Category, CategoryPassword
from app.services import categories as categories_service

logger = logging.getLogger(__name__)


async def get_password_row(session: AsyncSession, category_id: int) -> CategoryPassword | None:
    result = await session.exec(select(CategoryPassword).where(CategoryPassword.category_id == category_id))
    return result.one_or_none()


async def set_category_password(session: AsyncSession, *, category: Category, password: str) -> CategoryPassword:
    if not password:
        raise ValidationError(CategoryMessages.PASSWORD_REQUIRED)
    row = await get_password_row(session, category.id)
    hashed = get_password_hash(password)
    if row is None:
        row = CategoryPassword(category_id=category.id, password_hash=hashed)
    else:
        row.password_hash = hashed
    session.add(row)
    await session.flush()
    logger.info("Password set for category %s", category.name)
    return row


async def clear_category_password(session: AsyncSession, *, category: Category) -> None:
    await session.exec(delete(CategoryPassword).where(CategoryPassword.category_id == category.id))
    await session.flush()


async def verify_category_password(session: AsyncSession, *, category_name: str, password: str) -> bool:
    """True only for an existing, password-protected category and the right password."""
    if not password:
        return False
    category = await categories_service.get_category_by_name(session, category_name)
    if category is None:
        return False
    row = await get_password_row(session, category.id)
    if row is None:
        return False
    return verify_password(password, row.password_hash)
