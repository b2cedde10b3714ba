from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.messages import CategoryMessages
from app.models.category import Category, CategoryPassword, Item
from app.models.permission import CategoryPermission
from app.services import ordering

logger = logging.getLogger(__name__)


def normalize_category_name(name: str | None) -> str:
    return (name or "").strip()


async def get_category(session: AsyncSession, category_id: int) -> Category:
    result = await session.exec(select(Category).where(Category.id == category_id))
    category = result.one_or_none()
    if category is None:
        raise NotFoundError(CategoryMessages.NOT_FOUND)
    return category


async def get_category_by_name(session: AsyncSession, name: str) -> Category | None:
    result = await session.exec(select(Category).where(Category.name == normalize_category_name(name)))
    return result.one_or_none()


async def list_categories(session: AsyncSession) -> list[Category]:
    return await ordering.list_ordered(session, ordering.CATEGORY_SCOPE)


async def _ensure_name_available(session: AsyncSession, name: str, exclude_category_id: int | None = None) -> None:
    stmt = select(Category.id).where(Category.name == name)
    if exclude_category_id is not None:
        stmt = stmt.where(Category.id != exclude_category_id)
    result = await session.exec(stmt)
    if result.first() is not None:
        raise ConflictError(CategoryMessages.NAME_TAKEN)


async def create_category(session: AsyncSession, *, name: str, display_name: str) -> Category:
    """Create a category appended after the current last one."""
    cleaned = normalize_category_name(name)
    if not cleaned:
        raise ValidationError(CategoryMessages.NAME_REQUIRED)
    await _ensure_name_available(session, cleaned)

    category = Category(
        name=cleaned,
        display_name=display_name.strip() or cleaned,
        order_index=await ordering.next_order_index(session, ordering.CATEGORY_SCOPE),
    )
    session.add(category)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Either the name or the appended index was taken concurrently.
        raise ConflictError(CategoryMessages.CONCURRENT_CREATE) from exc
    logger.info("Created category %s at index %s", category.name, category.order_index)
    return category


async def update_category(
    session: AsyncSession,
    category: Category,
    *,
    name: str | None = None,
    display_name: str | None = None,
) -> Category:
    if name is not None:
        cleaned = normalize_category_name(name)
        if not cleaned:
            raise ValidationError(CategoryMessages.NAME_REQUIRED)
        if cleaned != category.name:
            await _ensure_name_available(session, cleaned, exclude_category_id=category.id)
            category.name = cleaned
    if display_name is not None:
        category.display_name = display_name.strip() or category.name
    category.updated_at = datetime.now(timezone.utc)
    session.add(category)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError(CategoryMessages.NAME_TAKEN) from exc
    return category


async def delete_category(session: AsyncSession, category: Category) -> None:
    """Delete a category with its items, grants and password, then repack."""
    await session.exec(delete(Item).where(Item.category_id == category.id))
    await session.exec(delete(CategoryPermission).where(CategoryPermission.category_id == category.id))
    await session.exec(delete(CategoryPassword).where(CategoryPassword.category_id == category.id))
    await ordering.delete_element(session, ordering.CATEGORY_SCOPE, category)
    logger.info("Deleted category %s", category.name)
