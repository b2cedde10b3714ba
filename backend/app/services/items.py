from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.messages import ItemMessages, OrderingMessages
from app.models.category import Category, Item
from app.services import ordering

logger = logging.getLogger(__name__)


async def get_item(session: AsyncSession, *, category_id: int, item_id: int) -> Item:
    stmt = select(Item).where(Item.id == item_id, Item.category_id == category_id)
    result = await session.exec(stmt)
    item = result.one_or_none()
    if item is None:
        raise NotFoundError(ItemMessages.NOT_FOUND)
    return item


async def list_items(session: AsyncSession, category_id: int) -> list[Item]:
    return await ordering.list_ordered(session, ordering.item_scope(category_id))


async def create_item(
    session: AsyncSession,
    *,
    category: Category,
    title: str,
    link: str,
    description: str | None = None,
) -> Item:
    scope = ordering.item_scope(category.id)
    item = Item(
        category_id=category.id,
        title=title.strip(),
        link=link.strip(),
        description=description,
        order_index=await ordering.next_order_index(session, scope),
    )
    session.add(item)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError(OrderingMessages.CONCURRENT_CHANGE) from exc
    return item


async def update_item(
    session: AsyncSession,
    item: Item,
    *,
    title: str | None = None,
    link: str | None = None,
    description: str | None = None,
) -> Item:
    if title is not None:
        item.title = title.strip()
    if link is not None:
        item.link = link.strip()
    if description is not None:
        item.description = description
    item.updated_at = datetime.now(timezone.utc)
    session.add(item)
    await session.flush()
    return item


async def delete_item(session: AsyncSession, item: Item) -> None:
    await ordering.delete_element(session, ordering.item_scope(item.category_id), item)
    logger.info("Deleted item %s from category %s", item.id, item.category_id)
