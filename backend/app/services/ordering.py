"""Ordered collections: categories globally, items per category.

Every scope keeps ``order_index`` values at exactly ``1..n``.  Moves swap
two neighbours inside a single transaction using compare-and-swap updates
keyed on the indices read in that same transaction, so two admins
reordering the same scope can never leave a duplicate or a gap behind:
the loser of a race gets ``ConflictError`` and the store is rolled back.

The functions that mutate order (``reorder_transaction``, ``move_up``,
``move_down``, ``delete_element``, ``normalize``) own their transaction
and commit or roll back before returning.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, CoreError, InvariantViolation, NotFoundError, StoreFailure
from app.core.messages import OrderingMessages, StoreMessages
from app.models.category import Category, Item

logger = logging.getLogger(__name__)

ORDER_INDEX_BASE = 1


@dataclass(frozen=True)
class OrderScope:
    """A set of sibling rows sharing one ordering.

    ``category_id`` is ``None`` for the global category collection and the
    owning category's id for an item collection.
    """

    model: Any
    category_id: int | None = None

    @property
    def label(self) -> str:
        if self.category_id is None:
            return self.model.__tablename__
        return f"{self.model.__tablename__}[category={self.category_id}]"

    def where(self, stmt):
        if self.category_id is not None:
            stmt = stmt.where(self.model.category_id == self.category_id)
        return stmt


CATEGORY_SCOPE = OrderScope(model=Category)


def item_scope(category_id: int) -> OrderScope:
    return OrderScope(model=Item, category_id=category_id)


@dataclass(frozen=True)
class MoveResult:
    element_id: int
    order_index: int
    moved: bool
    swapped_with_id: int | None = None


async def index_bounds(session: AsyncSession, scope: OrderScope) -> tuple[int | None, int | None]:
    model = scope.model
    stmt = scope.where(select(func.min(model.order_index), func.max(model.order_index)))
    result = await session.exec(stmt)
    low, high = result.one()
    return low, high


async def next_order_index(session: AsyncSession, scope: OrderScope) -> int:
    """Index a newly created element is appended at."""
    _, high = await index_bounds(session, scope)
    return ORDER_INDEX_BASE if high is None else high + 1


async def list_ordered(session: AsyncSession, scope: OrderScope) -> list[Any]:
    model = scope.model
    stmt = (
        scope.where(select(model))
        .order_by(model.order_index.asc(), model.id.asc())
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    return list(result.all())


async def _get_element(session: AsyncSession, scope: OrderScope, element_id: int) -> Any:
    model = scope.model
    stmt = (
        scope.where(select(model).where(model.id == element_id))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    element = result.one_or_none()
    if element is None:
        raise NotFoundError(OrderingMessages.ELEMENT_MISSING)
    return element


async def _get_at_index(session: AsyncSession, scope: OrderScope, order_index: int) -> Any | None:
    model = scope.model
    stmt = (
        scope.where(select(model).where(model.order_index == order_index))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def _compare_and_set(
    session: AsyncSession,
    scope: OrderScope,
    *,
    element_id: int,
    expected_index: int,
    new_index: int,
) -> None:
    model = scope.model
    stmt = scope.where(
        update(model).where(model.id == element_id, model.order_index == expected_index)
    ).values(order_index=new_index, updated_at=datetime.now(timezone.utc))
    result = await session.exec(stmt)
    if result.rowcount != 1:
        logger.warning(
            "Order of %s changed underneath a reorder (id=%s expected=%s)",
            scope.label,
            element_id,
            expected_index,
        )
        raise ConflictError(OrderingMessages.CONCURRENT_CHANGE)


async def _run_in_transaction(session: AsyncSession, scope: OrderScope, operation):
    """Await ``operation()`` and commit; roll back and re-raise typed errors otherwise."""
    try:
        outcome = await operation()
        await session.commit()
        return outcome
    except CoreError:
        await session.rollback()
        raise
    except (IntegrityError, OperationalError) as exc:
        await session.rollback()
        logger.warning("Concurrent reorder of %s rejected: %s", scope.label, exc)
        raise ConflictError(OrderingMessages.CONCURRENT_CHANGE) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Store failure while reordering %s", scope.label)
        raise StoreFailure(StoreMessages.FAILURE) from exc


async def _swap(
    session: AsyncSession,
    scope: OrderScope,
    *,
    a_id: int,
    a_index_old: int,
    a_index_new: int,
    b_id: int,
    b_index_old: int,
    b_index_new: int,
) -> None:
    # Park ``a`` on a negative index unique to it so that the unique
    # constraint on order_index holds after each statement.
    parking_index = -a_id
    await _compare_and_set(session, scope, element_id=a_id, expected_index=a_index_old, new_index=parking_index)
    await _compare_and_set(session, scope, element_id=b_id, expected_index=b_index_old, new_index=b_index_new)
    await _compare_and_set(session, scope, element_id=a_id, expected_index=parking_index, new_index=a_index_new)


async def reorder_transaction(
    session: AsyncSession,
    scope: OrderScope,
    *,
    a_id: int,
    a_index_old: int,
    a_index_new: int,
    b_id: int,
    b_index_old: int,
    b_index_new: int,
) -> None:
    """Move ``a`` and ``b`` to their new indices atomically.

    Each row is only updated if it still holds its ``*_index_old`` value;
    otherwise the whole transaction is rolled back with ``ConflictError``.
    """

    async def operation() -> None:
        await _swap(
            session,
            scope,
            a_id=a_id,
            a_index_old=a_index_old,
            a_index_new=a_index_new,
            b_id=b_id,
            b_index_old=b_index_old,
            b_index_new=b_index_new,
        )

    await _run_in_transaction(session, scope, operation)


async def _move(session: AsyncSession, scope: OrderScope, element_id: int, step: int) -> MoveResult:
    async def operation() -> MoveResult:
        element = await _get_element(session, scope, element_id)
        current = element.order_index
        low, high = await index_bounds(session, scope)
        boundary = low if step < 0 else high
        if current == boundary:
            return MoveResult(element_id=element_id, order_index=current, moved=False)

        neighbor = await _get_at_index(session, scope, current + step)
        if neighbor is None:
            logger.error(
                "Ordering invariant broken in %s: nothing at index %s next to id=%s",
                scope.label,
                current + step,
                element_id,
            )
            raise InvariantViolation(OrderingMessages.NEIGHBOR_MISSING)

        await _swap(
            session,
            scope,
            a_id=element.id,
            a_index_old=current,
            a_index_new=neighbor.order_index,
            b_id=neighbor.id,
            b_index_old=neighbor.order_index,
            b_index_new=current,
        )
        return MoveResult(
            element_id=element_id,
            order_index=current + step,
            moved=True,
            swapped_with_id=neighbor.id,
        )

    result = await _run_in_transaction(session, scope, operation)
    if result.moved:
        logger.info(
            "Moved %s id=%s to index %s (swapped with id=%s)",
            scope.label,
            element_id,
            result.order_index,
            result.swapped_with_id,
        )
    return result


async def move_up(session: AsyncSession, scope: OrderScope, element_id: int) -> MoveResult:
    """Swap the element with the one just before it; a no-op at the top."""
    return await _move(session, scope, element_id, -1)


async def move_down(session: AsyncSession, scope: OrderScope, element_id: int) -> MoveResult:
    """Swap the element with the one just after it; a no-op at the bottom."""
    return await _move(session, scope, element_id, 1)


async def repack_after_delete(session: AsyncSession, scope: OrderScope, removed_index: int) -> None:
    """Close the gap left at ``removed_index``.

    Rows are shifted one statement at a time in ascending order so each
    target index is already free when it is written.
    """
    model = scope.model
    stmt = (
        scope.where(select(model).where(model.order_index > removed_index))
        .order_by(model.order_index.asc())
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    for element in result.all():
        await _compare_and_set(
            session,
            scope,
            element_id=element.id,
            expected_index=element.order_index,
            new_index=element.order_index - 1,
        )


async def delete_element(session: AsyncSession, scope: OrderScope, element: Any) -> None:
    """Delete ``element`` and repack its scope in one commit."""
    removed_index = element.order_index

    async def operation() -> None:
        await session.delete(element)
        await session.flush()
        await repack_after_delete(session, scope, removed_index)

    await _run_in_transaction(session, scope, operation)


async def normalize(session: AsyncSession, scope: OrderScope) -> list[Any]:
    """Rewrite a scope to ``1..n`` keeping its current relative order."""

    async def operation() -> list[Any]:
        elements = await list_ordered(session, scope)
        snapshot = [(element.id, element.order_index) for element in elements]
        for element_id, order_index in snapshot:
            await _compare_and_set(
                session, scope, element_id=element_id, expected_index=order_index, new_index=-element_id
            )
        for position, (element_id, _) in enumerate(snapshot, start=ORDER_INDEX_BASE):
            await _compare_and_set(
                session, scope, element_id=element_id, expected_index=-element_id, new_index=position
            )
        return [element_id for element_id, _ in snapshot]

    await _run_in_transaction(session, scope, operation)
    return await list_ordered(session, scope)
