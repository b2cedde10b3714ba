"""
Unit tests for the ordered collection service.

Covers appending, single-step moves at and away from the boundaries,
compare-and-swap rejection of stale reorders, repacking after deletes,
normalization, and concurrent moves issued from independent sessions.
"""

import asyncio

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, InvariantViolation, NotFoundError
from app.services import ordering
from app.testing.factories import create_category, create_item


async def _snapshot(session_factory, scope: ordering.OrderScope) -> list[tuple[int, int]]:
    """(id, order_index) pairs in order, read through a fresh session."""
    async with session_factory() as fresh:
        elements = await ordering.list_ordered(fresh, scope)
        return [(element.id, element.order_index) for element in elements]


async def _make_categories(session: AsyncSession, count: int) -> list[int]:
    categories = [await create_category(session, name=f"cat-{n}") for n in range(1, count + 1)]
    return [category.id for category in categories]


def _assert_contiguous(snapshot: list[tuple[int, int]]) -> None:
    assert [index for _, index in snapshot] == list(range(1, len(snapshot) + 1))


@pytest.mark.unit
async def test_next_order_index_starts_at_one(session: AsyncSession):
    assert await ordering.next_order_index(session, ordering.CATEGORY_SCOPE) == 1


@pytest.mark.unit
async def test_next_order_index_appends_after_max(session: AsyncSession):
    await _make_categories(session, 3)

    assert await ordering.next_order_index(session, ordering.CATEGORY_SCOPE) == 4


@pytest.mark.unit
async def test_item_scopes_are_independent(session: AsyncSession, session_factory):
    first = await create_category(session, name="first")
    second = await create_category(session, name="second")
    await create_item(session, category=first)
    await create_item(session, category=first)
    only = await create_item(session, category=second)

    assert only.order_index == 1
    assert await ordering.next_order_index(session, ordering.item_scope(first.id)) == 3
    assert await _snapshot(session_factory, ordering.item_scope(second.id)) == [(only.id, 1)]


@pytest.mark.unit
async def test_move_up_swaps_with_previous(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 3)

    result = await ordering.move_up(session, ordering.CATEGORY_SCOPE, ids[2])

    assert result.moved is True
    assert result.order_index == 2
    assert result.swapped_with_id == ids[1]
    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(ids[0], 1), (ids[2], 2), (ids[1], 3)]


@pytest.mark.unit
async def test_move_down_swaps_with_next(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 3)

    result = await ordering.move_down(session, ordering.CATEGORY_SCOPE, ids[0])

    assert result.moved is True
    assert result.swapped_with_id == ids[1]
    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(ids[1], 1), (ids[0], 2), (ids[2], 3)]


@pytest.mark.unit
async def test_move_up_then_down_restores_arrangement(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 4)
    before = await _snapshot(session_factory, ordering.CATEGORY_SCOPE)

    await ordering.move_up(session, ordering.CATEGORY_SCOPE, ids[2])
    await ordering.move_down(session, ordering.CATEGORY_SCOPE, ids[2])

    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == before


@pytest.mark.unit
async def test_moves_at_boundaries_are_noops(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 3)
    before = await _snapshot(session_factory, ordering.CATEGORY_SCOPE)

    top = await ordering.move_up(session, ordering.CATEGORY_SCOPE, ids[0])
    bottom = await ordering.move_down(session, ordering.CATEGORY_SCOPE, ids[2])

    assert top.moved is False and top.order_index == 1
    assert bottom.moved is False and bottom.order_index == 3
    assert top.swapped_with_id is None
    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == before


@pytest.mark.unit
async def test_single_element_cannot_move(session: AsyncSession):
    (only,) = await _make_categories(session, 1)

    assert (await ordering.move_up(session, ordering.CATEGORY_SCOPE, only)).moved is False
    assert (await ordering.move_down(session, ordering.CATEGORY_SCOPE, only)).moved is False


@pytest.mark.unit
async def test_move_unknown_element_raises_not_found(session: AsyncSession):
    await _make_categories(session, 2)

    with pytest.raises(NotFoundError):
        await ordering.move_up(session, ordering.CATEGORY_SCOPE, 9999)


@pytest.mark.unit
async def test_item_move_ignores_other_categories(session: AsyncSession, session_factory):
    first = await create_category(session, name="first")
    second = await create_category(session, name="second")
    a = await create_item(session, category=first)
    b = await create_item(session, category=first)
    other = await create_item(session, category=second)

    await ordering.move_down(session, ordering.item_scope(first.id), a.id)

    assert await _snapshot(session_factory, ordering.item_scope(first.id)) == [(b.id, 1), (a.id, 2)]
    assert await _snapshot(session_factory, ordering.item_scope(second.id)) == [(other.id, 1)]


@pytest.mark.unit
async def test_item_from_other_category_is_not_found(session: AsyncSession):
    first = await create_category(session, name="first")
    second = await create_category(session, name="second")
    await create_item(session, category=first)
    stranger = await create_item(session, category=second)

    with pytest.raises(NotFoundError):
        await ordering.move_up(session, ordering.item_scope(first.id), stranger.id)


@pytest.mark.unit
async def test_missing_neighbor_raises_invariant_violation(session: AsyncSession, session_factory):
    low = await create_category(session, name="low", order_index=1)
    high = await create_category(session, name="high", order_index=3)
    # The failed move rolls back and expires both instances.
    low_id, high_id = low.id, high.id

    with pytest.raises(InvariantViolation):
        await ordering.move_down(session, ordering.CATEGORY_SCOPE, low_id)

    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(low_id, 1), (high_id, 3)]


@pytest.mark.unit
async def test_normalize_closes_gaps_keeping_order(session: AsyncSession, session_factory):
    a = await create_category(session, name="a", order_index=2)
    b = await create_category(session, name="b", order_index=5)
    c = await create_category(session, name="c", order_index=9)

    normalized = await ordering.normalize(session, ordering.CATEGORY_SCOPE)

    assert [(element.id, element.order_index) for element in normalized] == [(a.id, 1), (b.id, 2), (c.id, 3)]
    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(a.id, 1), (b.id, 2), (c.id, 3)]


@pytest.mark.unit
async def test_reorder_transaction_swaps_both_rows(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 2)

    await ordering.reorder_transaction(
        session,
        ordering.CATEGORY_SCOPE,
        a_id=ids[0],
        a_index_old=1,
        a_index_new=2,
        b_id=ids[1],
        b_index_old=2,
        b_index_new=1,
    )

    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(ids[1], 1), (ids[0], 2)]


@pytest.mark.unit
async def test_reorder_transaction_rejects_stale_indices(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 3)
    before = await _snapshot(session_factory, ordering.CATEGORY_SCOPE)

    # ids[1] is really at 2; the caller believes it is still at 3.
    with pytest.raises(ConflictError):
        await ordering.reorder_transaction(
            session,
            ordering.CATEGORY_SCOPE,
            a_id=ids[0],
            a_index_old=1,
            a_index_new=3,
            b_id=ids[1],
            b_index_old=3,
            b_index_new=1,
        )

    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == before


@pytest.mark.unit
async def test_delete_repacks_following_items(session: AsyncSession, session_factory):
    category = await create_category(session, name="docs")
    items = [await create_item(session, category=category) for _ in range(4)]
    scope = ordering.item_scope(category.id)

    await ordering.delete_element(session, scope, items[1])

    snapshot = await _snapshot(session_factory, scope)
    assert [element_id for element_id, _ in snapshot] == [items[0].id, items[2].id, items[3].id]
    _assert_contiguous(snapshot)


@pytest.mark.unit
async def test_delete_last_element_leaves_prefix_untouched(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 3)
    async with session_factory() as other:
        last = await ordering.list_ordered(other, ordering.CATEGORY_SCOPE)
        await ordering.delete_element(other, ordering.CATEGORY_SCOPE, last[-1])

    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [(ids[0], 1), (ids[1], 2)]


@pytest.mark.unit
async def test_append_after_delete_keeps_contiguity(session: AsyncSession, session_factory):
    category = await create_category(session, name="docs")
    items = [await create_item(session, category=category) for _ in range(3)]
    scope = ordering.item_scope(category.id)

    await ordering.delete_element(session, scope, items[0])
    appended = await create_item(session, category=category)

    assert appended.order_index == 3
    _assert_contiguous(await _snapshot(session_factory, scope))


@pytest.mark.service
async def test_concurrent_moves_on_disjoint_pairs_both_apply(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 4)

    async def move(operation, element_id):
        async with session_factory() as own_session:
            return await operation(own_session, ordering.CATEGORY_SCOPE, element_id)

    first, second = await asyncio.gather(
        move(ordering.move_down, ids[0]),
        move(ordering.move_up, ids[3]),
    )

    assert first.moved and second.moved
    assert await _snapshot(session_factory, ordering.CATEGORY_SCOPE) == [
        (ids[1], 1),
        (ids[0], 2),
        (ids[3], 3),
        (ids[2], 4),
    ]


@pytest.mark.service
async def test_concurrent_moves_on_overlapping_pair_never_corrupt(session: AsyncSession, session_factory):
    ids = await _make_categories(session, 4)

    async def move(operation, element_id):
        async with session_factory() as own_session:
            return await operation(own_session, ordering.CATEGORY_SCOPE, element_id)

    outcomes = await asyncio.gather(
        move(ordering.move_down, ids[1]),
        move(ordering.move_up, ids[2]),
        move(ordering.move_up, ids[1]),
        return_exceptions=True,
    )

    for outcome in outcomes:
        assert isinstance(outcome, (ordering.MoveResult, ConflictError, InvariantViolation)), outcome
    snapshot = await _snapshot(session_factory, ordering.CATEGORY_SCOPE)
    _assert_contiguous(snapshot)
    assert sorted(element_id for element_id, _ in snapshot) == sorted(ids)
