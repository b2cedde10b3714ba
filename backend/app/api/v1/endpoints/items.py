from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Response, status

from app.api.deps import OptionalIdentityDep, SessionDep, resolve_category_access
from app.models.category import Category, Item
from app.schemas.category import ItemCreate, ItemRead, ItemUpdate, MoveResponse
from app.services import categories as categories_service
from app.services import items as items_service
from app.services import ordering
from app.services.permissions import PermissionType, require_category_access

router = APIRouter()


async def _category_for(
    session: SessionDep,
    identity: OptionalIdentityDep,
    category_id: int,
    permission_type: PermissionType,
) -> Category:
    """Load the category and require ``permission_type`` on it."""
    category = await categories_service.get_category(session, category_id)
    access = await resolve_category_access(session, identity, category)
    require_category_access(access, permission_type)
    return category


@router.get("/", response_model=List[ItemRead])
async def list_items(category_id: int, session: SessionDep, identity: OptionalIdentityDep) -> List[Item]:
    await _category_for(session, identity, category_id, PermissionType.view)
    return await items_service.list_items(session, category_id)


@router.post("/", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    category_id: int,
    payload: ItemCreate,
    session: SessionDep,
    identity: OptionalIdentityDep,
) -> Item:
    category = await _category_for(session, identity, category_id, PermissionType.edit)
    item = await items_service.create_item(
        session,
        category=category,
        title=payload.title,
        link=payload.link,
        description=payload.description,
    )
    await session.commit()
    await session.refresh(item)
    return item


@router.get("/{item_id}", response_model=ItemRead)
async def read_item(category_id: int, item_id: int, session: SessionDep, identity: OptionalIdentityDep) -> Item:
    await _category_for(session, identity, category_id, PermissionType.view)
    return await items_service.get_item(session, category_id=category_id, item_id=item_id)


@router.patch("/{item_id}", response_model=ItemRead)
async def update_item(
    category_id: int,
    item_id: int,
    payload: ItemUpdate,
    session: SessionDep,
    identity: OptionalIdentityDep,
) -> Item:
    await _category_for(session, identity, category_id, PermissionType.edit)
    item = await items_service.get_item(session, category_id=category_id, item_id=item_id)
    update_data = payload.model_dump(exclude_unset=True)
    item = await items_service.update_item(session, item, **update_data)
    await session.commit()
    await session.refresh(item)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_item(
    category_id: int,
    item_id: int,
    session: SessionDep,
    identity: OptionalIdentityDep,
) -> Response:
    await _category_for(session, identity, category_id, PermissionType.delete)
    item = await items_service.get_item(session, category_id=category_id, item_id=item_id)
    await items_service.delete_item(session, item)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{item_id}/move-up", response_model=MoveResponse)
async def move_item_up(
    category_id: int,
    item_id: int,
    session: SessionDep,
    identity: OptionalIdentityDep,
) -> MoveResponse:
    await _category_for(session, identity, category_id, PermissionType.edit)
    result = await ordering.move_up(session, ordering.item_scope(category_id), item_id)
    return MoveResponse(**asdict(result))


@router.post("/{item_id}/move-down", response_model=MoveResponse)
async def move_item_down(
    category_id: int,
    item_id: int,
    session: SessionDep,
    identity: OptionalIdentityDep,
) -> MoveResponse:
    await _category_for(session, identity, category_id, PermissionType.edit)
    result = await ordering.move_down(session, ordering.item_scope(category_id), item_id)
    return MoveResponse(**asdict(result))
