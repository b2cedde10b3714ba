from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Response, status

from app.api.deps import AdminIdentityDep, OptionalIdentityDep, SessionDep, resolve_category_access
from app.models.category import Category
from app.schemas.category import (
    CategoryAccessRead,
    CategoryCreate,
    CategoryPasswordSet,
    CategoryPasswordVerify,
    CategoryPasswordVerifyResult,
    CategoryRead,
    CategoryUpdate,
    CategoryWithAccess,
    MoveResponse,
)
from app.services import categories as categories_service
from app.services import category_passwords as category_passwords_service
from app.services import ordering
from app.services.permissions import PermissionType, require_category_access

router = APIRouter()


def _with_access(category: Category, access) -> CategoryWithAccess:
    return CategoryWithAccess(
        **CategoryRead.model_validate(category).model_dump(),
        access=CategoryAccessRead(view=access.view, edit=access.edit, delete=access.delete),
    )


@router.get("/", response_model=List[CategoryWithAccess])
async def list_categories(session: SessionDep, identity: OptionalIdentityDep) -> List[CategoryWithAccess]:
    """Categories the caller may view, in display order."""
    visible: List[CategoryWithAccess] = []
    for category in await categories_service.list_categories(session):
        access = await resolve_category_access(session, identity, category)
        if access.view:
            visible.append(_with_access(category, access))
    return visible


@router.post("/", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, session: SessionDep, _admin: AdminIdentityDep) -> Category:
    category = await categories_service.create_category(
        session,
        name=payload.name,
        display_name=payload.display_name,
    )
    await session.commit()
    await session.refresh(category)
    return category


@router.post("/normalize", response_model=List[CategoryRead])
async def normalize_categories(session: SessionDep, _admin: AdminIdentityDep) -> List[Category]:
    """Rewrite category indices to 1..n, keeping their relative order."""
    return await ordering.normalize(session, ordering.CATEGORY_SCOPE)


@router.post("/verify-password", response_model=CategoryPasswordVerifyResult)
async def verify_category_password(
    payload: CategoryPasswordVerify,
    session: SessionDep,
) -> CategoryPasswordVerifyResult:
    valid = await category_passwords_service.verify_category_password(
        session,
        category_name=payload.category_name,
        password=payload.password,
    )
    return CategoryPasswordVerifyResult(valid=valid)


@router.get("/{category_id}", response_model=CategoryWithAccess)
async def read_category(category_id: int, session: SessionDep, identity: OptionalIdentityDep) -> CategoryWithAccess:
    category = await categories_service.get_category(session, category_id)
    access = await resolve_category_access(session, identity, category)
    require_category_access(access, PermissionType.view)
    return _with_access(category, access)


@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Category:
    category = await categories_service.get_category(session, category_id)
    update_data = payload.model_dump(exclude_unset=True)
    category = await categories_service.update_category(session, category, **update_data)
    await session.commit()
    await session.refresh(category)
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_category(category_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Response:
    category = await categories_service.get_category(session, category_id)
    await categories_service.delete_category(session, category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{category_id}/move-up", response_model=MoveResponse)
async def move_category_up(category_id: int, session: SessionDep, _admin: AdminIdentityDep) -> MoveResponse:
    result = await ordering.move_up(session, ordering.CATEGORY_SCOPE, category_id)
    return MoveResponse(**asdict(result))


@router.post("/{category_id}/move-down", response_model=MoveResponse)
async def move_category_down(category_id: int, session: SessionDep, _admin: AdminIdentityDep) -> MoveResponse:
    result = await ordering.move_down(session, ordering.CATEGORY_SCOPE, category_id)
    return MoveResponse(**asdict(result))


@router.put("/{category_id}/password", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def set_category_password(
    category_id: int,
    payload: CategoryPasswordSet,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Response:
    category = await categories_service.get_category(session, category_id)
    await category_passwords_service.set_category_password(session, category=category, password=payload.password)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{category_id}/password", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def clear_category_password(category_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Response:
    category = await categories_service.get_category(session, category_id)
    await category_passwords_service.clear_category_password(session, category=category)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
