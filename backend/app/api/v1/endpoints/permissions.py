from typing import List, Optional

from fastapi import APIRouter, Query

from app.api.deps import AdminIdentityDep, IdentityDep, SessionDep
from app.models.permission import CategoryPermission
from app.schemas.permission import (
    CategoryPermissionsResult,
    MatrixEntry,
    PermissionCheckResult,
    PermissionRead,
    PermissionUpdate,
)
from app.services import permissions as permissions_service

router = APIRouter()


@router.get("/check", response_model=PermissionCheckResult)
async def check_permission(
    session: SessionDep,
    identity: IdentityDep,
    category: str = Query(..., min_length=1),
    permission_type: str = Query(...),
) -> PermissionCheckResult:
    allowed = await permissions_service.check_permission(
        session,
        email=identity.email,
        category_name=category,
        permission_type=permission_type,
    )
    return PermissionCheckResult(category=category, permission_type=permission_type, allowed=allowed)


@router.get("/categories/{category_name}", response_model=CategoryPermissionsResult)
async def resolve_category_permissions(
    category_name: str,
    session: SessionDep,
    identity: IdentityDep,
) -> CategoryPermissionsResult:
    access = await permissions_service.resolve_permissions(
        session,
        email=identity.email,
        is_global_admin=identity.is_global_admin,
        category_name=category_name,
    )
    return CategoryPermissionsResult(
        category=category_name,
        view=access.view,
        edit=access.edit,
        delete=access.delete,
    )


@router.get("/", response_model=List[PermissionRead])
async def list_permissions(
    session: SessionDep,
    _admin: AdminIdentityDep,
    tier_id: Optional[int] = None,
) -> List[CategoryPermission]:
    return await permissions_service.list_permissions(session, tier_id=tier_id)


@router.put("/", response_model=PermissionRead)
async def set_permission(
    payload: PermissionUpdate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> CategoryPermission:
    row = await permissions_service.set_permission(
        session,
        tier_id=payload.membership_tier_id,
        category_id=payload.category_id,
        field=payload.field,
        value=payload.value,
    )
    await session.commit()
    await session.refresh(row)
    return row


@router.get("/matrix/{tier_id}", response_model=List[MatrixEntry])
async def get_permission_matrix(
    tier_id: int,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> List[MatrixEntry]:
    entries = await permissions_service.permission_matrix(session, tier_id=tier_id)
    return [
        MatrixEntry(
            category_id=category.id,
            category_name=category.name,
            category_display_name=category.display_name,
            can_view=access.view,
            can_edit=access.edit,
            can_delete=access.delete,
        )
        for category, access in entries
    ]
