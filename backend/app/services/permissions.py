"""Tier/category permission matrix and resolver.

Each ``CategoryPermission`` row grants a membership tier some subset of
view / edit / delete on one category.  Resolution is default-deny:

  - the global admin identity gets everything, for every category;
  - anyone else needs an *approved* profile whose tier has an explicit row
    for the category, and then gets exactly the flags stored on that row.

Nothing here caches; every decision is computed from a fresh read.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, StoreFailure, ValidationError
from app.core.messages import CategoryMessages, PermissionMessages, StoreMessages
from app.core.security import is_global_admin
from app.models.category import Category
from app.models.permission import PERMISSION_FIELDS, CategoryPermission
from app.models.profile import ProfileStatus
from app.services import applications as applications_service
from app.services import categories as categories_service
from app.services import tiers as tiers_service

logger = logging.getLogger(__name__)


class PermissionType(str, Enum):
    view = "view"
    edit = "edit"
    delete = "delete"


@dataclass(frozen=True)
class CategoryAccess:
    view: bool = False
    edit: bool = False
    delete: bool = False

    def allows(self, permission_type: PermissionType) -> bool:
        return getattr(self, permission_type.value)


NO_ACCESS = CategoryAccess()
FULL_ACCESS = CategoryAccess(view=True, edit=True, delete=True)


def _flag(value: bool | None) -> bool:
    # Nullable columns: anything but an explicit True is a denial.
    return value is True


def access_from_row(row: CategoryPermission | None) -> CategoryAccess:
    if row is None:
        return NO_ACCESS
    return CategoryAccess(
        view=_flag(row.can_view),
        edit=_flag(row.can_edit),
        delete=_flag(row.can_delete),
    )


def parse_permission_type(value: str | PermissionType) -> PermissionType:
    try:
        return PermissionType(value)
    except ValueError as exc:
        raise ValidationError(PermissionMessages.INVALID_TYPE) from exc


async def get_permission_row(
    session: AsyncSession,
    *,
    tier_id: int,
    category_id: int,
) -> CategoryPermission | None:
    stmt = select(CategoryPermission).where(
        CategoryPermission.membership_tier_id == tier_id,
        CategoryPermission.category_id == category_id,
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def resolve_for_category(
    session: AsyncSession,
    *,
    email: str | None,
    is_global_admin: bool,
    category: Category | None,
) -> CategoryAccess:
    if is_global_admin:
        return FULL_ACCESS
    if category is None or not email:
        return NO_ACCESS

    profile = await applications_service.get_profile_by_email(session, email)
    if profile is None or profile.status != ProfileStatus.approved:
        return NO_ACCESS
    if profile.membership_tier_id is None:
        return NO_ACCESS

    row = await get_permission_row(
        session,
        tier_id=profile.membership_tier_id,
        category_id=category.id,
    )
    return access_from_row(row)


async def resolve_permissions(
    session: AsyncSession,
    *,
    email: str | None,
    is_global_admin: bool,
    category_name: str,
) -> CategoryAccess:
    """Effective view/edit/delete for an actor on the named category."""
    if is_global_admin:
        return FULL_ACCESS
    category = await categories_service.get_category_by_name(session, category_name)
    return await resolve_for_category(
        session,
        email=email,
        is_global_admin=False,
        category=category,
    )


async def check_permission(
    session: AsyncSession,
    *,
    email: str | None,
    category_name: str,
    permission_type: str | PermissionType,
) -> bool:
    """Single yes/no answer for one permission type.

    Store errors are raised as ``StoreFailure`` so callers can tell a
    failed check apart from a denial; callers must treat it as a denial.
    """
    wanted = parse_permission_type(permission_type)
    try:
        access = await resolve_permissions(
            session,
            email=email,
            is_global_admin=is_global_admin(email),
            category_name=category_name,
        )
    except SQLAlchemyError as exc:
        logger.exception("Permission check failed for category %s", category_name)
        raise StoreFailure(StoreMessages.FAILURE) from exc
    return access.allows(wanted)


def require_category_access(access: CategoryAccess, permission_type: PermissionType) -> None:
    """Raise HTTPException if the resolved access lacks ``permission_type``."""
    if access.allows(permission_type):
        return
    detail = {
        PermissionType.view: CategoryMessages.VIEW_REQUIRED,
        PermissionType.edit: CategoryMessages.EDIT_REQUIRED,
        PermissionType.delete: CategoryMessages.DELETE_REQUIRED,
    }[permission_type]
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def set_permission(
    session: AsyncSession,
    *,
    tier_id: int | None,
    category_id: int | None,
    field: str,
    value: bool,
) -> CategoryPermission:
    """Upsert a single flag of the (tier, category) grant.

    An existing row only has ``field`` changed.  A missing row is created
    with ``field`` set and the other two flags False.
    """
    if tier_id is None or category_id is None:
        raise ValidationError(PermissionMessages.IDS_REQUIRED)
    if field not in PERMISSION_FIELDS:
        raise ValidationError(PermissionMessages.INVALID_FIELD)

    await tiers_service.get_tier(session, tier_id)
    await categories_service.get_category(session, category_id)

    row = await get_permission_row(session, tier_id=tier_id, category_id=category_id)
    if row is None:
        flags = {name: False for name in PERMISSION_FIELDS}
        flags[field] = bool(value)
        row = CategoryPermission(membership_tier_id=tier_id, category_id=category_id, **flags)
    else:
        setattr(row, field, bool(value))
    session.add(row)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Another request created the row between our read and insert.
        raise ConflictError(PermissionMessages.CONCURRENT_UPSERT) from exc
    logger.info("Permission %s=%s for tier=%s category=%s", field, value, tier_id, category_id)
    return row


async def list_permissions(
    session: AsyncSession,
    *,
    tier_id: int | None = None,
) -> list[CategoryPermission]:
    stmt = select(CategoryPermission)
    if tier_id is not None:
        stmt = stmt.where(CategoryPermission.membership_tier_id == tier_id)
    stmt = stmt.order_by(CategoryPermission.membership_tier_id.asc(), CategoryPermission.category_id.asc())
    result = await session.exec(stmt)
    return list(result.all())


async def permission_matrix(
    session: AsyncSession,
    *,
    tier_id: int,
) -> list[tuple[Category, CategoryAccess]]:
    """One entry per category, in display order, for a tier.

    Categories without a row come back with no access.
    """
    await tiers_service.get_tier(session, tier_id)
    rows = {row.category_id: row for row in await list_permissions(session, tier_id=tier_id)}
    categories = await categories_service.list_categories(session)
    return [(category, access_from_row(rows.get(category.id))) for category in categories]
