from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import ADMIN_TIER_NAME
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.messages import TierMessages
from app.models.permission import CategoryPermission
from app.models.profile import Profile
from app.models.tier import Tier

logger = logging.getLogger(__name__)


def normalize_tier_name(name: str | None) -> str:
    return (name or "").strip().lower()


async def get_tier(session: AsyncSession, tier_id: int) -> Tier:
    result = await session.exec(select(Tier).where(Tier.id == tier_id))
    tier = result.one_or_none()
    if tier is None:
        raise NotFoundError(TierMessages.NOT_FOUND)
    return tier


async def get_tier_by_name(session: AsyncSession, name: str) -> Tier | None:
    result = await session.exec(select(Tier).where(Tier.name == normalize_tier_name(name)))
    return result.one_or_none()


async def list_tiers(session: AsyncSession) -> list[Tier]:
    result = await session.exec(select(Tier).order_by(Tier.name.asc()))
    return list(result.all())


async def _check_duplicate_name(session: AsyncSession, name: str, exclude_tier_id: int | None = None) -> None:
    stmt = select(Tier).where(func.lower(Tier.name) == name)
    if exclude_tier_id is not None:
        stmt = stmt.where(Tier.id != exclude_tier_id)
    result = await session.exec(stmt)
    if result.first() is not None:
        raise ConflictError(TierMessages.NAME_TAKEN)


async def _flush(session: AsyncSession) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError(TierMessages.NAME_TAKEN) from exc


async def create_tier(
    session: AsyncSession,
    *,
    name: str,
    display_name: str,
    description: str | None = None,
) -> Tier:
    cleaned = normalize_tier_name(name)
    if not cleaned:
        raise ValidationError(TierMessages.NAME_REQUIRED)
    await _check_duplicate_name(session, cleaned)
    tier = Tier(name=cleaned, display_name=display_name.strip() or cleaned, description=description)
    session.add(tier)
    await _flush(session)
    logger.info("Created membership tier %s", cleaned)
    return tier


async def update_tier(
    session: AsyncSession,
    tier: Tier,
    *,
    name: str | None = None,
    display_name: str | None = None,
    description: str | None = None,
) -> Tier:
    if name is not None:
        cleaned = normalize_tier_name(name)
        if not cleaned:
            raise ValidationError(TierMessages.NAME_REQUIRED)
        if cleaned != tier.name:
            if tier.name == ADMIN_TIER_NAME:
                raise ValidationError(TierMessages.ADMIN_RENAME)
            await _check_duplicate_name(session, cleaned, exclude_tier_id=tier.id)
            tier.name = cleaned
    if display_name is not None:
        tier.display_name = display_name.strip() or tier.name
    if description is not None:
        tier.description = description
    tier.updated_at = datetime.now(timezone.utc)
    session.add(tier)
    await _flush(session)
    return tier


async def delete_tier(session: AsyncSession, tier: Tier) -> None:
    """Delete a tier and its grants; profiles on it are left without a tier."""
    if tier.name == ADMIN_TIER_NAME:
        raise ValidationError(TierMessages.ADMIN_UNDELETABLE)
    await session.exec(delete(CategoryPermission).where(CategoryPermission.membership_tier_id == tier.id))
    await session.exec(
        update(Profile).where(Profile.membership_tier_id == tier.id).values(membership_tier_id=None)
    )
    await session.delete(tier)
    await session.flush()
    logger.info("Deleted membership tier %s", tier.name)


async def ensure_default_tiers(session: AsyncSession, names: list[str]) -> list[Tier]:
    """Create any missing tier from ``names``; existing tiers are untouched."""
    tiers: list[Tier] = []
    for name in names:
        tier = await get_tier_by_name(session, name)
        if tier is None:
            tier = await create_tier(session, name=name, display_name=name.replace("_", " ").title())
        tiers.append(tier)
    return tiers
