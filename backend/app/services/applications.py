"""Membership application workflow.

A profile moves through these states, one per email address::

    (none) --apply--> pending --approve--> approved --suspend--> suspended
                         |                    ^                      |
                         +--reject--> rejected +-------approve--------+

``apply_membership`` may be called again from any state; it overwrites
the display name and tier and puts the profile back to ``pending``.  That
includes approved members, who then wait for re-approval: this is the
self-service way to ask for a different tier.

Tier reassignment is independent of status and may ride along with a
transition or be applied on its own.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError, InvalidTier, InvalidTransition, MissingField, NotFoundError, ValidationError
from app.core.messages import ProfileMessages, TierMessages
from app.models.profile import Profile, ProfileStatus
from app.services import tiers as tiers_service

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ProfileStatus, frozenset[ProfileStatus]] = {
    ProfileStatus.pending: frozenset({ProfileStatus.approved, ProfileStatus.rejected}),
    ProfileStatus.approved: frozenset({ProfileStatus.suspended}),
    ProfileStatus.suspended: frozenset({ProfileStatus.approved}),
    ProfileStatus.rejected: frozenset(),
}


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def can_transition(current: ProfileStatus, target: ProfileStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


async def get_profile(session: AsyncSession, profile_id: int) -> Profile:
    result = await session.exec(select(Profile).where(Profile.id == profile_id))
    profile = result.one_or_none()
    if profile is None:
        raise NotFoundError(ProfileMessages.NOT_FOUND)
    return profile


async def get_profile_by_email(session: AsyncSession, email: str) -> Profile | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    result = await session.exec(select(Profile).where(Profile.email == normalized))
    return result.one_or_none()


async def list_profiles(session: AsyncSession, *, status: ProfileStatus | None = None) -> list[Profile]:
    stmt = select(Profile)
    if status is not None:
        stmt = stmt.where(Profile.status == status)
    stmt = stmt.order_by(Profile.applied_at.desc(), Profile.id.desc())
    result = await session.exec(stmt)
    return list(result.all())


async def apply_membership(
    session: AsyncSession,
    *,
    email: str | None,
    display_name: str | None,
    tier_name: str | None,
) -> Profile:
    """Create or reset the profile for ``email`` as a pending application."""
    normalized_email = normalize_email(email)
    if not normalized_email:
        raise MissingField(ProfileMessages.EMAIL_REQUIRED)
    if not tiers_service.normalize_tier_name(tier_name):
        raise MissingField(ProfileMessages.TIER_REQUIRED)

    tier = await tiers_service.get_tier_by_name(session, tier_name)
    if tier is None:
        raise InvalidTier(TierMessages.INVALID)

    now = datetime.now(timezone.utc)
    profile = await get_profile_by_email(session, normalized_email)
    if profile is not None:
        previous = profile.status
        profile.display_name = display_name
        profile.membership_tier_id = tier.id
        profile.status = ProfileStatus.pending
        profile.applied_at = now
        profile.updated_at = now
        logger.info("Re-application for profile %s (%s -> pending)", profile.id, previous.value)
    else:
        profile = Profile(
            email=normalized_email,
            display_name=display_name,
            membership_tier_id=tier.id,
            status=ProfileStatus.pending,
            applied_at=now,
        )
    session.add(profile)
    try:
        await session.flush()
    except IntegrityError as exc:
        # A concurrent first application for the same email won the insert.
        raise ConflictError(ProfileMessages.APPLICATION_CONFLICT) from exc
    return profile


def _apply_transition(profile: Profile, target: ProfileStatus, now: datetime) -> None:
    current = profile.status
    if not can_transition(current, target):
        raise InvalidTransition(
            ProfileMessages.INVALID_TRANSITION.format(current=current.value, target=target.value)
        )
    if current == ProfileStatus.pending and target == ProfileStatus.approved:
        profile.approved_at = now
    profile.status = target


async def update_profile(
    session: AsyncSession,
    *,
    profile_id: int,
    status: ProfileStatus | None = None,
    membership_tier_id: int | None = None,
) -> Profile:
    """Apply an optional status transition and an optional tier change together."""
    if status is None and membership_tier_id is None:
        raise ValidationError(ProfileMessages.NOTHING_TO_UPDATE)

    profile = await get_profile(session, profile_id)
    if membership_tier_id is not None:
        await tiers_service.get_tier(session, membership_tier_id)

    now = datetime.now(timezone.utc)
    previous = profile.status
    if status is not None:
        _apply_transition(profile, status, now)
    if membership_tier_id is not None:
        profile.membership_tier_id = membership_tier_id
    profile.updated_at = now
    session.add(profile)
    await session.flush()
    if status is not None:
        logger.info("Profile %s: %s -> %s", profile.id, previous.value, profile.status.value)
    return profile


async def approve(session: AsyncSession, profile_id: int, *, membership_tier_id: int | None = None) -> Profile:
    return await update_profile(
        session,
        profile_id=profile_id,
        status=ProfileStatus.approved,
        membership_tier_id=membership_tier_id,
    )


async def reject(session: AsyncSession, profile_id: int) -> Profile:
    return await update_profile(session, profile_id=profile_id, status=ProfileStatus.rejected)


async def suspend(session: AsyncSession, profile_id: int) -> Profile:
    return await update_profile(session, profile_id=profile_id, status=ProfileStatus.suspended)


async def bind_identity(session: AsyncSession, *, email: str, user_id: str) -> Profile | None:
    """Attach a signed-in identity to its approved, not yet bound profile.

    Returns ``None`` when there is nothing to bind; the caller then has no
    elevated permissions.
    """
    normalized_email = normalize_email(email)
    if not normalized_email or not user_id:
        return None

    result = await session.exec(
        select(Profile).where(
            Profile.email == normalized_email,
            Profile.status == ProfileStatus.approved,
        )
    )
    profile = result.one_or_none()
    if profile is None:
        return None
    if profile.user_id is not None:
        return profile if profile.user_id == user_id else None

    profile.user_id = user_id
    profile.updated_at = datetime.now(timezone.utc)
    session.add(profile)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError(ProfileMessages.IDENTITY_TAKEN) from exc
    logger.info("Bound identity to profile %s", profile.id)
    return profile
