"""Tests for the membership application workflow.

Tests cover:
- Applying and re-applying (including demotion of approved members)
- Validation of missing fields and unknown tiers
- Status transitions and their timestamps
- Tier reassignment alongside or without a transition
- Binding a signed-in identity to an approved profile
"""

import pytest
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import InvalidTier, InvalidTransition, MissingField, NotFoundError, ValidationError
from app.models.profile import Profile, ProfileStatus
from app.services import applications as applications_service
from app.services.applications import can_transition
from app.testing.factories import create_profile, create_tier


async def _profiles_for(session: AsyncSession, email: str) -> list[Profile]:
    result = await session.exec(select(Profile).where(Profile.email == email))
    return list(result.all())


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (ProfileStatus.pending, ProfileStatus.approved, True),
        (ProfileStatus.pending, ProfileStatus.rejected, True),
        (ProfileStatus.approved, ProfileStatus.suspended, True),
        (ProfileStatus.suspended, ProfileStatus.approved, True),
        (ProfileStatus.pending, ProfileStatus.suspended, False),
        (ProfileStatus.rejected, ProfileStatus.approved, False),
        (ProfileStatus.approved, ProfileStatus.rejected, False),
        (ProfileStatus.approved, ProfileStatus.approved, False),
    ],
)
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


# ---------------------------------------------------------------------------
# apply_membership
# ---------------------------------------------------------------------------


@pytest.mark.service
async def test_apply_creates_pending_profile(session: AsyncSession):
    tier = await create_tier(session, name="gold")

    profile = await applications_service.apply_membership(
        session, email=" New@Example.com ", display_name="New Member", tier_name="Gold"
    )

    assert profile.email == "new@example.com"
    assert profile.status == ProfileStatus.pending
    assert profile.membership_tier_id == tier.id
    assert profile.applied_at is not None
    assert profile.approved_at is None


@pytest.mark.service
async def test_apply_twice_keeps_single_pending_profile(session: AsyncSession):
    await create_tier(session, name="gold")

    for _ in range(2):
        await applications_service.apply_membership(
            session, email="member@example.com", display_name="Member", tier_name="gold"
        )
        await session.commit()

    profiles = await _profiles_for(session, "member@example.com")
    assert len(profiles) == 1
    assert profiles[0].status == ProfileStatus.pending


@pytest.mark.service
async def test_reapply_demotes_approved_member_and_changes_tier(session: AsyncSession):
    gold = await create_tier(session, name="gold")
    silver = await create_tier(session, name="silver")
    existing = await create_profile(session, tier=gold, email="member@example.com")

    profile = await applications_service.apply_membership(
        session, email="member@example.com", display_name="Renamed", tier_name="silver"
    )

    assert profile.id == existing.id
    assert profile.status == ProfileStatus.pending
    assert profile.membership_tier_id == silver.id
    assert profile.display_name == "Renamed"


@pytest.mark.service
async def test_reapply_after_rejection_restarts_at_pending(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    await create_profile(session, tier=tier, status=ProfileStatus.rejected, email="member@example.com")

    profile = await applications_service.apply_membership(
        session, email="member@example.com", display_name="Member", tier_name="gold"
    )

    assert profile.status == ProfileStatus.pending


@pytest.mark.service
@pytest.mark.parametrize(
    "email,tier_name",
    [(None, "gold"), ("   ", "gold"), ("member@example.com", None), ("member@example.com", "")],
)
async def test_apply_missing_field_writes_nothing(session: AsyncSession, email, tier_name):
    await create_tier(session, name="gold")

    with pytest.raises(MissingField):
        await applications_service.apply_membership(
            session, email=email, display_name="Member", tier_name=tier_name
        )

    assert await applications_service.list_profiles(session) == []


@pytest.mark.service
async def test_apply_unknown_tier_is_rejected(session: AsyncSession):
    await create_tier(session, name="gold")

    with pytest.raises(InvalidTier):
        await applications_service.apply_membership(
            session, email="member@example.com", display_name="Member", tier_name="platinum"
        )

    assert await applications_service.list_profiles(session) == []


@pytest.mark.service
async def test_invalid_tier_is_a_validation_error(session: AsyncSession):
    with pytest.raises(ValidationError):
        await applications_service.apply_membership(
            session, email="member@example.com", display_name="Member", tier_name="nope"
        )


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


@pytest.mark.service
async def test_approve_records_approved_at(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    pending = await create_profile(session, tier=tier, status=ProfileStatus.pending)

    profile = await applications_service.approve(session, pending.id)

    assert profile.status == ProfileStatus.approved
    assert profile.approved_at is not None


@pytest.mark.service
async def test_suspend_keeps_approved_at(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    approved = await create_profile(session, tier=tier)
    approved_at = approved.approved_at

    profile = await applications_service.suspend(session, approved.id)

    assert profile.status == ProfileStatus.suspended
    assert profile.approved_at == approved_at


@pytest.mark.service
async def test_reinstate_suspended_member(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    suspended = await create_profile(session, tier=tier, status=ProfileStatus.suspended)

    profile = await applications_service.approve(session, suspended.id)

    assert profile.status == ProfileStatus.approved


@pytest.mark.service
async def test_rejected_profile_cannot_be_approved(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    rejected = await create_profile(session, tier=tier, status=ProfileStatus.rejected)

    with pytest.raises(InvalidTransition):
        await applications_service.approve(session, rejected.id)

    await session.refresh(rejected)
    assert rejected.status == ProfileStatus.rejected


@pytest.mark.service
async def test_approve_with_tier_reassignment(session: AsyncSession):
    gold = await create_tier(session, name="gold")
    silver = await create_tier(session, name="silver")
    pending = await create_profile(session, tier=gold, status=ProfileStatus.pending)

    profile = await applications_service.approve(session, pending.id, membership_tier_id=silver.id)

    assert profile.status == ProfileStatus.approved
    assert profile.membership_tier_id == silver.id


@pytest.mark.service
async def test_tier_change_without_transition(session: AsyncSession):
    gold = await create_tier(session, name="gold")
    silver = await create_tier(session, name="silver")
    suspended = await create_profile(session, tier=gold, status=ProfileStatus.suspended)

    profile = await applications_service.update_profile(
        session, profile_id=suspended.id, membership_tier_id=silver.id
    )

    assert profile.status == ProfileStatus.suspended
    assert profile.membership_tier_id == silver.id


@pytest.mark.service
async def test_update_with_unknown_tier_is_not_found(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    profile = await create_profile(session, tier=tier)

    with pytest.raises(NotFoundError):
        await applications_service.update_profile(session, profile_id=profile.id, membership_tier_id=9999)


@pytest.mark.service
async def test_update_requires_something_to_change(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    profile = await create_profile(session, tier=tier)

    with pytest.raises(ValidationError):
        await applications_service.update_profile(session, profile_id=profile.id)


@pytest.mark.service
async def test_update_unknown_profile_is_not_found(session: AsyncSession):
    with pytest.raises(NotFoundError):
        await applications_service.reject(session, 9999)


@pytest.mark.service
async def test_list_profiles_filters_by_status(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    pending = await create_profile(session, tier=tier, status=ProfileStatus.pending)
    await create_profile(session, tier=tier)

    profiles = await applications_service.list_profiles(session, status=ProfileStatus.pending)

    assert [profile.id for profile in profiles] == [pending.id]


# ---------------------------------------------------------------------------
# bind_identity
# ---------------------------------------------------------------------------


@pytest.mark.service
async def test_bind_identity_attaches_to_approved_profile(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    await create_profile(session, tier=tier, email="member@example.com")

    profile = await applications_service.bind_identity(session, email="Member@example.com", user_id="uid-1")

    assert profile is not None
    assert profile.user_id == "uid-1"


@pytest.mark.service
async def test_bind_identity_is_stable_for_same_identity(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    await create_profile(session, tier=tier, email="member@example.com", user_id="uid-1")

    profile = await applications_service.bind_identity(session, email="member@example.com", user_id="uid-1")

    assert profile is not None


@pytest.mark.service
async def test_bind_identity_refuses_other_identity(session: AsyncSession):
    tier = await create_tier(session, name="gold")
    await create_profile(session, tier=tier, email="member@example.com", user_id="uid-1")

    assert await applications_service.bind_identity(session, email="member@example.com", user_id="uid-2") is None


@pytest.mark.service
@pytest.mark.parametrize("status", [ProfileStatus.pending, ProfileStatus.suspended, ProfileStatus.rejected])
async def test_bind_identity_requires_approved_profile(session: AsyncSession, status: ProfileStatus):
    tier = await create_tier(session, name="gold")
    await create_profile(session, tier=tier, status=status, email="member@example.com")

    assert await applications_service.bind_identity(session, email="member@example.com", user_id="uid-1") is None


@pytest.mark.service
async def test_bind_identity_without_profile_returns_none(session: AsyncSession):
    assert await applications_service.bind_identity(session, email="nobody@example.com", user_id="uid-1") is None
