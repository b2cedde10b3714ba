from typing import List, Optional

from fastapi import APIRouter

from app.api.deps import AdminIdentityDep, SessionDep
from app.models.profile import Profile, ProfileStatus
from app.schemas.profile import ApproveRequest, ProfileRead, ProfileUpdate
from app.services import applications as applications_service

router = APIRouter()


@router.get("/", response_model=List[ProfileRead])
async def list_profiles(
    session: SessionDep,
    _admin: AdminIdentityDep,
    status: Optional[ProfileStatus] = None,
) -> List[Profile]:
    """Applications, newest first."""
    return await applications_service.list_profiles(session, status=status)


@router.get("/{profile_id}", response_model=ProfileRead)
async def get_profile(profile_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Profile:
    return await applications_service.get_profile(session, profile_id)


@router.patch("/{profile_id}", response_model=ProfileRead)
async def update_profile(
    profile_id: int,
    payload: ProfileUpdate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Profile:
    profile = await applications_service.update_profile(
        session,
        profile_id=profile_id,
        status=payload.status,
        membership_tier_id=payload.membership_tier_id,
    )
    await session.commit()
    return profile


@router.post("/{profile_id}/approve", response_model=ProfileRead)
async def approve_profile(
    profile_id: int,
    session: SessionDep,
    _admin: AdminIdentityDep,
    payload: Optional[ApproveRequest] = None,
) -> Profile:
    profile = await applications_service.approve(
        session,
        profile_id,
        membership_tier_id=payload.membership_tier_id if payload else None,
    )
    await session.commit()
    return profile


@router.post("/{profile_id}/reject", response_model=ProfileRead)
async def reject_profile(profile_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Profile:
    profile = await applications_service.reject(session, profile_id)
    await session.commit()
    return profile


@router.post("/{profile_id}/suspend", response_model=ProfileRead)
async def suspend_profile(profile_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Profile:
    profile = await applications_service.suspend(session, profile_id)
    await session.commit()
    return profile
