from typing import List

from fastapi import APIRouter, Response, status

from app.api.deps import AdminIdentityDep, SessionDep
from app.models.tier import Tier
from app.schemas.tier import TierCreate, TierRead, TierUpdate
from app.services import tiers as tiers_service

router = APIRouter()


@router.get("/", response_model=List[TierRead])
async def list_tiers(session: SessionDep) -> List[Tier]:
    """Public: the application form needs the tier choices before sign-in."""
    return await tiers_service.list_tiers(session)


@router.post("/", response_model=TierRead, status_code=status.HTTP_201_CREATED)
async def create_tier(payload: TierCreate, session: SessionDep, _admin: AdminIdentityDep) -> Tier:
    tier = await tiers_service.create_tier(
        session,
        name=payload.name,
        display_name=payload.display_name,
        description=payload.description,
    )
    await session.commit()
    await session.refresh(tier)
    return tier


@router.patch("/{tier_id}", response_model=TierRead)
async def update_tier(
    tier_id: int,
    payload: TierUpdate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Tier:
    tier = await tiers_service.get_tier(session, tier_id)
    update_data = payload.model_dump(exclude_unset=True)
    tier = await tiers_service.update_tier(session, tier, **update_data)
    await session.commit()
    await session.refresh(tier)
    return tier


@router.delete("/{tier_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_tier(tier_id: int, session: SessionDep, _admin: AdminIdentityDep) -> Response:
    tier = await tiers_service.get_tier(session, tier_id)
    await tiers_service.delete_tier(session, tier)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
