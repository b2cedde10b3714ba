from fastapi import APIRouter

from app.api.deps import SessionDep
from app.core.messages import ProfileMessages
from app.schemas.profile import ApplicationResult, MembershipApplication
from app.services import applications as applications_service

router = APIRouter()


@router.post("/", response_model=ApplicationResult)
async def apply_membership(payload: MembershipApplication, session: SessionDep) -> ApplicationResult:
    """Self-service application; re-applying resets the profile to pending."""
    profile = await applications_service.apply_membership(
        session,
        email=payload.email,
        display_name=payload.display_name,
        tier_name=payload.tier_name,
    )
    await session.commit()
    return ApplicationResult(message=ProfileMessages.APPLICATION_SUBMITTED, status=profile.status)
