import logging

from fastapi import APIRouter

from app.api.deps import IdentityDep, SessionDep
from app.schemas.auth import SessionStatus
from app.services import applications as applications_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/session", response_model=SessionStatus)
async def start_session(session: SessionDep, identity: IdentityDep) -> SessionStatus:
    """Bridge a fresh sign-in to the member's approved application.

    The first sign-in after approval binds the identity to the profile;
    later sign-ins just report the current state.
    """
    bound = None
    if identity.user_id:
        bound = await applications_service.bind_identity(
            session,
            email=identity.email,
            user_id=identity.user_id,
        )
        await session.commit()

    profile = bound or await applications_service.get_profile_by_email(session, identity.email)
    if profile is None:
        logger.info("Sign-in without an application")
    return SessionStatus(
        email=identity.email,
        is_global_admin=identity.is_global_admin,
        profile_id=profile.id if profile else None,
        status=profile.status if profile else None,
        membership_tier_id=profile.membership_tier_id if profile else None,
        bound=bound is not None,
    )
