from typing import List

from fastapi import APIRouter, Response, status

from app.api.deps import AdminIdentityDep, OptionalIdentityDep, SessionDep
from app.models.announcement import Announcement
from app.schemas.announcement import AnnouncementCreate, AnnouncementRead, AnnouncementUpdate
from app.services import announcements as announcements_service

router = APIRouter()


@router.get("/", response_model=List[AnnouncementRead])
async def list_announcements(
    session: SessionDep,
    identity: OptionalIdentityDep,
    include_inactive: bool = False,
) -> List[Announcement]:
    """Active announcements; the global admin may ask for inactive ones too."""
    show_inactive = include_inactive and identity is not None and identity.is_global_admin
    return await announcements_service.list_announcements(session, include_inactive=show_inactive)


@router.post("/", response_model=AnnouncementRead, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    payload: AnnouncementCreate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Announcement:
    announcement = await announcements_service.create_announcement(
        session,
        title=payload.title,
        content=payload.content,
    )
    await session.commit()
    await session.refresh(announcement)
    return announcement


@router.patch("/{announcement_id}", response_model=AnnouncementRead)
async def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Announcement:
    announcement = await announcements_service.get_announcement(session, announcement_id)
    update_data = payload.model_dump(exclude_unset=True)
    announcement = await announcements_service.update_announcement(session, announcement, **update_data)
    await session.commit()
    await session.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_announcement(
    announcement_id: int,
    session: SessionDep,
    _admin: AdminIdentityDep,
) -> Response:
    announcement = await announcements_service.get_announcement(session, announcement_id)
    await announcements_service.delete_announcement(session, announcement)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
