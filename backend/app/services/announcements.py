from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.core.messages import AnnouncementMessages
from app.models.announcement import Announcement


async def get_announcement(session: AsyncSession, announcement_id: int) -> Announcement:
    result = await session.exec(select(Announcement).where(Announcement.id == announcement_id))
    announcement = result.one_or_none()
    if announcement is None:
        raise NotFoundError(AnnouncementMessages.NOT_FOUND)
    return announcement


async def list_announcements(session: AsyncSession, *, include_inactive: bool = False) -> list[Announcement]:
    """Newest first; inactive announcements only when asked for."""
    stmt = select(Announcement)
    if not include_inactive:
        stmt = stmt.where(Announcement.is_active.is_(True))
    stmt = stmt.order_by(Announcement.created_at.desc(), Announcement.id.desc())
    result = await session.exec(stmt)
    return list(result.all())


def _require_text(value: str | None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(AnnouncementMessages.FIELDS_REQUIRED)
    return cleaned


async def create_announcement(session: AsyncSession, *, title: str, content: str) -> Announcement:
    announcement = Announcement(title=_require_text(title), content=_require_text(content))
    session.add(announcement)
    await session.flush()
    return announcement


async def update_announcement(
    session: AsyncSession,
    announcement: Announcement,
    *,
    title: str | None = None,
    content: str | None = None,
    is_active: bool | None = None,
) -> Announcement:
    if title is not None:
        announcement.title = _require_text(title)
    if content is not None:
        announcement.content = _require_text(content)
    if is_active is not None:
        announcement.is_active = is_active
    announcement.updated_at = datetime.now(timezone.utc)
    session.add(announcement)
    await session.flush()
    return announcement


async def delete_announcement(session: AsyncSession, announcement: Announcement) -> None:
    await session.delete(announcement)
    await session.flush()
