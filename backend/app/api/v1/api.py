from fastapi import APIRouter

from app.api.v1.endpoints import (
    announcements,
    applications,
    auth,
    categories,
    items,
    permissions,
    profiles,
    tiers,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(tiers.router, prefix="/tiers", tags=["tiers"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(items.router, prefix="/categories/{category_id}/items", tags=["items"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["announcements"])


@api_router.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
