import asyncio
import logging

from app.core.config import settings
from app.db.session import AsyncSessionLocal, run_migrations
from app.services import tiers as tiers_service

logger = logging.getLogger(__name__)


async def init_default_tiers() -> None:
    async with AsyncSessionLocal() as session:
        tiers = await tiers_service.ensure_default_tiers(session, settings.DEFAULT_TIERS)
        await session.commit()
    logger.info("Membership tiers available: %s", ", ".join(tier.name for tier in tiers))


async def init() -> None:
    await run_migrations()
    await init_default_tiers()


if __name__ == "__main__":  # pragma: no cover
    asyncio.run(init())
