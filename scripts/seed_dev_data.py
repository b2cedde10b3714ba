"""Dev data seeder for Tierboard.

Usage:
    python seed_dev_data.py          # Create test data
    python seed_dev_data.py --clean  # Remove seeded test data

Designed to run from the backend/ directory (CWD) so app imports resolve.
Saves created IDs to .vscode/.dev_seed_ids.json for cleanup.

Creates two extra membership tiers, a handful of ordered categories with
items, a permission matrix between them, member profiles in every status
and one announcement.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Bootstrap: add backend/ to sys.path so `app.*` imports work when invoked
# as `python ../scripts/seed_dev_data.py` from the backend/ directory.
# ---------------------------------------------------------------------------
BACKEND_DIR = Path(__file__).resolve().parent.parent / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.exceptions import NotFoundError  # noqa: E402
from app.db.session import AsyncSessionLocal  # noqa: E402
from app.models.profile import Profile, ProfileStatus  # noqa: E402
from app.models.tier import Tier  # noqa: E402
from app.services import announcements as announcements_service  # noqa: E402
from app.services import applications as applications_service  # noqa: E402
from app.services import categories as categories_service  # noqa: E402
from app.services import items as items_service  # noqa: E402
from app.services import permissions as permissions_service  # noqa: E402
from app.services import tiers as tiers_service  # noqa: E402

STATE_FILE = Path(__file__).resolve().parent.parent / ".vscode" / ".dev_seed_ids.json"

TIERS = [
    ("gold", "Gold", "Full access to every shared resource"),
    ("silver", "Silver", "Read access plus a few editable lists"),
]

# name -> (display name, [(title, link)])
CATEGORIES = {
    "onboarding": (
        "Onboarding",
        [
            ("Welcome guide", "https://example.com/welcome"),
            ("House rules", "https://example.com/rules"),
        ],
    ),
    "tools": (
        "Tools",
        [
            ("Shared calendar", "https://example.com/calendar"),
            ("Booking sheet", "https://example.com/booking"),
            ("Inventory", "https://example.com/inventory"),
        ],
    ),
    "archive": (
        "Archive",
        [("Minutes 2025", "https://example.com/minutes-2025")],
    ),
}

# (tier, category) -> granted fields
GRANTS = {
    ("gold", "onboarding"): ("can_view", "can_edit", "can_delete"),
    ("gold", "tools"): ("can_view", "can_edit", "can_delete"),
    ("gold", "archive"): ("can_view", "can_edit"),
    ("silver", "onboarding"): ("can_view",),
    ("silver", "tools"): ("can_view", "can_edit"),
}

PROFILES = [
    ("gold.member@example.com", "Gale Gold", "gold", ProfileStatus.approved),
    ("silver.member@example.com", "Sam Silver", "silver", ProfileStatus.approved),
    ("applicant@example.com", "Alex Applicant", "silver", ProfileStatus.pending),
    ("former@example.com", "Fran Former", "gold", ProfileStatus.suspended),
    ("declined@example.com", "Dee Declined", "silver", ProfileStatus.rejected),
]


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

def _save_state(state: dict) -> None:
    STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
    STATE_FILE.write_text(json.dumps(state, indent=2))
    print(f"  State saved to {STATE_FILE}")


def _load_state() -> dict | None:
    if not STATE_FILE.exists():
        return None
    return json.loads(STATE_FILE.read_text())


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------

async def _create_tiers(session: AsyncSession) -> dict[str, Tier]:
    await tiers_service.ensure_default_tiers(session, settings.DEFAULT_TIERS)
    tiers: dict[str, Tier] = {}
    for name, display_name, description in TIERS:
        tier = await tiers_service.get_tier_by_name(session, name)
        if tier is None:
            tier = await tiers_service.create_tier(
                session, name=name, display_name=display_name, description=description
            )
        tiers[name] = tier
    await session.commit()
    print(f"  Tiers: {', '.join(tiers)}")
    return tiers


async def _create_profiles(session: AsyncSession) -> list[int]:
    ids: list[int] = []
    for email, display_name, tier_name, status in PROFILES:
        profile = await applications_service.apply_membership(
            session, email=email, display_name=display_name, tier_name=tier_name
        )
        if status in (ProfileStatus.approved, ProfileStatus.suspended):
            await applications_service.approve(session, profile.id)
        if status == ProfileStatus.suspended:
            await applications_service.suspend(session, profile.id)
        if status == ProfileStatus.rejected:
            await applications_service.reject(session, profile.id)
        ids.append(profile.id)
    await session.commit()
    print(f"  Created {len(ids)} profiles")
    return ids


async def seed() -> None:
    if _load_state() is not None:
        print("Seed state file exists; run with --clean first.")
        return

    print("Seeding dev data...")
    state: dict = {"tiers": [], "categories": [], "profiles": [], "announcements": []}

    async with AsyncSessionLocal() as session:
        existing = {tier.name for tier in await tiers_service.list_tiers(session)}
        tiers = await _create_tiers(session)
        state["tiers"] = [tier.id for name, tier in tiers.items() if name not in existing]

        categories = {}
        for name, (display_name, items) in CATEGORIES.items():
            category = await categories_service.create_category(session, name=name, display_name=display_name)
            for title, link in items:
                await items_service.create_item(session, category=category, title=title, link=link)
            categories[name] = category
        await session.commit()
        state["categories"] = [category.id for category in categories.values()]
        print(f"  Created {len(categories)} categories")

        for (tier_name, category_name), fields in GRANTS.items():
            for field in fields:
                await permissions_service.set_permission(
                    session,
                    tier_id=tiers[tier_name].id,
                    category_id=categories[category_name].id,
                    field=field,
                    value=True,
                )
        await session.commit()
        print(f"  Granted {len(GRANTS)} tier/category permissions")

        state["profiles"] = await _create_profiles(session)

        announcement = await announcements_service.create_announcement(
            session,
            title="Welcome to Tierboard",
            content="Apply for a tier to see the shared resources.",
        )
        await session.commit()
        state["announcements"] = [announcement.id]

    _save_state(state)
    print("Done!")


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------

async def clean() -> None:
    state = _load_state()
    if state is None:
        print("No seed state file found. Nothing to clean.")
        return

    print("Cleaning up seeded dev data...")

    async with AsyncSessionLocal() as session:
        for announcement_id in state.get("announcements", []):
            try:
                announcement = await announcements_service.get_announcement(session, announcement_id)
            except NotFoundError:
                continue
            await announcements_service.delete_announcement(session, announcement)
        await session.commit()
        print("  Removed announcements")

        for profile_id in state.get("profiles", []):
            profile = await session.get(Profile, profile_id)
            if profile:
                await session.delete(profile)
        await session.commit()
        print("  Removed profiles")

        # Category deletes commit on their own and repack the remaining order.
        for category_id in state.get("categories", []):
            try:
                category = await categories_service.get_category(session, category_id)
            except NotFoundError:
                continue
            await categories_service.delete_category(session, category)
        print("  Removed categories")

        for tier_id in state.get("tiers", []):
            try:
                tier = await tiers_service.get_tier(session, tier_id)
            except NotFoundError:
                continue
            await tiers_service.delete_tier(session, tier)
        await session.commit()
        print("  Removed tiers")

    STATE_FILE.unlink(missing_ok=True)
    print("Done! All seeded data removed.")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    if "--clean" in sys.argv:
        asyncio.run(clean())
    else:
        asyncio.run(seed())
