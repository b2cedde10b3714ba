"""
Shared test utilities and factories.

Re-exports all factory functions for convenient imports:
    from app.testing import create_tier, create_category, get_identity_headers
"""

from app.testing.factories import (
    create_announcement,
    create_category,
    create_item,
    create_profile,
    create_tier,
    get_admin_headers,
    get_identity_headers,
    get_identity_token,
    set_grant,
)

__all__ = [
    "create_announcement",
    "create_category",
    "create_item",
    "create_profile",
    "create_tier",
    "get_admin_headers",
    "get_identity_headers",
    "get_identity_token",
    "set_grant",
]
