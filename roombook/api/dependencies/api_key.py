# roombook/api/dependencies/api_key.py
from enum import Enum
from typing import Optional

from fastapi import Header, HTTPException, status

from roombook.core.config import get_settings

OPEN_ENVIRONMENTS = ("local", "test")


class AccessScope(str, Enum):
    """
    What a caller may do with meetings.

    READ covers calendar views (listing, details, availability checks and the
    delivery log); WRITE covers booking, editing and cancelling.
    """

    READ = "read"
    WRITE = "write"


def resolve_scope(presented: Optional[str], settings) -> Optional[AccessScope]:
    """
    Map a presented key to the scope it grants, or None for unknown keys.

    `API_KEY` grants WRITE (which implies READ); `READONLY_API_KEY` grants
    READ only, for kiosks and calendar displays that must not book rooms.
    """
    if not presented:
        return None
    if settings.API_KEY and presented == settings.API_KEY:
        return AccessScope.WRITE
    if settings.READONLY_API_KEY and presented == settings.READONLY_API_KEY:
        return AccessScope.READ
    return None


def require_scope(required: AccessScope):
    """
    Build a dependency that admits callers holding at least `required`.

    Deployments without any configured key stay open in local/test and are
    refused elsewhere, so a booking calendar is never exposed by accident.
    """

    async def guard(
        api_key: Optional[str] = Header(
            default=None,
            alias="X-Api-Key",
            description="Booking key (read/write) or read-only display key.",
        ),
    ) -> AccessScope:
        settings = get_settings()
        env = (settings.APP_ENV or "local").lower()

        if not settings.API_KEY and not settings.READONLY_API_KEY:
            if env in OPEN_ENVIRONMENTS:
                return AccessScope.WRITE
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="No API key configured for the meeting endpoints.",
            )

        granted = resolve_scope(api_key, settings)
        if granted is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing API key.",
            )
        if required == AccessScope.WRITE and granted != AccessScope.WRITE:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This API key may view meetings but not book, edit or cancel them.",
            )
        return granted

    return guard


require_read_access = require_scope(AccessScope.READ)
require_write_access = require_scope(AccessScope.WRITE)
