"""API key authentication for catalog maintenance endpoints."""

import logging
import secrets

from fastapi import Header, HTTPException

from beatstore.core.config import get_settings

logger = logging.getLogger(__name__)


async def verify_admin_api_key(x_admin_api_key: str = Header(...)) -> None:
    """
    Verify the admin API key from request header.

    Uses constant-time comparison. Returns the same 401 whether the key is
    unset on the server or simply wrong.
    """
    settings = get_settings()

    if not settings.admin_api_key:
        logger.error("Admin API key not configured - rejecting request")
        raise HTTPException(status_code=401, detail="Authentication failed")

    if not secrets.compare_digest(x_admin_api_key, settings.admin_api_key):
        raise HTTPException(status_code=401, detail="Authentication failed")
