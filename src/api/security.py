"""Opaque API-key gate for the user routes."""

import hmac
import logging
import os
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def get_configured_api_key() -> Optional[str]:
    """Return the expected API key, or None when the gate is disabled."""
    return os.getenv("API_KEY") or None


def require_api_key(
    provided: Optional[str] = Depends(api_key_header),
    expected: Optional[str] = Depends(get_configured_api_key),
) -> None:
    """Reject the request with 403 unless it carries the configured key."""
    if expected is None:
        return

    if not provided or not hmac.compare_digest(provided, expected):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden", "message": "Missing or invalid API key"},
        )
