"""
Admin API Key Authentication

Validates admin API keys for every security endpoint except the health check.
"""

import secrets

from fastapi import Header, Request, status

from src.api.error import ClientError
from src.domain.errors import SecurityServiceError


async def verify_admin_api_key(request: Request, x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    This is service-to-service auth for the backends that report events and
    manage credentials.

    Args:
        request: Incoming request, carrying the application config
        x_admin_api_key: API key from X-Admin-API-Key header

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise ClientError(
            SecurityServiceError("Admin API key required", code="UNAUTHORIZED"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    valid_admin_key = request.app.state.config.ADMIN_API_KEY

    if not secrets.compare_digest(x_admin_api_key, valid_admin_key):
        raise ClientError(
            SecurityServiceError("Invalid admin API key", code="INVALID_API_KEY"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
