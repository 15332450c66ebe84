"""Shared guard for the admin endpoints."""

import hmac

from fastapi import HTTPException, status


def require_admin(token: str | None, admin_token: str | None) -> None:
    """Check the ``X-Admin-Token`` header value against ``ADMIN_TOKEN``.

    Raises:
        HTTPException: 404 when no admin token is configured (the admin
            surface does not exist), 403 when the token does not match
    """
    if not admin_token:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API endpoint not found")
    if token is None or not hmac.compare_digest(token.encode(), admin_token.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
