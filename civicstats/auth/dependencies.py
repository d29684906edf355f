from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from .users import ADMIN

logger = logging.getLogger(__name__)


def session_user(request: Request) -> dict | None:
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Any signed-in account; 401 otherwise."""
    user = session_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Cache administration is limited to the admin role: 401 when signed out, 403 for viewers."""
    user = require_user(request)
    if user.get("role") != ADMIN:
        logger.warning("Denied %s %s to %s", request.method, request.url.path, user.get("username"))
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
