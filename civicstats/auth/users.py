from __future__ import annotations

import logging
from typing import Any

import bcrypt

from .config import DEFAULT_AUTH_CONFIG, AuthConfig

logger = logging.getLogger(__name__)

ADMIN = "admin"
VIEWER = "user"

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def add_user(username: str, password: str, role: str) -> None:
    _users[username] = {"password_hash": _hash_password(password), "role": role}


def seed_users(config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
    """Replace the account table with the configured admin and viewer."""
    _users.clear()
    add_user(config.admin_username, config.admin_password, ADMIN)
    if config.viewer_username and config.viewer_username != config.admin_username:
        add_user(config.viewer_username, config.viewer_password, VIEWER)
    logger.info("Seeded %d accounts", len(_users))


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None


seed_users()
