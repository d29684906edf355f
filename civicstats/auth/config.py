from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "civicstats-secret-change-in-production")
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")
    viewer_username: str = os.getenv("VIEWER_USERNAME", "user")
    viewer_password: str = os.getenv("VIEWER_PASSWORD", "user123")


DEFAULT_AUTH_CONFIG = AuthConfig()
