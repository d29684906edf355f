from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_DB = Path(__file__).resolve().parent.parent / "data" / "civicstats.db"


@dataclass(frozen=True)
class CacheConfig:
    database_url: str = os.getenv("CIVICSTATS_DATABASE_URL", f"sqlite:///{_DEFAULT_DB}")
    view_ttl_seconds: float = float(os.getenv("CIVICSTATS_VIEW_TTL_SECONDS", "86400"))
    client_ttl_seconds: float = float(os.getenv("CIVICSTATS_CLIENT_TTL_SECONDS", "86400"))


DEFAULT_CACHE_CONFIG = CacheConfig()
