from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = os.getenv("SODA_BASE_URL", "https://data.cityofnewyork.us/resource")
    state_base_url: str = os.getenv("SODA_STATE_BASE_URL", "https://data.ny.gov/resource")
    app_token: str = os.getenv("SODA_APP_TOKEN", "")
    timeout: float = float(os.getenv("SODA_TIMEOUT_SECONDS", "60"))
    default_limit: int = 50000

    def host_url(self, host: str) -> str:
        return self.state_base_url if host == "state" else self.base_url


DEFAULT_GATEWAY_CONFIG = GatewayConfig()
