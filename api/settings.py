"""
Settings Module
Static ranking settings and the store connection config.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


def load_config() -> dict:
    config_path = Path(__file__).parent / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


CONFIG = load_config()

# Ranking settings
RANKING_MODES: Tuple[str, ...] = tuple(
    CONFIG.get("ranking", {}).get("modes", ["flick", "tracking", "grid"])
)
MAX_ENTRIES = CONFIG.get("ranking", {}).get("max_entries", 50)
DEFAULT_MODE = CONFIG.get("ranking", {}).get("default_mode", "flick")

DEFAULT_STORE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class StoreConfig:
    """Connection settings for the Upstash REST endpoint."""
    url: str
    token: str
    timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "StoreConfig":
        timeout = os.getenv("RANKING_STORE_TIMEOUT")
        try:
            timeout_seconds = float(timeout) if timeout else DEFAULT_STORE_TIMEOUT_SECONDS
        except ValueError:
            print(f"[CONFIG] Ignoring invalid RANKING_STORE_TIMEOUT: {timeout!r}")
            timeout_seconds = DEFAULT_STORE_TIMEOUT_SECONDS
        return cls(
            url=os.getenv("UPSTASH_REDIS_REST_URL", ""),
            token=os.getenv("UPSTASH_REDIS_REST_TOKEN", ""),
            timeout_seconds=timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.token)

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks
        return (
            f"StoreConfig(url={'set' if self.url else 'unset'}, "
            f"token={'set' if self.token else 'unset'}, "
            f"timeout_seconds={self.timeout_seconds})"
        )


def get_admin_password() -> Optional[str]:
    """Admin password from environment. No fallback."""
    return os.getenv("ADMIN_PASSWORD") or None
