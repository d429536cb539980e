"""
Redis Client Module
Centralized store connection management
"""

import os
from typing import Optional

from ..settings import StoreConfig
from .score_store import ScoreStore

# Lazy-initialized clients
_redis_client = None
_score_store: Optional[ScoreStore] = None


def get_score_store() -> ScoreStore:
    """Get the ScoreStore singleton, configured once from the environment."""
    global _score_store
    if _score_store is None:
        config = StoreConfig.from_env()
        if not config.is_configured:
            print("[DATA] Upstash credentials not configured")
        _score_store = ScoreStore(config)
    return _score_store


def get_redis():
    """Get the upstash_redis client singleton used by the rate limiters."""
    global _redis_client
    if _redis_client is None:
        try:
            from upstash_redis import Redis
            _redis_client = Redis(
                url=os.getenv("UPSTASH_REDIS_REST_URL"),
                token=os.getenv("UPSTASH_REDIS_REST_TOKEN"),
            )
        except Exception as e:
            print(f"[DATA] Failed to initialize Redis: {e}")
            return None
    return _redis_client


def get_redis_url() -> Optional[str]:
    """Get Redis URL from environment."""
    return os.getenv("UPSTASH_REDIS_REST_URL")


def get_redis_token() -> Optional[str]:
    """Get Redis token from environment."""
    return os.getenv("UPSTASH_REDIS_REST_TOKEN")
