"""
Data Layer Module
Re-exports all data access modules
"""

from .redis_client import get_redis, get_score_store
from .score_store import ScoreStore, StoreReply, normalize_reply
from .entries import (
    LegacyEntry,
    ScoreEntry,
    StructuredEntry,
    parse_member,
    serialize_entry,
    serialize_reduced,
)

__all__ = [
    # Store clients
    "get_redis",
    "get_score_store",
    "ScoreStore",
    "StoreReply",
    "normalize_reply",
    # Entries
    "LegacyEntry",
    "ScoreEntry",
    "StructuredEntry",
    "parse_member",
    "serialize_entry",
    "serialize_reduced",
]
