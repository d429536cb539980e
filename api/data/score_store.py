"""
Score Store
Typed command wrapper over the Upstash REST endpoint.

Every call POSTs one command array and normalizes the JSON reply through
`normalize_reply`. No caching, no retries.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from ..errors import StoreProtocolError, StoreUnavailable
from ..settings import StoreConfig

# Raw payloads are truncated to this length in logs
LOG_PAYLOAD_LIMIT = 500


@dataclass
class StoreReply:
    """A normalized store reply: either a value or an error."""
    value: Any = None
    error: Optional[str] = None
    degraded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_reply(payload: Any) -> StoreReply:
    """
    Normalize the reply envelopes the store may send.

    `{"result": v}` and bare values yield a value, `{"error": e}` an error.
    Any other object is degraded: its first list-valued property, or the
    object itself.
    """
    if isinstance(payload, dict):
        if "error" in payload and payload["error"]:
            return StoreReply(error=str(payload["error"]))
        if "result" in payload:
            return StoreReply(value=payload["result"])
        for value in payload.values():
            if isinstance(value, list):
                return StoreReply(value=value, degraded=True)
        return StoreReply(value=payload, degraded=True)
    return StoreReply(value=payload)


def _truncate(text: Any) -> str:
    text = text if isinstance(text, str) else repr(text)
    return text[:LOG_PAYLOAD_LIMIT]


class ScoreStore:
    """Sorted-set and key-value primitives against one Upstash database."""

    def __init__(self, config: StoreConfig, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session or requests.Session()

    # ============== TRANSPORT ==============

    def command(self, *args: Any) -> Any:
        """Execute one command and return its normalized value."""
        command = [str(arg) for arg in args]
        name = command[0] if command else ""

        if not self.config.is_configured:
            raise StoreUnavailable("Store URL or token is not configured")

        try:
            response = self._session.post(
                self.config.url,
                json=command,
                headers={
                    "Authorization": f"Bearer {self.config.token}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            print(f"[STORE] {name} failed: {e.__class__.__name__}")
            raise StoreUnavailable(f"{name} request failed: {e.__class__.__name__}") from e

        body = response.text
        if not 200 <= response.status_code < 300:
            print(f"[STORE] {name} returned HTTP {response.status_code}: {_truncate(body)}")
            raise StoreUnavailable(
                f"{name} returned HTTP {response.status_code}",
                status=response.status_code,
                body=body,
            )

        try:
            payload = json.loads(body)
        except ValueError as e:
            print(f"[STORE] {name} returned invalid JSON: {_truncate(body)}")
            raise StoreProtocolError(
                f"{name} returned invalid JSON",
                status=response.status_code,
                body=body,
            ) from e

        reply = normalize_reply(payload)
        if not reply.ok:
            print(f"[STORE] {name} error reply: {_truncate(body)}")
            raise StoreProtocolError(
                f"{name} error: {reply.error}",
                status=response.status_code,
                body=body,
            )
        if reply.degraded:
            print(f"[STORE] {name} unexpected reply shape: {_truncate(body)}")
        return reply.value

    def _protocol_error(self, name: str, value: Any, expected: str) -> StoreProtocolError:
        print(f"[STORE] {name} expected {expected}, got: {_truncate(value)}")
        return StoreProtocolError(f"{name} expected {expected}", body=value)

    def _as_int(self, name: str, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise self._protocol_error(name, value, "an integer")

    def _as_list(self, name: str, value: Any) -> List[Any]:
        if value is None:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                raise self._protocol_error(name, value, "a list")
        if not isinstance(value, list):
            raise self._protocol_error(name, value, "a list")
        return value

    # ============== KEY-VALUE ==============

    def ping(self) -> Any:
        return self.command("PING")

    def get(self, key: str) -> Any:
        return self.command("GET", key)

    def set(self, key: str, value: str) -> Any:
        return self.command("SET", key, value)

    def delete(self, key: str) -> int:
        return self._as_int("DEL", self.command("DEL", key))

    def exists(self, key: str) -> bool:
        return self._as_int("EXISTS", self.command("EXISTS", key)) > 0

    # ============== SORTED SETS ==============

    def zadd(self, key: str, score: int, member: str) -> int:
        return self._as_int("ZADD", self.command("ZADD", key, score, member))

    def zrem(self, key: str, member: str) -> int:
        return self._as_int("ZREM", self.command("ZREM", key, member))

    def zcard(self, key: str) -> int:
        return self._as_int("ZCARD", self.command("ZCARD", key))

    def zrange(self, key: str, start: int, stop: int, withscores: bool = False) -> List[Any]:
        args = ["ZRANGE", key, start, stop] + (["WITHSCORES"] if withscores else [])
        return self._as_list("ZRANGE", self.command(*args))

    def zrevrange(self, key: str, start: int, stop: int, withscores: bool = False) -> List[Any]:
        args = ["ZREVRANGE", key, start, stop] + (["WITHSCORES"] if withscores else [])
        return self._as_list("ZREVRANGE", self.command(*args))

    def zrevrank(self, key: str, member: str) -> Optional[int]:
        value = self.command("ZREVRANK", key, member)
        return None if value is None else self._as_int("ZREVRANK", value)

    def zremrangebyrank(self, key: str, start: int, stop: int) -> int:
        return self._as_int(
            "ZREMRANGEBYRANK", self.command("ZREMRANGEBYRANK", key, start, stop)
        )

    def zscore(self, key: str, member: str) -> Optional[float]:
        value = self.command("ZSCORE", key, member)
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise self._protocol_error("ZSCORE", value, "a number")
