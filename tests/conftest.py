import json
from datetime import date

import pytest

from api.data.score_store import ScoreStore
from api.services.leaderboard_service import LeaderboardEngine
from api.settings import StoreConfig

FAKE_URL = "https://fake-db.upstash.io"
FAKE_TOKEN = "fake-token-123"
TODAY = date(2026, 10, 19)


class FakeResponse:
    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)


def _format_score(score):
    return str(int(score)) if float(score).is_integer() else repr(score)


def _index_range(n, start, stop):
    """Redis rank range semantics, negative indexes included."""
    start, stop = int(start), int(stop)
    if start < 0:
        start = max(n + start, 0)
    if stop < 0:
        stop = n + stop
    stop = min(stop, n - 1)
    if start > stop or start >= n:
        return range(0)
    return range(start, stop + 1)


class FakeUpstash:
    """
    In-memory stand-in for the Upstash REST endpoint.

    Used as the requests session of a ScoreStore: accepts a command array,
    answers `{"result": ...}` like the real service, with sorted-set ties
    ordered by member as Redis does.
    """

    def __init__(self):
        self.kv = {}
        self.zsets = {}
        self.calls = []
        self.fail_on = None

    def post(self, url, json=None, headers=None, timeout=None):
        command = list(json)
        self.calls.append(command)
        name, args = command[0].upper(), command[1:]
        if self.fail_on == name:
            return FakeResponse(500, text="upstream unavailable")
        handler = getattr(self, f"_cmd_{name.lower()}", None)
        if handler is None:
            return FakeResponse(400, {"error": f"ERR unknown command '{name}'"})
        return FakeResponse(200, {"result": handler(*args)})

    def commands(self):
        return [call[0] for call in self.calls]

    # key-value

    def _cmd_ping(self):
        return "PONG"

    def _cmd_get(self, key):
        return self.kv.get(key)

    def _cmd_set(self, key, value):
        self.kv[key] = value
        return "OK"

    def _cmd_del(self, key):
        removed = int(self.kv.pop(key, None) is not None)
        removed += int(self.zsets.pop(key, None) is not None)
        return removed

    def _cmd_exists(self, key):
        return int(key in self.kv or bool(self.zsets.get(key)))

    # sorted sets

    def _ascending(self, key):
        zset = self.zsets.get(key, {})
        return sorted(zset.items(), key=lambda item: (item[1], item[0]))

    def _flatten(self, items, withscores):
        if not withscores:
            return [member for member, _ in items]
        flat = []
        for member, score in items:
            flat.extend([member, _format_score(score)])
        return flat

    def _cmd_zadd(self, key, score, member):
        zset = self.zsets.setdefault(key, {})
        added = int(member not in zset)
        zset[member] = float(score)
        return added

    def _cmd_zrem(self, key, member):
        zset = self.zsets.get(key, {})
        if member in zset:
            del zset[member]
            return 1
        return 0

    def _cmd_zcard(self, key):
        return len(self.zsets.get(key, {}))

    def _cmd_zrange(self, key, start, stop, *flags):
        items = self._ascending(key)
        selected = [items[i] for i in _index_range(len(items), start, stop)]
        return self._flatten(selected, "WITHSCORES" in flags)

    def _cmd_zrevrange(self, key, start, stop, *flags):
        items = list(reversed(self._ascending(key)))
        selected = [items[i] for i in _index_range(len(items), start, stop)]
        return self._flatten(selected, "WITHSCORES" in flags)

    def _cmd_zrevrank(self, key, member):
        members = [m for m, _ in reversed(self._ascending(key))]
        return members.index(member) if member in members else None

    def _cmd_zremrangebyrank(self, key, start, stop):
        items = self._ascending(key)
        doomed = [items[i][0] for i in _index_range(len(items), start, stop)]
        for member in doomed:
            del self.zsets[key][member]
        return len(doomed)

    def _cmd_zscore(self, key, member):
        score = self.zsets.get(key, {}).get(member)
        return None if score is None else _format_score(score)


@pytest.fixture
def fake_upstash():
    return FakeUpstash()


@pytest.fixture
def store_config():
    return StoreConfig(url=FAKE_URL, token=FAKE_TOKEN, timeout_seconds=5)


@pytest.fixture
def store(fake_upstash, store_config):
    return ScoreStore(store_config, session=fake_upstash)


@pytest.fixture
def engine(store):
    return LeaderboardEngine(store, today=lambda: TODAY)
