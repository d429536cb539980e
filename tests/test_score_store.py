import pytest
import requests

from api.data.score_store import ScoreStore, normalize_reply
from api.errors import StoreProtocolError, StoreUnavailable
from api.settings import StoreConfig

from conftest import FAKE_TOKEN, FAKE_URL, FakeResponse


class RecordingSession:
    """Returns canned responses and records what was posted."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_store(store_config, *responses):
    session = RecordingSession(*responses)
    return ScoreStore(store_config, session=session), session


# ============== NORMALIZATION ==============

def test_normalize_wrapped_result():
    reply = normalize_reply({"result": ["a", "1"]})
    assert reply.ok and reply.value == ["a", "1"] and not reply.degraded


def test_normalize_bare_value():
    assert normalize_reply(3).value == 3
    assert normalize_reply(None).value is None


def test_normalize_null_result_is_a_value():
    reply = normalize_reply({"result": None})
    assert reply.ok and reply.value is None


def test_normalize_error_reply():
    reply = normalize_reply({"error": "WRONGTYPE Operation against a key"})
    assert not reply.ok
    assert "WRONGTYPE" in reply.error


def test_normalize_object_with_list_property_is_degraded():
    reply = normalize_reply({"data": ["a", "1"], "meta": {}})
    assert reply.degraded
    assert reply.value == ["a", "1"]


def test_normalize_unknown_object_is_degraded():
    reply = normalize_reply({"status": "weird"})
    assert reply.degraded
    assert reply.value == {"status": "weird"}


# ============== TRANSPORT ==============

def test_command_posts_string_array_with_bearer_token(store_config):
    store, session = make_store(store_config, FakeResponse(200, {"result": 1}))

    assert store.zadd("ranking:flick", 80, '{"name":"Alice"}') == 1

    url, kwargs = session.requests[0]
    assert url == FAKE_URL
    assert kwargs["json"] == ["ZADD", "ranking:flick", "80", '{"name":"Alice"}']
    assert kwargs["headers"]["Authorization"] == f"Bearer {FAKE_TOKEN}"
    assert kwargs["timeout"] == store_config.timeout_seconds


def test_http_error_raises_store_unavailable_with_status_and_body(store_config):
    store, _ = make_store(store_config, FakeResponse(401, text='{"error":"Unauthorized"}'))

    with pytest.raises(StoreUnavailable) as exc_info:
        store.get("player:flick:Alice")

    assert exc_info.value.status == 401
    assert exc_info.value.body == '{"error":"Unauthorized"}'
    assert FAKE_TOKEN not in str(exc_info.value)
    assert exc_info.value.user_message == "Ranking service unavailable"


def test_connection_error_raises_store_unavailable(store_config):
    store, _ = make_store(store_config, requests.ConnectionError("connection refused"))

    with pytest.raises(StoreUnavailable) as exc_info:
        store.ping()

    assert exc_info.value.status is None


def test_unconfigured_store_never_sends_requests():
    store, session = make_store(StoreConfig(url="", token=""))

    with pytest.raises(StoreUnavailable):
        store.ping()
    assert session.requests == []


def test_invalid_json_raises_protocol_error(store_config):
    store, _ = make_store(store_config, FakeResponse(200, text="<html>oops</html>"))

    with pytest.raises(StoreProtocolError) as exc_info:
        store.zcard("ranking:flick")

    assert exc_info.value.body == "<html>oops</html>"


def test_error_reply_raises_protocol_error(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"error": "ERR syntax error"}))

    with pytest.raises(StoreProtocolError):
        store.zrem("ranking:flick", "x")


# ============== TYPED PRIMITIVES ==============

def test_zrevrange_decodes_json_encoded_list(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"result": '["Alice", "80"]'}))

    assert store.zrevrange("ranking:flick", 0, 49, withscores=True) == ["Alice", "80"]


def test_zrevrange_missing_key_is_empty(store_config):
    store, session = make_store(store_config, FakeResponse(200, {"result": None}))

    assert store.zrevrange("ranking:grid", 0, 49) == []
    assert session.requests[0][1]["json"] == ["ZREVRANGE", "ranking:grid", "0", "49"]


def test_zrevrange_accepts_degraded_envelope(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"rows": ["Alice", "80"]}))

    assert store.zrevrange("ranking:flick", 0, 49, withscores=True) == ["Alice", "80"]


def test_zrevrange_rejects_non_list(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"result": 12}))

    with pytest.raises(StoreProtocolError):
        store.zrevrange("ranking:flick", 0, 49)


def test_zrevrank_missing_member_is_none(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"result": None}))

    assert store.zrevrank("ranking:flick", "ghost") is None


def test_exists_returns_bool(store_config):
    store, _ = make_store(
        store_config, FakeResponse(200, {"result": 1}), FakeResponse(200, {"result": 0})
    )

    assert store.exists("ranking:flick") is True
    assert store.exists("ranking:grid") is False


def test_zcard_rejects_non_integer(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"result": "many"}))

    with pytest.raises(StoreProtocolError):
        store.zcard("ranking:flick")


def test_zscore_parses_string_score(store_config):
    store, _ = make_store(store_config, FakeResponse(200, {"result": "80"}))

    assert store.zscore("ranking:flick", "Alice") == 80.0


def test_remove_range_sends_rank_bounds(store_config):
    store, session = make_store(store_config, FakeResponse(200, {"result": 1}))

    assert store.zremrangebyrank("ranking:flick", 0, -51) == 1
    assert session.requests[0][1]["json"] == ["ZREMRANGEBYRANK", "ranking:flick", "0", "-51"]


def test_config_repr_hides_token(store_config):
    assert FAKE_TOKEN not in repr(store_config)
    assert FAKE_URL not in repr(store_config)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("UPSTASH_REDIS_REST_URL", FAKE_URL)
    monkeypatch.setenv("UPSTASH_REDIS_REST_TOKEN", FAKE_TOKEN)
    monkeypatch.setenv("RANKING_STORE_TIMEOUT", "2.5")

    config = StoreConfig.from_env()

    assert config.is_configured
    assert config.timeout_seconds == 2.5


def test_config_from_env_ignores_bad_timeout(monkeypatch):
    monkeypatch.setenv("RANKING_STORE_TIMEOUT", "soon")

    assert StoreConfig.from_env().timeout_seconds == 10.0
