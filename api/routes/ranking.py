"""
Ranking Routes
Maps /api/ranking verbs onto the leaderboard engine
"""

from typing import Any, Optional, Tuple

from ..data.redis_client import get_redis_token, get_redis_url
from ..errors import InvalidInput, RankingError
from ..security.auth import login_admin, require_admin
from ..security.env_validator import get_env_status
from ..security.rate_limit import (
    check_rate_limit,
    get_client_ip,
    get_ratelimit_read,
    get_ratelimit_submit,
)
from ..services import get_leaderboard_engine
from ..settings import DEFAULT_MODE

RANKING_PATH = "/api/ranking"
SESSION_PATH = "/api/ranking/session"

ERROR_STATUS = {
    "invalid_input": 400,
    "not_authorized": 401,
    "admin_not_configured": 500,
    "service_unavailable": 503,
}


def _error(status: int, reason: str, message: str, **extra: Any) -> Tuple[int, dict]:
    body = {"error": message, "reason": reason}
    body.update(extra)
    return status, body


def _is_test_request(handler) -> bool:
    return handler.get_query_param("test") == "true"


# ============== HANDLERS ==============

def get_rankings(handler) -> Tuple[int, dict]:
    mode = handler.get_query_param("mode") or DEFAULT_MODE
    rankings = [entry.to_dict() for entry in get_leaderboard_engine().fetch(mode)]
    return 200, {"rankings": rankings}


@require_admin
def get_diagnostics(handler) -> Tuple[int, dict]:
    mode = handler.get_query_param("mode") or DEFAULT_MODE
    tests = get_leaderboard_engine().diagnose(mode)
    return 200, {
        "test": True,
        "env": {
            "url": "Set" if get_redis_url() else "Not set",
            "token": "Set" if get_redis_token() else "Not set",
        },
        "envStatus": get_env_status(),
        "tests": tests,
    }


def submit_score(handler, body: dict) -> Tuple[int, dict]:
    result = get_leaderboard_engine().submit(
        body.get("mode"),
        body.get("name"),
        body.get("score"),
        body.get("accuracy"),
        body.get("efficiency"),
    )
    if not result.accepted:
        return 200, {
            "success": True,
            "updated": False,
            "message": "Score not updated (existing score is higher)",
        }
    return 200, {"success": True, "updated": True, "rank": result.rank}


@require_admin
def delete_score(handler, body: dict) -> Tuple[int, dict]:
    engine = get_leaderboard_engine()
    if body.get("resetAll") is True:
        deleted_keys = engine.reset_all()
        return 200, {
            "success": True,
            "message": "All rankings reset",
            "deletedKeys": deleted_keys,
        }
    engine.delete(body.get("mode"), body.get("name"), body.get("efficiency"))
    return 200, {"success": True, "message": "Score deleted"}


@require_admin
def edit_score(handler, body: dict) -> Tuple[int, dict]:
    get_leaderboard_engine().edit(
        body.get("mode"),
        body.get("oldName"),
        body.get("oldEfficiency"),
        body.get("newName"),
        body.get("newScore"),
        body.get("newAccuracy"),
        body.get("newEfficiency"),
    )
    return 200, {"success": True, "message": "Score updated"}


def create_session(handler, body: dict) -> Tuple[int, dict]:
    token = login_admin(body.get("password"))
    return 200, {"token": token}


# ============== ROUTER ==============

def handle_ranking_routes(handler, method: str, path: str, body: dict) -> Optional[Tuple[int, Any]]:
    """
    Route handler for ranking endpoints.

    Returns:
        Tuple of (status_code, response_body), or None if the path is not ours
    """
    if path not in (RANKING_PATH, SESSION_PATH):
        return None

    if not isinstance(body, dict):
        return _error(400, "invalid_input", "Request body must be a JSON object")

    client_ip = get_client_ip(handler.headers)

    try:
        if path == SESSION_PATH:
            if method != "POST":
                return _error(405, "method_not_allowed", "Method not allowed")
            if not check_rate_limit(get_ratelimit_submit, f"session:{client_ip}"):
                return _error(429, "rate_limited", "Too many requests. Please wait.")
            return create_session(handler, body)

        if method == "GET":
            if _is_test_request(handler):
                return get_diagnostics(handler)
            if not check_rate_limit(get_ratelimit_read, f"read:{client_ip}"):
                return _error(429, "rate_limited", "Too many requests. Please wait.")
            return get_rankings(handler)

        if method == "POST":
            if not check_rate_limit(get_ratelimit_submit, f"submit:{client_ip}"):
                return _error(429, "rate_limited", "Too many requests. Please wait.")
            return submit_score(handler, body)

        if method == "DELETE":
            return delete_score(handler, body)

        if method == "PUT":
            return edit_score(handler, body)

        return _error(405, "method_not_allowed", "Method not allowed")

    except InvalidInput as e:
        print(f"[API] Invalid input on {method} {path}: {e}")
        return _error(400, e.reason, e.user_message, details=e.details)
    except RankingError as e:
        print(f"[API] {method} {path} failed: {e}")
        return _error(ERROR_STATUS.get(e.reason, 500), e.reason, e.user_message)
