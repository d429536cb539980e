"""
Rate Limiting Module
Per-IP fixed-window limiters backed by Upstash.
"""

from typing import Mapping

from upstash_ratelimit import Ratelimit, FixedWindow

from ..data.redis_client import get_redis

# Rate limiters (lazy initialized)
_ratelimit_read = None
_ratelimit_submit = None


def get_ratelimit_read():
    """Leaderboard read rate limiter: 60 requests/minute per IP."""
    global _ratelimit_read
    if _ratelimit_read is None:
        _ratelimit_read = Ratelimit(
            redis=get_redis(),
            limiter=FixedWindow(max_requests=60, window=60),
            prefix="ratelimit:ranking:read",
        )
    return _ratelimit_read


def get_ratelimit_submit():
    """Score submission rate limiter: 10 submissions/minute per IP."""
    global _ratelimit_submit
    if _ratelimit_submit is None:
        _ratelimit_submit = Ratelimit(
            redis=get_redis(),
            limiter=FixedWindow(max_requests=10, window=60),
            prefix="ratelimit:ranking:submit",
        )
    return _ratelimit_submit


def check_rate_limit(get_limiter, identifier: str) -> bool:
    """Returns True if request is allowed, False if rate limited."""
    try:
        result = get_limiter().limit(identifier)
        return result.allowed
    except Exception as e:
        # If rate limiting fails, allow the request (fail open)
        print(f"[SECURITY] Rate limiter unavailable: {e.__class__.__name__}")
        return True


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Extract client IP from headers."""
    # X-Forwarded-For may contain multiple IPs; take the first one
    forwarded = headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    # Fallback to X-Real-IP
    real_ip = headers.get('X-Real-IP', '')
    if real_ip:
        return real_ip.strip()
    return 'unknown'
