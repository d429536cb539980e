"""
Ranking Exceptions
Error taxonomy shared by the store, the engine and the routes.

Each exception carries an internal message (logged), a user-facing
message (returned to the client) and a stable reason code.
"""

from typing import Any, Dict, Optional


class RankingError(Exception):
    """Base exception for ranking errors."""

    reason = "internal_error"

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class InvalidInput(RankingError):
    """Raised when a required field is missing or not numeric."""

    reason = "invalid_input"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, message)
        self.details = details or {}


class NotAuthorized(RankingError):
    """Raised when a privileged operation lacks a valid credential."""

    reason = "not_authorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "Unauthorized")


class StoreError(RankingError):
    """Base for backing store failures. Never leaks endpoint or token."""

    reason = "service_unavailable"

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message, "Ranking service unavailable")
        self.status = status
        self.body = body


class StoreUnavailable(StoreError):
    """Connection, credential or HTTP-level failure talking to the store."""


class StoreProtocolError(StoreError):
    """The store answered with an unexpected shape or unparsable payload."""


class AdminNotConfigured(RankingError):
    """Raised when a privileged operation is attempted without ADMIN_PASSWORD set."""

    reason = "admin_not_configured"

    def __init__(self):
        super().__init__("ADMIN_PASSWORD is not set", "Admin access not configured")
