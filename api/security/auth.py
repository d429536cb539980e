"""
Authentication and Authorization Module

Provides:
- Admin bearer credential checks (password or admin session token)
- Admin session JWT creation and verification
- Reusable admin decorator for route functions
"""

import hmac
import os
import time
import secrets
from typing import Any, Callable, Dict, Mapping, Optional
from functools import wraps

import jwt

from ..errors import AdminNotConfigured, NotAuthorized
from ..settings import get_admin_password


# ============== CONFIGURATION ==============

JWT_ALGORITHM = 'HS256'
ADMIN_SESSION_HOURS = 12
ADMIN_ROLE = 'admin'


def _get_jwt_secret() -> Optional[str]:
    """
    Get JWT secret from environment.

    Admin sessions are disabled when it is unset; there is no default.
    """
    secret = os.getenv('JWT_SECRET')
    return secret or None


def constant_time_compare(a: str, b: str) -> bool:
    """Constant-time string comparison to prevent timing attacks."""
    return hmac.compare_digest(a.encode(), b.encode())


# ============== ADMIN SESSIONS ==============

def create_admin_token(custom_expiry_hours: Optional[int] = None) -> Optional[str]:
    """
    Create an admin session token.

    Returns None when JWT_SECRET is not configured.
    """
    secret = _get_jwt_secret()
    if not secret:
        print("[SECURITY] Admin session requested but JWT_SECRET is not set")
        return None

    expiry_hours = custom_expiry_hours or ADMIN_SESSION_HOURS
    now = int(time.time())
    payload = {
        'sub': ADMIN_ROLE,
        'role': ADMIN_ROLE,
        'iat': now,
        'exp': now + (expiry_hours * 3600),
        'jti': secrets.token_hex(16),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode an admin session token.

    Returns None if the token is invalid, expired, not an admin token,
    or sessions are not configured.
    """
    secret = _get_jwt_secret()
    if not secret:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if payload.get('role') != ADMIN_ROLE:
        return None
    return payload


def login_admin(password: Any) -> str:
    """Exchange the admin password for a session token."""
    admin_password = get_admin_password()
    if not admin_password:
        raise AdminNotConfigured()
    if not isinstance(password, str) or not constant_time_compare(password, admin_password):
        print("[SECURITY] Rejected admin login")
        raise NotAuthorized("Invalid admin password")

    token = create_admin_token()
    if not token:
        raise AdminNotConfigured()
    return token


# ============== REQUEST CHECKS ==============

def get_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """Extract the bearer credential from request headers."""
    auth_header = headers.get('Authorization', '') or ''
    if not auth_header.startswith('Bearer '):
        return None
    return auth_header[7:].strip() or None


def is_admin_request(headers: Mapping[str, str]) -> bool:
    """
    Check a request's bearer credential.

    Accepts the raw admin password or a valid admin session token.
    """
    admin_password = get_admin_password()
    if not admin_password:
        raise AdminNotConfigured()

    token = get_bearer_token(headers)
    if not token:
        return False
    if constant_time_compare(token, admin_password):
        return True
    return verify_admin_token(token) is not None


# ============== DECORATORS ==============

def require_admin(route: Callable):
    """
    Decorator that requires admin privileges.

    Usage:
        @require_admin
        def handle_delete(handler, body):
            ...

    Raises NotAuthorized before the wrapped route runs.
    """
    @wraps(route)
    def wrapper(handler, *args, **kwargs):
        if not is_admin_request(handler.headers):
            print(f"[SECURITY] Unauthorized admin request to {route.__name__}")
            raise NotAuthorized()
        return route(handler, *args, **kwargs)
    return wrapper
