"""
Centralized Input Validation Module

Provides validation and coercion for ranking request fields
with consistent error handling.
"""

import math
import re
from typing import Any, Callable, Optional, Pattern, Tuple
from dataclasses import dataclass


@dataclass
class ValidationResult:
    """Result of a validation operation."""
    is_valid: bool
    value: Optional[str]
    error: Optional[str] = None


class Validators:
    """
    Centralized validation patterns and methods.

    All patterns are compiled once for performance.
    """

    # Mode: short identifier, used verbatim inside the ranking key
    MODE = re.compile(r'^[A-Za-z0-9_-]{1,32}$')

    # Player name: any printable text. Names are stored verbatim because the
    # serialized entry is the member identity; escaping happens client side.
    PLAYER_NAME = re.compile(r'^[^\x00-\x1F\x7F]{1,50}$')

    @classmethod
    def validate(
        cls,
        value: Any,
        pattern: Pattern,
        transform: Optional[Callable[[str], str]] = None,
        max_length: Optional[int] = None,
        min_length: int = 1,
    ) -> ValidationResult:
        """
        Validate and optionally transform a value.

        Returns:
            ValidationResult with is_valid, sanitized value, and error message
        """
        if value is None:
            return ValidationResult(False, None, "Value is required")

        if not isinstance(value, str):
            return ValidationResult(False, None, "Value must be a string")

        # Strip whitespace
        value = value.strip()

        # Length checks
        if len(value) < min_length:
            return ValidationResult(False, None, f"Value must be at least {min_length} characters")

        if max_length and len(value) > max_length:
            return ValidationResult(False, None, f"Value must be at most {max_length} characters")

        if transform:
            value = transform(value)

        # Pattern validation
        if not pattern.match(value):
            return ValidationResult(False, None, "Value contains invalid characters")

        return ValidationResult(True, value, None)


def sanitize_mode(mode: Any) -> Optional[str]:
    """Validate a game mode. Returns None if invalid."""
    result = Validators.validate(mode, Validators.MODE, max_length=32)
    return result.value if result.is_valid else None


def sanitize_player_name(name: Any) -> Optional[str]:
    """
    Validate a player name. Returns the name unchanged or None if invalid.

    Surrounding whitespace is rejected rather than stripped: the name is part
    of the player's best-score key.
    """
    if isinstance(name, str) and name != name.strip():
        return None
    result = Validators.validate(name, Validators.PLAYER_NAME, max_length=50)
    return result.value if result.is_valid else None


# ============== NUMERIC COERCION ==============

def _to_finite_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> Optional[int]:
    """
    Coerce a request value to int, truncating toward zero.

    Accepts ints, finite floats and numeric strings. Returns None otherwise.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    number = _to_finite_float(value)
    return None if number is None else int(number)


def parse_float(value: Any) -> Optional[float]:
    """Coerce a request value to a finite float. Returns None otherwise."""
    return _to_finite_float(value)


def parse_accuracy(value: Any) -> Optional[float]:
    """Coerce an accuracy such as 95.5, "95.5" or "95.5%"."""
    if isinstance(value, str):
        value = value.strip()
        if value.endswith('%'):
            value = value[:-1]
    return parse_float(value)


def validate_request_body_size(
    content_length: int,
    max_size: int = 4096,
) -> Tuple[bool, str]:
    """
    Validate request body size.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if content_length <= 0:
        return True, ""  # Empty body is OK

    if content_length > max_size:
        return False, f"Request body too large. Maximum size is {max_size} bytes."

    return True, ""
