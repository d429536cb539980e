"""
Environment Variable Validation Module

Validates that all required environment variables are set
before the function serves requests, preventing runtime errors
from missing configuration.
"""

import os
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass


@dataclass
class EnvVarConfig:
    """Configuration for an environment variable."""
    name: str
    required: bool = True
    description: str = ""
    sensitive: bool = True  # Don't log the value
    validator: Optional[Callable[[str], bool]] = None


def _is_positive_number(value: str) -> bool:
    return float(value) > 0


# Required environment variables
REQUIRED_ENV_VARS: List[EnvVarConfig] = [
    EnvVarConfig(
        name="UPSTASH_REDIS_REST_URL",
        required=True,
        description="Upstash Redis REST API URL",
        sensitive=False,
        validator=lambda v: v.startswith("https://") or v.startswith("http://"),
    ),
    EnvVarConfig(
        name="UPSTASH_REDIS_REST_TOKEN",
        required=True,
        description="Upstash Redis REST API token",
        sensitive=True,
    ),
    EnvVarConfig(
        name="ADMIN_PASSWORD",
        required=True,
        description="Bearer secret for ranking delete, edit and reset",
        sensitive=True,
    ),
]

# Optional environment variables
OPTIONAL_ENV_VARS: List[EnvVarConfig] = [
    EnvVarConfig(
        name="JWT_SECRET",
        required=False,
        description="Secret for signing admin session tokens (min 32 chars)",
        sensitive=True,
        validator=lambda v: len(v) >= 32,
    ),
    EnvVarConfig(
        name="RANKING_STORE_TIMEOUT",
        required=False,
        description="Timeout in seconds for each store request (default 10)",
        sensitive=False,
        validator=_is_positive_number,
    ),
]


def validate_env_var(config: EnvVarConfig) -> Tuple[bool, Optional[str]]:
    """
    Validate a single environment variable.

    Returns:
        Tuple of (is_valid, error_message)
    """
    value = os.getenv(config.name)

    if value is None or value.strip() == "":
        if config.required:
            return False, f"Missing required environment variable: {config.name}"
        return True, None

    if config.validator:
        try:
            if not config.validator(value):
                return False, f"Invalid value for {config.name}: validation failed"
        except Exception as e:
            return False, f"Invalid value for {config.name}: {e.__class__.__name__}"

    return True, None


def validate_required_env_vars(
    strict: bool = True,
    include_optional: bool = False,
) -> Tuple[bool, List[str]]:
    """
    Validate all required environment variables.

    Args:
        strict: If True, raise RuntimeError on missing vars in production
        include_optional: If True, also validate optional vars

    Returns:
        Tuple of (all_valid, list_of_error_messages)
    """
    errors: List[str] = []
    warnings: List[str] = []

    is_production = os.getenv('VERCEL_ENV') == 'production'

    for config in REQUIRED_ENV_VARS:
        is_valid, error = validate_env_var(config)
        if not is_valid:
            if is_production or strict:
                errors.append(error)
            else:
                warnings.append(f"[DEV WARNING] {error}")

    if include_optional:
        for config in OPTIONAL_ENV_VARS:
            is_valid, error = validate_env_var(config)
            if not is_valid and error:
                warnings.append(f"[OPTIONAL] {error}")

    for warning in warnings:
        print(f"[SECURITY] {warning}")

    if errors:
        for error in errors:
            print(f"[SECURITY ERROR] {error}")

        if strict and is_production:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(e.split(':')[0] for e in errors)}"
            )

    return len(errors) == 0, errors


def get_env_status() -> Dict[str, Dict[str, Any]]:
    """
    Get status of all environment variables (for admin debugging).

    Returns dict with var names and their status (set/unset, not values).
    """
    status = {}

    for config in REQUIRED_ENV_VARS + OPTIONAL_ENV_VARS:
        value = os.getenv(config.name)
        is_set = value is not None and value.strip() != ""

        status[config.name] = {
            "is_set": is_set,
            "required": config.required,
            "description": config.description,
            "valid": validate_env_var(config)[0] if is_set else None,
        }

    return status


# Auto-validate on module import in production
if os.getenv('VERCEL_ENV') == 'production':
    try:
        validate_required_env_vars(strict=True, include_optional=True)
    except RuntimeError as e:
        print(f"[SECURITY FATAL] {e}")
        # Don't exit here - let Vercel handle the error
