"""
utils/validators.py
Input validation and sanitization functions
"""

import re
from typing import Tuple

from utils.constants import PORT_MIN, PORT_MAX


def validate_port(port: int) -> Tuple[bool, str]:
    """
    Validate that port number is in valid range [1-65535].

    Returns:
        (is_valid, error_message) tuple
    """
    if not isinstance(port, int) or isinstance(port, bool):
        return (False, "Port must be an integer")

    if port < PORT_MIN or port > PORT_MAX:
        return (False, f"Port {port} out of valid range [{PORT_MIN}-{PORT_MAX}]")

    return (True, "")


def validate_positive(value, name: str, integer: bool = False) -> Tuple[bool, str]:
    """Check a numeric setting is > 0 (and integral when ``integer``)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return (False, f"{name} must be a number, got {type(value).__name__}")
    if integer and not isinstance(value, int):
        return (False, f"{name} must be an integer, got {value!r}")
    if value <= 0:
        return (False, f"{name} must be > 0, got {value!r}")
    return (True, "")


def sanitize_banner(banner: str, max_length: int = 500) -> str:
    """
    Sanitize a service banner for single-line display:
    - Removing control characters
    - Truncating to max_length
    - Collapsing whitespace (newlines included)

    Args:
        banner: Decoded banner text
        max_length: Maximum allowed length (default: 500)

    Returns:
        Sanitized banner string
    """
    if not banner or not isinstance(banner, str):
        return ""

    sanitized = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]', '', banner)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    sanitized = ' '.join(sanitized.split())

    return sanitized


__all__ = ["validate_port", "validate_positive", "sanitize_banner"]
