"""Redact secrets, tokens and credentials from data before it is logged."""

import re
from typing import Any
from urllib.parse import urlsplit

REDACTED = "[REDACTED]"
MAX_DEPTH = 10

SENSITIVE_FIELD_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"secret",
        r"password",
        r"credential",
        r"token",
        r"key",
        r"auth",
        r"bearer",
    )
]

PARTIAL_REDACT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"presigned.*url",
        r"end_?point.*url",
    )
]


def is_sensitive_field(name: str) -> bool:
    return any(p.search(name) for p in SENSITIVE_FIELD_PATTERNS)


def _is_partial_redact_field(name: str) -> bool:
    return any(p.search(name) for p in PARTIAL_REDACT_PATTERNS)


def partial_redact_url(url: str) -> str:
    """Keep scheme, host and path; hide the query string."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url[:50] + "...[REDACTED]"
    suffix = "?[REDACTED_QUERY_PARAMS]" if parts.query else ""
    return f"{parts.scheme}://{parts.netloc}{parts.path}{suffix}"


def sanitize_for_logging(obj: Any, depth: int = 0) -> Any:
    """Return a copy of ``obj`` with sensitive values redacted.

    Args:
        obj: Dict, list or scalar to sanitize
        depth: Current recursion depth

    Returns:
        Sanitized copy; the input is not modified
    """
    if depth > MAX_DEPTH:
        return "[MAX_DEPTH_REACHED]"

    if isinstance(obj, (list, tuple)):
        return [sanitize_for_logging(item, depth + 1) for item in obj]

    if isinstance(obj, dict):
        sanitized: dict[str, Any] = {}
        for key, value in obj.items():
            name = str(key)
            if is_sensitive_field(name):
                sanitized[name] = REDACTED
            elif _is_partial_redact_field(name) and isinstance(value, str):
                sanitized[name] = partial_redact_url(value)
            else:
                sanitized[name] = sanitize_for_logging(value, depth + 1)
        return sanitized

    return obj
