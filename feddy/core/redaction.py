"""
Redaction helpers for SDK diagnostics.

Key-based redaction for configuration/state dicts and value-based redaction
for free-form strings, applied before anything identity-related is logged.
"""
from __future__ import annotations

import re
from typing import Any

# ── Key-based redaction (case-insensitive substring match) ───────────
_SENSITIVE_KEY_SUBSTRINGS = frozenset({
    "password", "secret", "token", "apikey", "api_key",
    "authorization", "bearer", "cookie", "credential",
})

# ── Value-based patterns ────────────────────────────────────────────
_EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+"
)


def _is_sensitive_key(key: str) -> bool:
    lower = key.lower().replace("-", "_")
    return any(s in lower for s in _SENSITIVE_KEY_SUBSTRINGS)


def _redact_sensitive_value(value: str) -> str:
    """Partially redact a sensitive value: first 4 + **** + last 4 chars."""
    if len(value) <= 8:
        return "[REDACTED]"
    return value[:4] + "****" + value[-4:]


def redact_config(config: dict) -> dict:
    """Recursively redact sensitive values in a configuration/state dict.

    Emails anywhere in string values are masked as well.
    """
    return _redact_dict(config)


def _redact_dict(obj: Any, parent_key: str = "") -> Any:
    if isinstance(obj, dict):
        return {k: _redact_dict(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_redact_dict(item, parent_key) for item in obj]
    if isinstance(obj, str):
        if _is_sensitive_key(parent_key):
            return _redact_sensitive_value(obj)
        return _EMAIL_PATTERN.sub("[EMAIL]", obj)
    return obj
