"""Helpers for safe debug logging.

Rows from ``app_users`` carry the local login password, and request
headers carry the service key. PostgREST filters (``password=eq.<value>``)
can leak the same secrets through query parameters. Everything logged by
the transport goes through :func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic.alias_generators import to_snake

from jmsfleet._constants import SENSITIVE_LOG_KEYS

REDACTED = "<redacted>"
_MAX_DEPTH = 20


def is_sensitive_key(key: object) -> bool:
    """True for column, header or form names that hold a secret.

    Matches ``confirmPassword`` and ``confirm_password`` alike.
    """
    return to_snake(str(key)).lower() in SENSITIVE_LOG_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of a row, row list or request payload safe for DEBUG logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    nested = _depth + 1
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if is_sensitive_key(key) else redact_for_log(item, max_string=max_string, _depth=nested)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=nested) for item in value]
    return repr(value)
