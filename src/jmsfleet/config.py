"""Client configuration for jmsfleet."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from jmsfleet._constants import DEFAULT_NOTIFICATION_TTL, DEFAULT_PAGE_SIZE
from jmsfleet.exceptions import JmsConfigError
from jmsfleet.models.user import Role


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class JmsConfig:
    """Client configuration.

    Parameters
    ----------
    supabase_url : str
        Base URL of the hosted data service (e.g.
        ``"https://xyzcompany.supabase.co"``). The REST prefix
        ``/rest/v1`` is appended by the transport.
    api_key : str
        Service API key. Sent both as ``apikey`` and as bearer token.
    schema : str
        Database schema exposed through the REST API.
    request_timeout : float or None
        Total timeout per request in seconds. ``None`` keeps the aiohttp
        default.
    notification_ttl : float
        Seconds a success/failure notification stays visible before it
        is cleared automatically.
    page_size : int
        Rows per table page in derived views.
    default_signup_role : str
        Role tag assigned to self-registered accounts. Must name a
        :class:`~jmsfleet.models.Role`.
    api_trace_enabled : bool
        Log redacted request/response payloads at DEBUG level.
    """

    supabase_url: str
    api_key: str
    schema: str = "public"
    request_timeout: float | None = None
    notification_ttl: float = DEFAULT_NOTIFICATION_TTL
    page_size: int = DEFAULT_PAGE_SIZE
    default_signup_role: str = "Visitante"
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.supabase_url.strip():
            raise JmsConfigError("supabase_url must be non-empty")
        if not self.api_key.strip():
            raise JmsConfigError("api_key must be non-empty")
        if self.page_size < 1:
            raise JmsConfigError(f"page_size must be >= 1, got {self.page_size}")
        if self.notification_ttl < 0:
            raise JmsConfigError(f"notification_ttl must be >= 0, got {self.notification_ttl}")
        try:
            Role(self.default_signup_role)
        except ValueError as exc:
            raise JmsConfigError(f"default_signup_role must be a known role, got {self.default_signup_role!r}") from exc
        object.__setattr__(self, "supabase_url", self.supabase_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> JmsConfig:
        """Create configuration from environment variables.

        Reads ``JMS_SUPABASE_URL``, ``JMS_SUPABASE_KEY`` and optional
        ``JMS_*`` variables. Explicit keyword arguments override
        environment values.

        Returns
        -------
        JmsConfig
            Populated configuration.

        Raises
        ------
        JmsConfigError
            When a required value is missing or a numeric variable does
            not parse.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "JMS_SUPABASE_URL": "supabase_url",
            "JMS_SUPABASE_KEY": "api_key",
            "JMS_SCHEMA": "schema",
            "JMS_DEFAULT_SIGNUP_ROLE": "default_signup_role",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            timeout_env = env.get("JMS_REQUEST_TIMEOUT")
            if timeout_env is not None and "request_timeout" not in overrides:
                config_kwargs["request_timeout"] = float(timeout_env)

            ttl_env = env.get("JMS_NOTIFICATION_TTL")
            if ttl_env is not None and "notification_ttl" not in overrides:
                config_kwargs["notification_ttl"] = float(ttl_env)

            page_env = env.get("JMS_PAGE_SIZE")
            if page_env is not None and "page_size" not in overrides:
                config_kwargs["page_size"] = int(page_env)
        except ValueError as exc:
            raise JmsConfigError(f"Invalid numeric JMS_* variable: {exc}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("JMS_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        missing = [name for name in ("supabase_url", "api_key") if not config_kwargs.get(name)]
        if missing:
            raise JmsConfigError(f"Missing required configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
