from __future__ import annotations

import pytest

from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import JmsConfigError

_ENV_KEYS = (
    "JMS_SUPABASE_URL",
    "JMS_SUPABASE_KEY",
    "JMS_SCHEMA",
    "JMS_DEFAULT_SIGNUP_ROLE",
    "JMS_REQUEST_TIMEOUT",
    "JMS_NOTIFICATION_TTL",
    "JMS_PAGE_SIZE",
    "JMS_API_TRACE_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JMS_SUPABASE_URL", "https://fleet.example.co/")
    monkeypatch.setenv("JMS_SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("JMS_REQUEST_TIMEOUT", "7.5")
    monkeypatch.setenv("JMS_PAGE_SIZE", "25")
    monkeypatch.setenv("JMS_API_TRACE_ENABLED", "yes")

    config = JmsConfig.from_env()

    assert config.supabase_url == "https://fleet.example.co"
    assert config.api_key == "anon-key"
    assert config.request_timeout == 7.5
    assert config.page_size == 25
    assert config.api_trace_enabled is True
    assert config.schema == "public"


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JMS_SUPABASE_URL", "https://fleet.example.co")
    monkeypatch.setenv("JMS_SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("JMS_PAGE_SIZE", "not-a-number")

    config = JmsConfig.from_env(page_size=5, api_trace_enabled=False)

    assert config.page_size == 5
    assert config.api_trace_enabled is False


def test_missing_credentials_are_reported() -> None:
    with pytest.raises(JmsConfigError, match="supabase_url, api_key"):
        JmsConfig.from_env()


def test_invalid_numbers_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JMS_SUPABASE_URL", "https://fleet.example.co")
    monkeypatch.setenv("JMS_SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("JMS_NOTIFICATION_TTL", "soon")

    with pytest.raises(JmsConfigError):
        JmsConfig.from_env()


def test_constructor_validates_values() -> None:
    with pytest.raises(JmsConfigError):
        JmsConfig(supabase_url="https://fleet.example.co", api_key="  ")
    with pytest.raises(JmsConfigError):
        JmsConfig(supabase_url="https://fleet.example.co", api_key="k", page_size=0)
    with pytest.raises(JmsConfigError):
        JmsConfig(supabase_url="https://fleet.example.co", api_key="k", notification_ttl=-1)


def test_signup_role_must_be_a_known_role(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(JmsConfigError, match="default_signup_role"):
        JmsConfig(supabase_url="https://fleet.example.co", api_key="k", default_signup_role="Chefe")

    assert JmsConfig(supabase_url="https://fleet.example.co", api_key="k", default_signup_role="gerente")

    monkeypatch.setenv("JMS_SUPABASE_URL", "https://fleet.example.co")
    monkeypatch.setenv("JMS_SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("JMS_DEFAULT_SIGNUP_ROLE", "Chefe")
    with pytest.raises(JmsConfigError, match="default_signup_role"):
        JmsConfig.from_env()
