"""Custom exception hierarchy for jmsfleet."""

from __future__ import annotations

from collections.abc import Mapping


class JmsError(Exception):
    """Base exception for all jmsfleet errors."""


class JmsConfigError(JmsError):
    """Invalid or missing configuration."""


class JmsTransportError(JmsError):
    """HTTP-level failure (network, unexpected status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class JmsApiError(JmsError):
    """The data service rejected the request (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        table: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.table = table
        self.status_code = status_code
        super().__init__(message)


class JmsResourceNotFoundError(JmsApiError):
    """The requested table is not provisioned on the data service.

    Optional collections (locations, checklists, fleet, settings) treat
    this as an empty result rather than a failure.
    """


class JmsAuthenticationError(JmsError):
    """Login rejected: unknown email, wrong password or inactive account."""


class JmsValidationError(JmsError):
    """A form failed local validation.

    Raised before any persistence call. ``field_errors`` maps form field
    names to the message rendered next to that field; ``str(exc)`` is the
    form-level message.
    """

    def __init__(self, message: str, *, field_errors: Mapping[str, str] | None = None) -> None:
        self.field_errors: dict[str, str] = dict(field_errors or {})
        super().__init__(message)


class JmsStateError(JmsError):
    """A view-state transition was requested from the wrong mode."""
