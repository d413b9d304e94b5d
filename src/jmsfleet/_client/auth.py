"""Internal account operations for :class:`jmsfleet.client.JmsClient`.

Sign-in is a local check against the loaded ``app_users`` collection;
designing a real authentication protocol is out of scope for this
package.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from jmsfleet._client import commands as _commands
from jmsfleet._client import reads as _reads
from jmsfleet._constants import TABLE_USERS
from jmsfleet.exceptions import JmsAuthenticationError, JmsError, JmsResourceNotFoundError, JmsValidationError
from jmsfleet.mapping.records import to_view_model
from jmsfleet.models import AppUser, Role, UserStatus
from jmsfleet.session import Session
from jmsfleet.state.events import EntityKind, LoadState
from jmsfleet.viewstate.forms import ResetPasswordForm, SignUpForm, validate_form

if TYPE_CHECKING:
    from jmsfleet.client import JmsClient

_logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Credenciais inválidas. Tente novamente."
NO_ROLE_MESSAGE = "Usuário sem perfil de acesso."


def _same_secret(stored: str, given: str) -> bool:
    return secrets.compare_digest(stored.encode("utf-8"), given.encode("utf-8"))


async def login(client: JmsClient, email: str, password: str, *, load: bool = True) -> Session:
    """Sign in with *email* and *password*.

    Loads the user accounts first when they were never loaded, and the
    full data set after a successful sign-in unless *load* is false.

    Raises
    ------
    JmsAuthenticationError
        Unknown email, wrong password, inactive account or a user without
        any role.
    """
    if client.store.load_state(EntityKind.USERS) != LoadState.LOADED:
        await _reads.load_kind(client, EntityKind.USERS)

    wanted = email.strip().casefold()
    match: AppUser | None = None
    for user in client.store.items(EntityKind.USERS):
        if user.is_active and user.email.casefold() == wanted and _same_secret(user.password, password):
            match = user
            break

    if match is None:
        _logger.debug("Sign-in rejected for %s", email)
        raise JmsAuthenticationError(INVALID_CREDENTIALS_MESSAGE)
    if not match.roles:
        raise JmsAuthenticationError(NO_ROLE_MESSAGE)

    client._session = Session.from_user(match)
    _logger.info("Signed in as %s", match.email)
    if load:
        await _reads.load_all(client)
    return client._session


def logout(client: JmsClient) -> None:
    client._session = None


async def sign_up(client: JmsClient, data: Mapping[str, Any] | SignUpForm) -> AppUser | None:
    """Self-registration with the configured default role and active status.

    Raises
    ------
    JmsValidationError
        Incomplete form, password mismatch or an email already used by
        an active account.
    """
    form = validate_form(SignUpForm, data)
    user = form.to_entity(Role(client.config.default_signup_role))

    try:
        existing = await client._require_persistence().get_one(TABLE_USERS, user.email, column="email")
    except JmsResourceNotFoundError:
        existing = None
    except JmsError as exc:
        _commands._report_failure(client, "Erro ao criar conta", exc)
        return None
    if existing is not None and to_view_model(EntityKind.USERS, existing).status == UserStatus.ACTIVE:
        message = _commands.DUPLICATE_EMAIL_MESSAGE
        raise JmsValidationError(message, field_errors={"email": message})

    return await _commands.create_user(client, user, success_message="Conta criada com sucesso!")


async def find_account(client: JmsClient, email: str) -> AppUser | None:
    """Look up an active account by email (password recovery)."""
    text = email.strip()
    if not text:
        return None
    try:
        row = await client._require_persistence().get_one(TABLE_USERS, text, column="email")
    except JmsResourceNotFoundError:
        return None
    except JmsError as exc:
        _commands._report_failure(client, "Erro ao buscar conta", exc)
        return None
    if row is None:
        return None
    user = to_view_model(EntityKind.USERS, row)
    return user if isinstance(user, AppUser) and user.is_active else None


async def reset_password(client: JmsClient, email: str, data: Mapping[str, Any] | ResetPasswordForm) -> bool:
    """Set a new password for the active account registered under *email*."""
    form = validate_form(ResetPasswordForm, data)
    user = await find_account(client, email)
    if user is None:
        client.notifier.failure("E-mail não encontrado.")
        return False
    updated = await _commands.update_entity(
        client,
        EntityKind.USERS,
        user.model_copy(update={"password": form.password}),
        success_message="Senha redefinida com sucesso!",
    )
    return updated is not None
