"""Session state for the signed-in back-office user."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

from jmsfleet.models.user import AppUser, Role


class Session(BaseModel):
    """Current-user projection after a successful login.

    Parameters
    ----------
    user_id : int, str or None
        Id of the authenticated ``app_users`` row.
    email : str
        Login identity. Edits to the user with this email are propagated
        into the projection.
    name : str
        Display name shown in the header.
    image_url : str
        Avatar reference, ``""`` when unset.
    roles : frozenset of Role
        Access profile tags. Never empty for a signed-in user.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) of the login.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    user_id: int | str | None = None
    email: str
    name: str = ""
    image_url: str = ""
    roles: frozenset[Role] = Field(default_factory=frozenset)
    created_at: float = Field(default_factory=time.monotonic)

    @classmethod
    def from_user(cls, user: AppUser) -> Session:
        return cls(
            user_id=user.id,
            email=user.email,
            name=user.name,
            image_url=user.image_url,
            roles=user.roles,
        )

    def has_role(self, role: Role) -> bool:
        """Exact membership test; ``"Gerente2"`` never matches ``Gerente``."""
        return role in self.roles

    def has_any_role(self, *roles: Role) -> bool:
        return any(role in self.roles for role in roles)

    def matches(self, user: AppUser) -> bool:
        """Whether *user* is the signed-in identity."""
        return bool(user.email) and user.email.casefold() == self.email.casefold()

    def with_user_changes(self, user: AppUser) -> Session:
        """Return a projection carrying the edited name, avatar and roles."""
        return self.model_copy(update={"name": user.name, "image_url": user.image_url, "roles": user.roles})

    @property
    def age(self) -> float:
        """Seconds since sign-in."""
        return time.monotonic() - self.created_at
