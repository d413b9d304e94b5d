"""Back-office user accounts (``app_users``)."""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import AliasChoices, Field, field_validator

from jmsfleet.mapping.normalize import split_roles
from jmsfleet.models._base import JmsEnum, JmsRecord, RecordId, Text, TrimmedText, enum_column


class Role(JmsEnum):
    """Access profile tag. A user holds a set of them."""

    MANAGER = "Gerente"
    COLLABORATOR = "Colaborador"
    FINANCE = "Financeiro"
    SERVICE = "Atendimento"
    INSTRUCTOR = "Instrutor"
    VISITOR = "Visitante"

    @classmethod
    def _missing_(cls, value: object) -> Role | None:
        # Unknown tags must not silently become a privileged role.
        if isinstance(value, str):
            wanted = value.strip().casefold()
            for member in cls:
                if member.value.casefold() == wanted:
                    return member
        return None


class UserStatus(JmsEnum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


_ROLE_ORDER = {role: index for index, role in enumerate(Role)}


def parse_roles(value: Any) -> frozenset[Role]:
    """Parse a role column into a set of known tags; unknown tags are dropped."""
    roles: set[Role] = set()
    for tag in split_roles(value):
        try:
            roles.add(Role(tag))
        except ValueError:
            continue
    return frozenset(roles)


def ordered_roles(roles: frozenset[Role] | set[Role]) -> list[Role]:
    return sorted(roles, key=_ROLE_ORDER.__getitem__)


def join_roles(roles: frozenset[Role] | set[Role]) -> str:
    """Comma-joined column value (``"Gerente, Financeiro"``)."""
    return ", ".join(role.value for role in ordered_roles(roles))


class AppUser(JmsRecord):
    """User record.

    ``password`` is only used for the local login check and never leaves
    the model through :meth:`to_view`.
    """

    _COLUMNS: ClassVar[dict[str, str]] = {"name": "full_name", "roles": "role", "image_url": "avatar_url"}
    _VIEW_EXCLUDE: ClassVar[frozenset[str]] = frozenset({"password"})

    id: RecordId = None
    name: Text = Field(default="", validation_alias=AliasChoices("full_name", "fullName", "name"))
    email: TrimmedText = ""
    roles: frozenset[Role] = Field(default_factory=frozenset, validation_alias=AliasChoices("role", "roles"))
    status: Annotated[UserStatus, enum_column(UserStatus)] = UserStatus.ACTIVE
    image_url: Text = Field(
        default="",
        validation_alias=AliasChoices("avatar_url", "avatarUrl", "image_url", "imageUrl"),
    )
    password: Text = ""

    @field_validator("roles", mode="before")
    @classmethod
    def _parse_roles(cls, value: Any) -> frozenset[Role]:
        return parse_roles(value)

    @property
    def is_active(self) -> bool:
        return self.status is UserStatus.ACTIVE

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def to_view(self) -> dict[str, Any]:
        view = super().to_view()
        view["roles"] = [role.value for role in ordered_roles(self.roles)]
        return view

    def _record_fields(self) -> dict[str, Any]:
        fields = super()._record_fields()
        fields["roles"] = join_roles(self.roles)
        return fields
