"""Form models for the CRUD screens.

Forms hold what the user typed. :func:`validate_form` turns a raw form
dict into a validated form or raises :class:`JmsValidationError` with the
message the screen shows; nothing is sent to the data service before that
succeeds. ``to_entity`` then builds the record the sync operation saves.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from jmsfleet._constants import DEFAULT_LOCATION
from jmsfleet.exceptions import JmsValidationError
from jmsfleet.mapping.normalize import coerce_flag, coerce_id, coerce_text, safe_float
from jmsfleet.models import (
    AppUser,
    Checklist,
    CheckInStatus,
    CheckOutStatus,
    ContractItems,
    Cost,
    FleetCategory,
    FleetItem,
    FleetStatus,
    PaymentMethod,
    Rental,
    RentalLocation,
    RentalStatus,
    RentalType,
    Role,
    UserStatus,
)
from jmsfleet.models.user import parse_roles

_logger = logging.getLogger(__name__)

_FormT = TypeVar("_FormT", bound="JmsForm")

_DISPLAY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

REQUIRED_FIELDS_MESSAGE = "Por favor, preencha todos os campos obrigatórios."
INVALID_NUMBER_MESSAGE = "Valores devem ser números válidos."
INVALID_DATE_MESSAGE = "Data inválida. Use o formato dd/mm/aaaa."
PASSWORD_MISMATCH_MESSAGE = "As senhas não coincidem."


class FormError(ValueError):
    """A form rule failed; ``field`` names the input to highlight."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def parse_form_date(value: str) -> str | None:
    """``dd/mm/aaaa`` or ``YYYY-MM-DD`` to ISO, ``None`` when invalid."""
    text = value.strip()
    match = _DISPLAY_DATE.match(text)
    try:
        if match:
            day, month, year = (int(part) for part in match.groups())
            return date(year, month, day).isoformat()
        return date.fromisoformat(text[:10]).isoformat() if len(text) >= 10 else None
    except ValueError:
        return None


def format_display_date(iso_date: str) -> str:
    """``YYYY-MM-DD`` to ``dd/mm/aaaa``; empty input gives ``"-"``."""
    if not iso_date:
        return "-"
    year, month, day = iso_date[:10].split("-")
    return f"{day}/{month}/{year}"


def _parse_amount(value: str, field: str, *, required: bool) -> float:
    if not value.strip():
        if required:
            raise FormError(field, REQUIRED_FIELDS_MESSAGE)
        return 0.0
    parsed = safe_float(value.replace(",", ".") if value.count(",") == 1 and "." not in value else value)
    if parsed is None:
        raise FormError(field, INVALID_NUMBER_MESSAGE)
    return parsed


class JmsForm(BaseModel):
    """Base for screen forms.

    Accepts snake_case and camelCase keys; every input is text or a
    simple scalar, so missing inputs default to empty values and the
    rules live in ``model_validator`` hooks that raise :class:`FormError`.
    """

    REQUIRED_MESSAGE: ClassVar[str] = REQUIRED_FIELDS_MESSAGE

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    id: int | str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> int | str | None:
        return coerce_id(value)

    @property
    def is_new(self) -> bool:
        return self.id is None

    @classmethod
    def from_entity(cls: type[_FormT], entity: Any) -> _FormT:
        """Pre-populate the edit form from a stored entity.

        The draft is not validated; that happens on save.
        """
        values = {name: getattr(entity, name) for name in cls.model_fields if hasattr(entity, name)}
        return cls.model_construct(**values)


def validate_form(form_cls: type[_FormT], data: Mapping[str, Any] | JmsForm) -> _FormT:
    """Validate *data* as *form_cls*.

    Raises
    ------
    JmsValidationError
        With the first message as text and one message per offending field
        in ``field_errors``.
    """
    if isinstance(data, form_cls):
        data = data.model_dump()
    try:
        return form_cls.model_validate(dict(data))
    except ValidationError as exc:
        field_errors: dict[str, str] = {}
        first_message = ""
        for error in exc.errors():
            cause = error.get("ctx", {}).get("error")
            if isinstance(cause, FormError):
                field, message = cause.field, cause.message
            else:
                loc = error.get("loc") or ("__form__",)
                field, message = str(loc[0]), form_cls.REQUIRED_MESSAGE
            field_errors.setdefault(field, message)
            first_message = first_message or message
        _logger.debug("%s rejected: %s", form_cls.__name__, field_errors)
        raise JmsValidationError(first_message, field_errors=field_errors) from exc


# ----------------------------------------------------------------------
# Accounts
# ----------------------------------------------------------------------


class SignUpForm(JmsForm):
    """Public self-registration."""

    REQUIRED_MESSAGE: ClassVar[str] = "Todos os campos são obrigatórios."

    full_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    @model_validator(mode="after")
    def _check(self) -> SignUpForm:
        for name in ("full_name", "email", "password", "confirm_password"):
            if not getattr(self, name):
                raise FormError(name, self.REQUIRED_MESSAGE)
        if self.password != self.confirm_password:
            raise FormError("confirm_password", PASSWORD_MISMATCH_MESSAGE)
        return self

    def to_entity(self, role: Role) -> AppUser:
        return AppUser(
            name=self.full_name,
            email=self.email,
            roles=frozenset({role}),
            status=UserStatus.ACTIVE,
            password=self.password,
        )


class UserForm(JmsForm):
    """Admin add/edit user. At least one role is required."""

    name: str = ""
    email: str = ""
    roles: frozenset[Role] = Field(default_factory=frozenset)
    status: UserStatus = UserStatus.ACTIVE
    image_url: str = ""
    password: str = ""
    confirm_password: str = ""

    @field_validator("roles", mode="before")
    @classmethod
    def _parse_roles(cls, value: Any) -> frozenset[Role]:
        return parse_roles(value)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> UserStatus:
        return UserStatus(coerce_text(value))

    @model_validator(mode="after")
    def _check(self) -> UserForm:
        if not self.name or not self.email:
            raise FormError("name" if not self.name else "email", "Os campos Nome e E-mail são obrigatórios.")
        if not self.roles:
            raise FormError("roles", "Selecione pelo menos um perfil de acesso.")
        if self.is_new and (not self.password or not self.confirm_password):
            raise FormError("password", "Os campos de senha são obrigatórios para novos usuários.")
        if (self.password or self.confirm_password) and self.password != self.confirm_password:
            raise FormError("confirm_password", PASSWORD_MISMATCH_MESSAGE)
        return self

    @classmethod
    def from_entity(cls, entity: Any) -> UserForm:
        # The stored password is never echoed back into the form.
        return cls.model_construct(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            roles=entity.roles,
            status=entity.status,
            image_url=entity.image_url,
        )

    def to_entity(self) -> AppUser:
        return AppUser(
            id=self.id,
            name=self.name,
            email=self.email,
            roles=self.roles,
            status=self.status,
            image_url=self.image_url,
            password=self.password,
        )


class ResetPasswordForm(JmsForm):
    REQUIRED_MESSAGE: ClassVar[str] = "Todos os campos são obrigatórios."

    password: str = ""
    confirm_password: str = ""

    @model_validator(mode="after")
    def _check(self) -> ResetPasswordForm:
        if not self.password or not self.confirm_password:
            raise FormError("password", self.REQUIRED_MESSAGE)
        if self.password != self.confirm_password:
            raise FormError("confirm_password", PASSWORD_MISMATCH_MESSAGE)
        return self


# ----------------------------------------------------------------------
# Operations
# ----------------------------------------------------------------------


class RentalForm(JmsForm):
    client_name: str = ""
    client_doc: str = ""
    client_phone: str = ""
    date: str = ""
    rental_type: RentalType = RentalType.ONE_HOUR
    start_time: str = ""
    end_time: str = ""
    status: RentalStatus = RentalStatus.PENDING
    location: str = DEFAULT_LOCATION
    observations: str = ""
    payment_method: PaymentMethod = PaymentMethod.PIX
    value: str = ""

    @field_validator("rental_type", "status", "payment_method", mode="before")
    @classmethod
    def _parse_enum(cls, value: Any, info: Any) -> Any:
        enum_cls = {"rental_type": RentalType, "status": RentalStatus, "payment_method": PaymentMethod}[info.field_name]
        return enum_cls(coerce_text(value))

    @field_validator("value", mode="before")
    @classmethod
    def _value_text(cls, value: Any) -> str:
        return coerce_text(value)

    @model_validator(mode="after")
    def _check(self) -> RentalForm:
        for name in ("client_name", "date"):
            if not getattr(self, name):
                raise FormError(name, REQUIRED_FIELDS_MESSAGE)
        if parse_form_date(self.date) is None:
            raise FormError("date", INVALID_DATE_MESSAGE)
        if _parse_amount(self.value, "value", required=False) < 0:
            raise FormError("value", INVALID_NUMBER_MESSAGE)
        return self

    @classmethod
    def from_entity(cls, entity: Any) -> RentalForm:
        draft = super().from_entity(entity)
        return draft.model_copy(
            update={
                "value": coerce_text(entity.value),
                "payment_method": entity.payment_method or PaymentMethod.PIX,
            }
        )

    def to_entity(self) -> Rental:
        return Rental(
            id=self.id,
            client_name=self.client_name,
            client_doc=self.client_doc,
            client_phone=self.client_phone,
            date=parse_form_date(self.date) or "",
            rental_type=self.rental_type,
            start_time=self.start_time,
            end_time=self.end_time,
            status=self.status,
            location=self.location,
            observations=self.observations,
            payment_method=self.payment_method,
            value=_parse_amount(self.value, "value", required=False),
        )


class CostForm(JmsForm):
    """Cost entry; dates are typed as ``dd/mm/aaaa`` (ISO also accepted)."""

    type: str = ""
    value: str = ""
    paid_value: str = ""
    investor: str = "Grupo"
    date: str = ""
    is_paid: bool = False
    observations: str = ""

    @field_validator("value", "paid_value", mode="before")
    @classmethod
    def _amount_text(cls, value: Any) -> str:
        return coerce_text(value)

    @field_validator("is_paid", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @model_validator(mode="after")
    def _check(self) -> CostForm:
        for name in ("type", "value", "date", "investor"):
            if not getattr(self, name):
                raise FormError(name, REQUIRED_FIELDS_MESSAGE)
        if parse_form_date(self.date) is None:
            raise FormError("date", INVALID_DATE_MESSAGE)
        _parse_amount(self.value, "value", required=True)
        _parse_amount(self.paid_value, "paid_value", required=False)
        return self

    @classmethod
    def from_entity(cls, entity: Any) -> CostForm:
        return cls.model_construct(
            id=entity.id,
            type=entity.type,
            value=coerce_text(entity.value),
            paid_value=coerce_text(entity.paid_value),
            investor=entity.investor,
            date=format_display_date(entity.date) if entity.date else "",
            is_paid=entity.is_paid,
            observations=entity.observations,
        )

    def to_entity(self) -> Cost:
        return Cost(
            id=self.id,
            type=self.type,
            value=_parse_amount(self.value, "value", required=True),
            paid_value=_parse_amount(self.paid_value, "paid_value", required=False),
            investor=self.investor,
            date=parse_form_date(self.date) or "",
            is_paid=self.is_paid,
            observations=self.observations,
        )


class LocationForm(JmsForm):
    name: str = ""

    @model_validator(mode="after")
    def _check(self) -> LocationForm:
        if not self.name:
            raise FormError("name", REQUIRED_FIELDS_MESSAGE)
        return self

    def to_entity(self) -> RentalLocation:
        return RentalLocation(id=self.id, name=self.name)


class FleetForm(JmsForm):
    name: str = ""
    color: str = ""
    plate: str = ""
    status: FleetStatus = FleetStatus.AVAILABLE
    category: FleetCategory = FleetCategory.JET_SKI
    is_active: bool = True

    @field_validator("status", "category", mode="before")
    @classmethod
    def _parse_enum(cls, value: Any, info: Any) -> Any:
        enum_cls = FleetStatus if info.field_name == "status" else FleetCategory
        return enum_cls(coerce_text(value))

    @field_validator("is_active", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return coerce_flag(value, default=True)

    @model_validator(mode="after")
    def _check(self) -> FleetForm:
        if not self.name:
            raise FormError("name", REQUIRED_FIELDS_MESSAGE)
        return self

    def to_entity(self) -> FleetItem:
        return FleetItem(
            id=self.id,
            name=self.name,
            color=self.color,
            plate=self.plate,
            status=self.status,
            category=self.category,
            is_active=self.is_active,
        )


class ChecklistForm(JmsForm):
    REQUIRED_MESSAGE: ClassVar[str] = "Preencha os campos obrigatórios"

    id: str | None = None
    client_name: str = ""
    client_email: str = ""
    jet_ski: str = ""
    date: str = ""
    status_check_in: CheckInStatus = CheckInStatus.PENDING
    status_check_out: CheckOutStatus = CheckOutStatus.NOT_STARTED
    observations: str = ""
    checkin_items: ContractItems = Field(default_factory=ContractItems)
    checkout_items: ContractItems = Field(default_factory=ContractItems)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str | None:
        text = coerce_text(value).strip()
        return text or None

    @field_validator("status_check_in", "status_check_out", mode="before")
    @classmethod
    def _parse_enum(cls, value: Any, info: Any) -> Any:
        enum_cls = CheckInStatus if info.field_name == "status_check_in" else CheckOutStatus
        return enum_cls(coerce_text(value))

    @model_validator(mode="after")
    def _check(self) -> ChecklistForm:
        for name in ("client_name", "jet_ski", "date"):
            if not getattr(self, name):
                raise FormError(name, self.REQUIRED_MESSAGE)
        if parse_form_date(self.date) is None:
            raise FormError("date", INVALID_DATE_MESSAGE)
        return self

    def to_entity(self) -> Checklist:
        return Checklist(
            id=self.id,
            client_name=self.client_name,
            client_email=self.client_email,
            jet_ski=self.jet_ski,
            date=parse_form_date(self.date) or "",
            status_check_in=self.status_check_in,
            status_check_out=self.status_check_out,
            observations=self.observations,
            checkin_items=self.checkin_items,
            checkout_items=self.checkout_items,
        )
