"""Rental bookings (``rentals``)."""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import AliasChoices, BeforeValidator, Field, model_validator

from jmsfleet.mapping.normalize import coerce_text, derive_initials
from jmsfleet.models._base import (
    IsoDate,
    JmsEnum,
    JmsRecord,
    NonNegativeMoney,
    RecordId,
    Text,
    TrimmedText,
    enum_column,
)


class RentalType(JmsEnum):
    THIRTY_MINUTES = "30 Min"
    ONE_HOUR = "1 Hora"
    TOUR = "Tour"
    HALF_DAY = "Meia Diária"
    FULL_DAY = "Diária"


class RentalStatus(JmsEnum):
    """Booking status. Any status may be set directly by an editor."""

    PENDING = "Pendente"
    CONFIRMED = "Confirmado"
    COMPLETED = "Concluído"


class PaymentMethod(JmsEnum):
    PIX = "Pix"
    CARD = "Cartão"
    CASH = "Dinheiro"


def _optional_payment(value: Any) -> PaymentMethod | None:
    text = coerce_text(value).strip()
    if not text:
        return None
    for member in PaymentMethod:
        if member.value.casefold() == text.casefold():
            return member
    return None


class Rental(JmsRecord):
    _NULLABLE_DATES: ClassVar[frozenset[str]] = frozenset({"date"})

    id: RecordId = None
    client_name: Text = ""
    client_doc: Text = Field(default="", validation_alias=AliasChoices("client_doc", "clientDoc", "client_cpf", "clientCpf"))
    client_initial: Text = ""
    client_phone: Text = ""
    date: IsoDate = ""
    rental_type: Annotated[RentalType, enum_column(RentalType)] = Field(
        default=RentalType.THIRTY_MINUTES,
        validation_alias=AliasChoices("rental_type", "rentalType", "type"),
    )
    start_time: Text = ""
    end_time: Text = ""
    status: Annotated[RentalStatus, enum_column(RentalStatus)] = RentalStatus.PENDING
    location: TrimmedText = ""
    observations: Text = ""
    payment_method: Annotated[PaymentMethod | None, BeforeValidator(_optional_payment)] = None
    value: NonNegativeMoney = 0.0

    @model_validator(mode="after")
    def _derive_initial(self) -> Rental:
        if not self.client_initial and self.client_name:
            object.__setattr__(self, "client_initial", derive_initials(self.client_name))
        return self
