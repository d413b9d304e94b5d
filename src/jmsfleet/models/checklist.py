"""Rental check-in / check-out checklists (``checklists``).

Item groups are stored as JSON columns (``checkin_items`` and
``checkout_items``).
"""

from __future__ import annotations

import json
from typing import Annotated, Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jmsfleet.models._base import Flag, IsoDate, JmsEnum, JmsRecord, Text, TrimmedText, enum_column


class CheckInStatus(JmsEnum):
    PENDING = "Pendente"
    COMPLETED = "Concluído"


class CheckOutStatus(JmsEnum):
    NOT_STARTED = "Não Iniciado"
    IN_PROGRESS = "Em Aberto"
    COMPLETED = "Concluído"


def _json_object(value: Any) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return {}
    return value if isinstance(value, dict) else {}


class _ItemGroup(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class VestSizes(_ItemGroup):
    """Life vests handed over, by size."""

    eg: Flag = False
    gg: Flag = False
    g1: Flag = False
    m: Flag = False


class ContractItems(_ItemGroup):
    """Conference items of one checklist stage."""

    tiem: Flag = False
    fuel_full: Flag = False
    key: Flag = False
    insurance: Flag = False
    trailer_doc: Flag = False
    anchor: Flag = False
    rope: Flag = False
    vests: VestSizes = Field(default_factory=VestSizes)
    wash: Flag = False
    freshwater_flush: Flag = False

    @field_validator("vests", mode="before")
    @classmethod
    def _vests_object(cls, value: Any) -> Any:
        return _json_object(value)


ItemGroup = Annotated[ContractItems, Field(default_factory=ContractItems)]


class Checklist(JmsRecord):
    """Checklist record; ``id`` is generated client side (``#LOC-2024-7``)."""

    _NULLABLE_DATES: ClassVar[frozenset[str]] = frozenset({"date"})

    id: str | None = None
    client_name: Text = ""
    client_email: TrimmedText = ""
    jet_ski: TrimmedText = Field(default="", validation_alias=AliasChoices("jet_ski", "jetSki", "jetski"))
    date: IsoDate = ""
    status_check_in: Annotated[CheckInStatus, enum_column(CheckInStatus)] = CheckInStatus.PENDING
    status_check_out: Annotated[CheckOutStatus, enum_column(CheckOutStatus)] = CheckOutStatus.NOT_STARTED
    observations: Text = ""
    checkin_items: ItemGroup
    checkout_items: ItemGroup

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> str | None:
        text = str(value).strip() if value is not None else ""
        return text or None

    @field_validator("checkin_items", "checkout_items", mode="before")
    @classmethod
    def _items_object(cls, value: Any) -> Any:
        return _json_object(value)
