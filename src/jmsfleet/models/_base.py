"""Base model and enum for persisted records.

Every record model inherits from :class:`JmsRecord` which provides:

* ``alias_generator=to_camel`` so the model accepts both the persisted
  ``snake_case`` row and the camelCase view object, and dumps the view
  object through :meth:`JmsRecord.to_view`.
* A ``model_validator(mode="before")`` that drops ``None`` and NaN
  values so the field default is used.
* A ``raw`` dict that captures the original row.
* :meth:`JmsRecord.from_record`, which never raises.

Enum columns inherit from :class:`JmsEnum` whose ``_missing_`` hook
matches case-insensitively and otherwise falls back to the first
(default) member.
"""

from __future__ import annotations

import enum
import functools
import logging
import math
from collections.abc import Mapping
from datetime import date
from typing import Annotated, Any, ClassVar, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from jmsfleet.mapping.normalize import (
    coerce_flag,
    coerce_id,
    coerce_number,
    coerce_text,
    utc_calendar_date,
)

_logger = logging.getLogger(__name__)

_RecordT = TypeVar("_RecordT", bound="JmsRecord")


def _trimmed_text(value: Any) -> str:
    return coerce_text(value).strip()


def _non_negative_money(value: Any) -> float:
    parsed = coerce_number(value)
    return parsed if parsed > 0 else 0.0


def _iso_date_text(value: Any) -> str:
    if isinstance(value, (str, date)):
        parsed = utc_calendar_date(value)
        return parsed.isoformat() if parsed is not None else ""
    return ""


Text = Annotated[str, BeforeValidator(coerce_text)]
"""Optional text: ``None`` becomes ``""`` and numbers are rendered."""

TrimmedText = Annotated[str, BeforeValidator(_trimmed_text)]
"""Text used as a filter key; surrounding whitespace is removed."""

Money = Annotated[float, BeforeValidator(coerce_number)]
"""Numeric column: strings are parsed, anything unusable becomes ``0.0``."""

NonNegativeMoney = Annotated[float, BeforeValidator(_non_negative_money)]

Flag = Annotated[bool, BeforeValidator(coerce_flag)]
"""Boolean column defaulting to false."""

ActiveFlag = Annotated[bool, BeforeValidator(functools.partial(coerce_flag, default=True))]
"""Boolean column that is true unless the row carries an explicit false."""

RecordId = Annotated[int | str | None, BeforeValidator(coerce_id)]

IsoDate = Annotated[str, BeforeValidator(_iso_date_text)]
"""``YYYY-MM-DD`` calendar date or ``""``."""


class JmsEnum(enum.StrEnum):
    """Base for enum columns.

    The first declared member is the default. Values without a mapped
    member resolve to it instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> JmsEnum:
        if isinstance(value, str):
            wanted = value.strip().casefold()
            for member in cls:
                if member.value.casefold() == wanted:
                    return member
        return next(iter(cls))


class JmsRecord(BaseModel):
    """Base for persisted record models.

    Subclasses declare:

    * ``_COLUMNS``: field name -> column name, for fields whose column is
      named differently.
    * ``_NULLABLE_DATES``: fields whose empty string is written as
      ``NULL`` so date columns accept it.
    * ``_VIEW_EXCLUDE``: fields never shown to the presentation layer.
    """

    _COLUMNS: ClassVar[dict[str, str]] = {}
    _NULLABLE_DATES: ClassVar[frozenset[str]] = frozenset()
    _VIEW_EXCLUDE: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original row as received."""

    @staticmethod
    def _clean_dict(values: Mapping[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_row(cls, values: Any) -> Any:
        """Drop null values and stash the raw row."""
        if not isinstance(values, Mapping):
            return values
        original = dict(values)
        cleaned = JmsRecord._clean_dict(original)
        # Explicit raw= (constructor use) wins over the auto stash.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned

    @classmethod
    def from_record(cls: type[_RecordT], row: Mapping[str, Any] | None) -> _RecordT:
        """Map a persisted row, degrading to defaults instead of raising."""
        data = dict(row) if isinstance(row, Mapping) else {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            _logger.debug("Row for %s did not validate, using defaults: %s", cls.__name__, exc)
            return cls(raw=data)

    def to_view(self) -> dict[str, Any]:
        """camelCase view object for the presentation layer."""
        return self.model_dump(mode="json", by_alias=True, exclude={"raw", *self._VIEW_EXCLUDE})

    def _record_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"raw"})

    def to_record(self, *, include_id: bool = True) -> dict[str, Any]:
        """Persisted row for this model.

        ``id`` is left out when *include_id* is false or when no id has
        been assigned yet.
        """
        fields = self._record_fields()
        record: dict[str, Any] = {}
        for name, value in fields.items():
            if name == "id" and (not include_id or value is None):
                continue
            if name in self._NULLABLE_DATES and not value:
                value = None
            record[self._COLUMNS.get(name, name)] = value
        return record


def enum_column(enum_cls: type[JmsEnum]) -> BeforeValidator:
    """Before-validator resolving text to *enum_cls*, default member on a miss."""

    def _coerce(value: Any) -> Any:
        if isinstance(value, enum_cls):
            return value
        return enum_cls(coerce_text(value))

    return BeforeValidator(_coerce)
