"""Expense and investment records (``costs``)."""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasChoices, Field

from jmsfleet.models._base import Flag, IsoDate, JmsRecord, Money, RecordId, Text, TrimmedText


class Cost(JmsRecord):
    """Cost record.

    ``paid_value`` may be below ``value`` while ``is_paid`` is false
    (partial payment). Once ``is_paid`` is true the record counts as
    settled whatever ``paid_value`` says.
    """

    _NULLABLE_DATES: ClassVar[frozenset[str]] = frozenset({"date"})

    id: RecordId = None
    type: TrimmedText = Field(default="", validation_alias=AliasChoices("type", "category"))
    value: Money = 0.0
    paid_value: Money = 0.0
    investor: TrimmedText = ""
    date: IsoDate = ""
    is_paid: Flag = False
    observations: Text = ""

    @property
    def pending_balance(self) -> float:
        """Amount still owed; zero once the record is marked paid."""
        if self.is_paid:
            return 0.0
        return self.value - self.paid_value
