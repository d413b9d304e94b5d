"""Rental locations (``rental_locations``)."""

from __future__ import annotations

from jmsfleet.models._base import JmsRecord, RecordId, TrimmedText


class RentalLocation(JmsRecord):
    id: RecordId = None
    name: TrimmedText = ""
