"""Fleet items (``fleet``)."""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, Field

from jmsfleet.models._base import ActiveFlag, JmsEnum, JmsRecord, RecordId, Text, TrimmedText, enum_column


class FleetStatus(JmsEnum):
    """Operational status, independent of the administrative active flag."""

    AVAILABLE = "Disponível"
    MAINTENANCE = "Manutenção"
    UNAVAILABLE = "Indisponível"


class FleetCategory(JmsEnum):
    JET_SKI = "Jet Ski"
    BOAT = "Lancha"
    EQUIPMENT = "Equipamento"


class FleetItem(JmsRecord):
    id: RecordId = None
    name: TrimmedText = ""
    color: Text = ""
    plate: Text = Field(default="", validation_alias=AliasChoices("plate", "identifier"))
    status: Annotated[FleetStatus, enum_column(FleetStatus)] = FleetStatus.AVAILABLE
    category: Annotated[FleetCategory, enum_column(FleetCategory)] = FleetCategory.JET_SKI
    is_active: ActiveFlag = True
