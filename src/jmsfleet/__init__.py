"""jmsfleet - Async data-sync layer for a jet-ski rental back office."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("jmsfleet")
except PackageNotFoundError:
    __version__ = "0+local"
from jmsfleet.client import JmsClient
from jmsfleet.config import JmsConfig
from jmsfleet.exceptions import (
    JmsApiError,
    JmsAuthenticationError,
    JmsConfigError,
    JmsError,
    JmsResourceNotFoundError,
    JmsStateError,
    JmsTransportError,
    JmsValidationError,
)
from jmsfleet.models import (
    AppUser,
    CheckInStatus,
    Checklist,
    CheckOutStatus,
    CompanyProfile,
    ContractItems,
    Cost,
    FleetCategory,
    FleetItem,
    FleetStatus,
    PaymentMethod,
    PriceTable,
    Rental,
    RentalLocation,
    RentalStatus,
    RentalType,
    Role,
    UserStatus,
)
from jmsfleet.persistence import Persistence, RestPersistence
from jmsfleet.session import Session
from jmsfleet.state.events import EntityKind, StoreEvent, StoreOp
from jmsfleet.state.notifications import Notification, Notifier
from jmsfleet.state.store import EntityStore

__all__ = [
    "__version__",
    "AppUser",
    "CheckInStatus",
    "CheckOutStatus",
    "Checklist",
    "CompanyProfile",
    "ContractItems",
    "Cost",
    "EntityKind",
    "EntityStore",
    "FleetCategory",
    "FleetItem",
    "FleetStatus",
    "JmsApiError",
    "JmsAuthenticationError",
    "JmsClient",
    "JmsConfig",
    "JmsConfigError",
    "JmsError",
    "JmsResourceNotFoundError",
    "JmsStateError",
    "JmsTransportError",
    "JmsValidationError",
    "Notification",
    "Notifier",
    "PaymentMethod",
    "Persistence",
    "PriceTable",
    "Rental",
    "RentalLocation",
    "RentalStatus",
    "RentalType",
    "RestPersistence",
    "Role",
    "Session",
    "StoreEvent",
    "StoreOp",
    "UserStatus",
]
