"""Typed record models for jmsfleet."""

from jmsfleet.models._base import JmsEnum, JmsRecord
from jmsfleet.models.checklist import CheckInStatus, Checklist, CheckOutStatus, ContractItems, VestSizes
from jmsfleet.models.cost import Cost
from jmsfleet.models.fleet import FleetCategory, FleetItem, FleetStatus
from jmsfleet.models.location import RentalLocation
from jmsfleet.models.rental import PaymentMethod, Rental, RentalStatus, RentalType
from jmsfleet.models.settings import CompanyProfile, PriceTable
from jmsfleet.models.user import AppUser, Role, UserStatus

__all__ = [
    "AppUser",
    "CheckInStatus",
    "CheckOutStatus",
    "Checklist",
    "CompanyProfile",
    "ContractItems",
    "Cost",
    "FleetCategory",
    "FleetItem",
    "FleetStatus",
    "JmsEnum",
    "JmsRecord",
    "PaymentMethod",
    "PriceTable",
    "Rental",
    "RentalLocation",
    "RentalStatus",
    "RentalType",
    "Role",
    "UserStatus",
    "VestSizes",
]
