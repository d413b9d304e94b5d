"""Singleton settings records (``company_profile`` and ``price_table``)."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from jmsfleet._constants import SINGLETON_ID
from jmsfleet.models._base import JmsRecord, Money, RecordId, Text


class CompanyProfile(JmsRecord):
    id: RecordId = SINGLETON_ID
    business_name: Text = Field(default="", validation_alias=AliasChoices("business_name", "businessName", "name"))
    cnpj: Text = ""
    phone: Text = ""
    address: Text = ""


class PriceTable(JmsRecord):
    """Default pricing tiers."""

    id: RecordId = SINGLETON_ID
    half_day: Money = 0.0
    full_day: Money = 0.0
    extra_hour: Money = 0.0
