"""
Expiration analysis models (derived, recomputed on every analysis run).
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from .entitlement import Category


class ExpirationEntry(BaseModel):
    """
    An entitlement whose end date falls inside the expiration window.

    Attributes:
        account_id: Owning account
        account_name: Account display name
        source_record_id: Record that granted the expiring entitlement
        source_record_name: Name of that record
        product_code: Product code
        product_name: Product display name
        category: "Model", "App" or "Data"
        end_date: End of validity
        days_until_expiry: end_date - today, in days
        is_extended: A later record grants the same product past end_date
        extending_record_id: Record holding the extending entitlement
        extending_record_name: Name of that record
        extending_end_date: End date of the extending entitlement
    """

    account_id: str | None = None
    account_name: str | None = None
    source_record_id: str | None = None
    source_record_name: str | None = None
    product_code: str
    product_name: str | None = None
    category: Category
    end_date: date
    days_until_expiry: int
    is_extended: bool = False
    extending_record_id: str | None = None
    extending_record_name: str | None = None
    extending_end_date: date | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "Acme Re",
                "source_record_id": "a0X5e000001AbCd",
                "source_record_name": "PS-4330",
                "product_code": "RI-EXPOSUREIQ",
                "category": "App",
                "end_date": "2025-02-01",
                "days_until_expiry": 12,
                "is_extended": True,
                "extending_record_id": "a0X5e000001XyZw",
                "extending_record_name": "PS-4512",
                "extending_end_date": "2025-08-01"
            }
        }


class ExpirationAnalysis(BaseModel):
    """Entries plus the counters of one analysis run."""

    records_analyzed: int = 0
    entitlements_processed: int = 0
    expirations_found: int = 0
    extensions_found: int = 0
    removed_in_subsequent_record: int = 0
    lookback_years: int
    expiration_window_days: int
    entries: list[ExpirationEntry] = Field(default_factory=list)


class ExpirationGroup(BaseModel):
    """
    Expiring entries sharing an (account, source record) pair.

    ``status`` is "at-risk" if any member is not extended, else "extended".
    """

    account_id: str | None = None
    account_name: str | None = None
    source_record_id: str | None = None
    source_record_name: str | None = None
    models: list[ExpirationEntry] = Field(default_factory=list)
    apps: list[ExpirationEntry] = Field(default_factory=list)
    data: list[ExpirationEntry] = Field(default_factory=list)
    earliest_expiry: date
    earliest_days_until_expiry: int
    status: Literal["at-risk", "extended"] = "at-risk"


class ExpirationSummary(BaseModel):
    total_expiring: int = 0
    at_risk: int = 0
    extended: int = 0
    accounts_affected: int = 0
