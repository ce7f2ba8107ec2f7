"""
Customer product snapshot models produced by the aggregator.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


ProductStatus = Literal["active", "expiring-soon", "expiring"]


class AggregatedProduct(BaseModel):
    """
    One currently-valid product, merged across every record that grants it.

    Keyed by (region, category, product_code); multi-instance products are
    additionally keyed by the granting record's name.

    Attributes:
        product_code: Product code
        product_name: Display name
        package_name: First non-empty package name seen
        category: "models", "apps" or "data"
        region: Region from the granting payload
        start_date: Earliest start seen across merged sources
        end_date: Latest end seen across merged sources
        status: "active" (>90d), "expiring-soon" (31-90d), "expiring" (<=30d)
        days_remaining: end_date - today, in days, taken from the newest granting
                        record; not recomputed when a merge widens end_date
        source_ps_records: Names of every contributing record
        is_multi_instance: Product code carries the multi-instance marker
    """

    product_code: str
    product_name: str | None = None
    package_name: str | None = None
    category: Literal["models", "apps", "data"]
    region: str
    start_date: date | None = None
    end_date: date
    status: ProductStatus
    days_remaining: int
    source_ps_records: list[str] = Field(default_factory=list)
    is_multi_instance: bool = False


class RegionProducts(BaseModel):
    models: list[AggregatedProduct] = Field(default_factory=list)
    apps: list[AggregatedProduct] = Field(default_factory=list)
    data: list[AggregatedProduct] = Field(default_factory=list)


class CategoryCounts(BaseModel):
    models: int = 0
    apps: int = 0
    data: int = 0


class ProductSummary(BaseModel):
    total_active: int = 0
    by_category: CategoryCounts = Field(default_factory=CategoryCounts)


class LastUpdated(BaseModel):
    """Most recent record contributing to the snapshot (informational)."""

    record_id: str
    record_name: str
    date: datetime


class CustomerProducts(BaseModel):
    """Deduplicated active-product snapshot for one account."""

    account_id: str | None = None
    products_by_region: dict[str, RegionProducts] = Field(default_factory=dict)
    summary: ProductSummary = Field(default_factory=ProductSummary)
    last_updated: LastUpdated | None = None
    records_analyzed: int = 0
