"""
Entitlement model representing one normalized product grant (immutable).
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field


Category = Literal["Model", "App", "Data"]

# Category -> key used in grouped outputs ({"models": [...], "apps": [...], "data": [...]})
CATEGORY_KEYS: dict[str, str] = {
    "Model": "models",
    "App": "apps",
    "Data": "data",
}


class Entitlement(BaseModel):
    """
    A single product grant (model, app, or data product) taken from a
    provisioning record's payload.

    Attributes:
        product_code: Product code; None disqualifies the item from grouping
        category: "Model", "App" or "Data"
        start_date: Start of validity, None when absent or unparseable
        end_date: End of validity, None when absent or unparseable
        quantity: Granted quantity (1 when absent)
        package_name: Package the product belongs to
        product_modifier: Upstream product modifier
        name: Display name (falls back to the product code)
        index: 0-based position within the record's list for this category
        source_record_id: Provisioning record this came from
        source_record_name: Provisioning record name (e.g. "PS-4330")
    """

    product_code: str | None = None
    category: Category
    start_date: date | None = None
    end_date: date | None = None
    quantity: int = 1
    package_name: str | None = None
    product_modifier: str | None = None
    name: str | None = None
    index: int = Field(0, ge=0)
    source_record_id: str | None = None
    source_record_name: str | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "product_code": "RI-RISKMODELER",
                "category": "App",
                "start_date": "2024-01-01",
                "end_date": "2025-12-31",
                "quantity": 1,
                "package_name": "RMS Cloud Standard",
                "index": 0,
                "source_record_id": "a0X5e000001AbCd",
                "source_record_name": "PS-4330"
            }
        }

    @property
    def category_key(self) -> str:
        return CATEGORY_KEYS[self.category]

    @property
    def display_name(self) -> str:
        return self.name or self.product_code or f"{self.category}-{self.index + 1}"

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None
