"""
NormalizedPayload model: the canonical shape of a record's entitlement payload.
"""

from pydantic import BaseModel, Field, computed_field

from .entitlement import Entitlement


class NormalizedPayload(BaseModel):
    """
    Entitlements of one payload split by category, plus payload-level fields.

    A missing or malformed payload normalizes to three empty lists; in the
    malformed case ``parse_error`` carries the parser message.
    """

    models: list[Entitlement] = Field(default_factory=list)
    apps: list[Entitlement] = Field(default_factory=list)
    data: list[Entitlement] = Field(default_factory=list)
    region: str | None = None
    tenant_name: str | None = None
    parse_error: str | None = None

    @computed_field
    @property
    def total_count(self) -> int:
        return len(self.models) + len(self.apps) + len(self.data)

    @computed_field
    @property
    def has_details(self) -> bool:
        return self.total_count > 0

    @property
    def all_entitlements(self) -> list[Entitlement]:
        """Models, then apps, then data, flattened."""
        return [*self.models, *self.apps, *self.data]

    def by_category(self) -> dict[str, list[Entitlement]]:
        return {"models": self.models, "apps": self.apps, "data": self.data}

    @computed_field
    @property
    def summary(self) -> str:
        """Human readable one-liner, e.g. "Models: M1, M2, 3 Data, 1 App"."""
        if self.parse_error is not None:
            return "Invalid JSON data"

        parts = []
        if self.models:
            codes = [m.product_code for m in self.models if m.product_code]
            if codes:
                parts.append(f"Models: {', '.join(codes)}")
            else:
                parts.append(f"{len(self.models)} Model{'s' if len(self.models) != 1 else ''}")
        if self.data:
            parts.append(f"{len(self.data)} Data")
        if self.apps:
            parts.append(f"{len(self.apps)} App{'s' if len(self.apps) != 1 else ''}")

        return ", ".join(parts) if parts else "No entitlements"
