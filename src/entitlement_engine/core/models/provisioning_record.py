"""
ProvisioningRecord model representing one historical transaction for an account.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from entitlement_engine.utils.dates import parse_timestamp


class ProvisioningRecord(BaseModel):
    """
    A provisioning request pulled from the system of record (immutable input).

    The engine never mutates a record. Field aliases match the system of
    record's column names so raw rows can be passed straight to
    ``ProvisioningRecord.model_validate``.

    Attributes:
        id: Record id
        name: Record name (e.g. "PS-4330")
        account_id: Owning account
        request_type: "Onboarding", "Update", "Deprovision", ...
        status: Workflow status of the request
        created_at: Creation time; a datetime, an ISO string, or anything else
                    (unparseable values are treated as "no creation date")
        raw_payload: Entitlement payload; a dict, a JSON string, or None
    """

    id: str = Field(..., alias="Id")
    name: str = Field("Unknown", alias="Name")
    account_id: str | None = Field(None, alias="Account__c")
    request_type: str | None = Field(None, alias="TenantRequestAction__c")
    status: str | None = Field(None, alias="Status__c")
    created_at: Any = Field(None, alias="CreatedDate")
    raw_payload: Any = Field(None, alias="Payload_Data__c")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def created_timestamp(self) -> datetime | None:
        """Creation time as an aware datetime, or None when unparseable."""
        return parse_timestamp(self.created_at)
