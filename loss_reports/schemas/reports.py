"""Schemas for report operations."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ReportUpdate(BaseModel):
    """Editable report fields.

    Fields are deliberately loose here; emptiness and amount checks happen
    in the service so they produce the domain ``ValidationError``.
    """

    manager: Optional[str] = Field(None, description="Territorial manager")
    restaurant: Optional[str] = Field(None, description="Restaurant, optionally 'code — name'")
    reason: Optional[str] = Field(None, description="Reason for the loss")
    amount: Optional[Union[int, float, str]] = Field(None, description="Loss amount")
    start: Optional[str] = Field(None, description="Start time, DD.MM.YYYY HH:MM")
    end: Optional[str] = Field(None, description="End time, DD.MM.YYYY HH:MM")
    comment: Optional[str] = Field(None, description="Free-text details")


class ReportCreate(ReportUpdate):
    """Request to record a report."""

    request_id: Optional[str] = Field(
        None,
        description="Idempotency key; derived from the fields when omitted",
    )


class ReportResponse(BaseModel):
    """Response for a single report."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Report ID")
    request_identity: str = Field(..., description="Idempotency key the report is stored under")
    manager: str
    restaurant: str
    reason: str
    amount: int = Field(..., description="Loss amount in whole units")
    start: Optional[str] = None
    end: Optional[str] = None
    comment: Optional[str] = None
    created_at: int = Field(..., description="Creation time, epoch milliseconds")


class ReportListResponse(BaseModel):
    """Response for listing reports."""

    reports: list[ReportResponse]
    total: int = Field(..., description="Total number of reports")
