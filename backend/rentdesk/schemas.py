# backend/rentdesk/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict, field_validator

from .domain.approval_states import ApprovalStatus, REQUESTABLE_STATES


# -------------------- Requests --------------------

class ApplicationStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _requestable(cls, v: str) -> str:
        s = str(v or "").strip().upper()
        allowed = sorted(x.value for x in REQUESTABLE_STATES)
        if s not in allowed:
            raise ValueError(f"status must be one of {allowed}")
        return s


# -------------------- Responses --------------------

class PropertyOut(BaseModel):
    id: int
    title: str
    landlord_id: int
    agent_id: Optional[int] = None
    price: float
    deposit: Optional[float] = None
    status: str
    model_config = ConfigDict(from_attributes=True)


class TenantPublicOut(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    model_config = ConfigDict(from_attributes=True)


class ApplicationOut(BaseModel):
    id: int
    tenant_id: int
    property_id: int
    status: ApprovalStatus
    applied_date: datetime
    reviewed_date: Optional[datetime] = None
    monthly_income: Optional[float] = None
    credit_score: Optional[int] = None
    deposit_amount: Optional[float] = None

    property: PropertyOut
    tenant: TenantPublicOut
    model_config = ConfigDict(from_attributes=True)


class ApprovalResultOut(BaseModel):
    application: ApplicationOut
    previous_status: ApprovalStatus
    lease_id: Optional[int] = None
    payment_id: Optional[str] = None
    payment_url: Optional[str] = None


class ApplicationEnvelope(BaseModel):
    application: ApplicationOut


class ErrorOut(BaseModel):
    error: str
    message: str
    details: Optional[dict[str, Any]] = None
