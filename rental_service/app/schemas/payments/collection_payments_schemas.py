from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rental_service.app.enum.payments_enum import PaymentStatus
from shared.core.schemas import CommonQueryParams


class CollectionPaymentRequest(CommonQueryParams):
    status: Optional[PaymentStatus] = None
    contract_id: Optional[UUID] = None
    property_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None


class CollectionPaymentOut(BaseModel):
    id: UUID
    payment_number: str
    unit_contract_id: UUID
    unit_id: UUID
    property_id: UUID
    tenant_id: UUID
    sequence: int
    amount: float
    due_date_start: date
    due_date_end: date
    collection_date: Optional[date] = None
    delay_duration: Optional[int] = None
    delay_reason: Optional[str] = None
    payment_reference: Optional[str] = None
    receipt_number: Optional[str] = None
    month_year: Optional[str] = None
    status: PaymentStatus
    status_color: str
    days_overdue: int = 0
    late_fee: float = 0
    total_amount: float

    model_config = {"from_attributes": True}


class CollectPaymentRequest(BaseModel):
    collection_date: Optional[date] = None
    payment_reference: Optional[str] = None
    collected_by: Optional[str] = None
    late_payment_notes: Optional[str] = None


class BulkCollectRequest(CollectPaymentRequest):
    payment_ids: List[UUID] = Field(min_length=1)


class BulkCollectItem(BaseModel):
    payment_id: UUID
    success: bool
    receipt_number: Optional[str] = None
    error: Optional[str] = None


class PostponeRequest(BaseModel):
    days: int = Field(gt=0)
    reason: str


class LateFeeOut(BaseModel):
    payment_id: UUID
    days_overdue: int
    daily_rate: float
    late_fee: float
    total_amount: float


class StatusBucket(BaseModel):
    status: PaymentStatus
    count: int = 0
    amount: Decimal = Decimal("0")


class StatusSummary(BaseModel):
    contract_id: Optional[UUID] = None
    buckets: List[StatusBucket]
    total_amount: Decimal
