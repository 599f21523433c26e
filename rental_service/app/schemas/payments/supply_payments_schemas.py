from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rental_service.app.enum.payments_enum import ReconciliationCategory, SupplyStatus


class SupplyPaymentOut(BaseModel):
    id: UUID
    payment_number: str
    property_contract_id: UUID
    owner_id: UUID
    property_id: UUID
    sequence: int
    due_date_start: date
    due_date_end: date
    due_date: date
    paid_date: Optional[date] = None
    gross_amount: float
    commission_rate: float
    commission_amount: float
    maintenance_deduction: float
    other_deductions: float
    net_amount: float
    approval_status: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    bank_transfer_reference: Optional[str] = None
    month_year: Optional[str] = None
    supply_status: Optional[SupplyStatus] = None

    model_config = {"from_attributes": True}


# ----------------------------------------------------
# Reconciliation
# ----------------------------------------------------
class ReconciliationItem(BaseModel):
    payment_id: UUID
    payment_number: str
    unit_id: UUID
    due_date_start: date
    due_date_end: date
    settlement_date: Optional[date] = None
    amount: Decimal
    late_fee: Decimal
    total_amount: Decimal


class ReconciliationBucket(BaseModel):
    category: ReconciliationCategory
    counted: bool
    payments: List[ReconciliationItem] = []
    subtotal: Decimal = Decimal("0")


class ReconciliationResult(BaseModel):
    property_id: UUID
    period_start: date
    period_end: date
    buckets: Dict[ReconciliationCategory, ReconciliationBucket]
    gross_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    maintenance_deduction: Decimal
    other_deductions: Decimal
    net_amount: Decimal


# ----------------------------------------------------
# Payout operations
# ----------------------------------------------------
class ConfirmSupplyPaymentRequest(BaseModel):
    paid_date: Optional[date] = None
    bank_transfer_reference: Optional[str] = None
    collected_by: Optional[str] = None
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class ConfirmEligibility(BaseModel):
    can_confirm: bool
    reasons: List[str] = []


class ApprovalRequest(BaseModel):
    approved_by: Optional[str] = None
    notes: Optional[str] = None


class CalculationCheck(BaseModel):
    field: str
    stored: Decimal
    recalculated: Decimal
    matches: bool


class CalculationValidation(BaseModel):
    valid: bool
    checks: List[CalculationCheck]


class ConfirmResult(BaseModel):
    payment: SupplyPaymentOut
    is_settlement: bool
    message: str
