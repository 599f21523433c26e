from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rental_service.app.enum.contracts_enum import ContractStatus, PaymentFrequency
from shared.core.schemas import CommonQueryParams


class ContractRequest(CommonQueryParams):
    status: Optional[ContractStatus] = None
    entity_id: Optional[UUID] = None


class ContractBase(BaseModel):
    start_date: Optional[date] = None
    duration_months: Optional[int] = Field(default=None, gt=0)
    payment_frequency: Optional[PaymentFrequency] = None
    notes: Optional[str] = None


# ----------------------------------------------------
# Unit (lease) contracts
# ----------------------------------------------------
class UnitContractCreate(ContractBase):
    tenant_id: UUID
    unit_id: UUID
    start_date: date
    duration_months: int = Field(gt=0)
    payment_frequency: PaymentFrequency = PaymentFrequency.monthly
    monthly_rent: Decimal = Field(ge=0)
    security_deposit: Optional[Decimal] = None
    status: ContractStatus = ContractStatus.draft


class UnitContractUpdate(ContractBase):
    tenant_id: Optional[UUID] = None
    unit_id: Optional[UUID] = None
    monthly_rent: Optional[Decimal] = Field(default=None, ge=0)
    security_deposit: Optional[Decimal] = None
    status: Optional[ContractStatus] = None


class UnitContractOut(BaseModel):
    id: UUID
    contract_number: Optional[str] = None
    tenant_id: UUID
    unit_id: UUID
    property_id: UUID
    start_date: date
    end_date: date
    duration_months: int
    payment_frequency: str
    monthly_rent: float
    security_deposit: Optional[float] = None
    status: str
    notes: Optional[str] = None
    terminated_at: Optional[date] = None
    termination_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ----------------------------------------------------
# Property (management) contracts
# ----------------------------------------------------
class PropertyContractCreate(ContractBase):
    owner_id: UUID
    property_id: UUID
    start_date: date
    duration_months: int = Field(gt=0)
    payment_frequency: PaymentFrequency = PaymentFrequency.monthly
    commission_rate: Decimal = Field(ge=0, le=100)
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    status: ContractStatus = ContractStatus.draft


class PropertyContractUpdate(ContractBase):
    owner_id: Optional[UUID] = None
    property_id: Optional[UUID] = None
    commission_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    status: Optional[ContractStatus] = None


class PropertyContractOut(BaseModel):
    id: UUID
    contract_number: Optional[str] = None
    owner_id: UUID
    property_id: UUID
    start_date: date
    end_date: date
    duration_months: int
    payment_frequency: str
    commission_rate: float
    payment_day: Optional[int] = None
    status: str
    notes: Optional[str] = None
    terminated_at: Optional[date] = None
    termination_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ----------------------------------------------------
# Lifecycle operations
# ----------------------------------------------------
class ContractSaveResult(BaseModel):
    contract_id: UUID
    contract_number: Optional[str] = None
    payments_generated: int = 0
    generation_error: Optional[str] = None


class TerminateRequest(BaseModel):
    reason: Optional[str] = None
    terminated_at: Optional[date] = None


class RescheduleRequest(BaseModel):
    new_rate: Decimal = Field(ge=0)
    additional_months: int = Field(gt=0)
    new_frequency: PaymentFrequency


class RenewRequest(BaseModel):
    new_rate: Decimal = Field(ge=0)
    extension_months: int = Field(gt=0)
    new_frequency: PaymentFrequency


class ScheduleChangeResult(BaseModel):
    contract_id: UUID
    contract_number: Optional[str] = None
    deleted_count: int = 0
    created_count: int = 0
    paid_months: int = 0
    new_duration_months: int
    new_start_date: date
    new_end_date: date


class AvailabilityRequest(BaseModel):
    entity_id: UUID
    start_date: date
    duration_months: int = Field(gt=0)
    payment_frequency: PaymentFrequency = PaymentFrequency.monthly
    exclude_contract_id: Optional[UUID] = None


class AvailabilityResult(BaseModel):
    available: bool
    end_date: Optional[date] = None
    payments_count: Optional[int] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    conflict: Optional[dict] = None


class ContractPaymentSummary(BaseModel):
    contract_id: UUID
    total_payments: int
    settled_payments: int
    unsettled_payments: int
    paid_months: int
    remaining_months: int
    can_generate_payments: bool
    can_reschedule: bool
    can_renew: bool


class ExpirySweepResult(BaseModel):
    expired: List[str] = []
    expiring_soon: List[str] = []
