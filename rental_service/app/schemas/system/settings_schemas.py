from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from shared.core.config import settings


class PaymentSettings(BaseModel):
    """Business settings handed to the schedule engine on every call."""
    payment_due_days: int = Field(default=settings.PAYMENT_DUE_DAYS, ge=0)
    late_fee_daily_rate: Decimal = Field(
        default=Decimal(str(settings.LATE_FEE_DAILY_RATE)), ge=0)
    supply_payment_due_days: int = Field(default=settings.SUPPLY_PAYMENT_DUE_DAYS, ge=0)
    test_date: Optional[date] = None

    model_config = {"frozen": True}


class PaymentSettingsUpdate(BaseModel):
    payment_due_days: Optional[int] = Field(default=None, ge=0)
    late_fee_daily_rate: Optional[Decimal] = Field(default=None, ge=0)
    supply_payment_due_days: Optional[int] = Field(default=None, ge=0)
    test_date: Optional[date] = None
