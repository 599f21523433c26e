import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import Session

from rental_service.app.core.errors import PaymentStateError
from rental_service.app.crud.payments.payment_assignment_service import reconcile_period
from rental_service.app.crud.system.settings_crud import current_date
from rental_service.app.enum.payments_enum import ApprovalStatus
from rental_service.app.models.payments.supply_payments import SupplyPayment
from rental_service.app.schemas.payments.supply_payments_schemas import (
    ApprovalRequest,
    CalculationCheck,
    CalculationValidation,
    ConfirmEligibility,
    ConfirmResult,
    ConfirmSupplyPaymentRequest,
    ReconciliationBucket,
    ReconciliationResult,
    SupplyPaymentOut,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings

logger = logging.getLogger(__name__)


def to_out(payment: SupplyPayment, payment_settings: PaymentSettings) -> SupplyPaymentOut:
    out = SupplyPaymentOut.model_validate(payment)
    out.supply_status = payment.status_on(current_date(payment_settings))
    return out


def get_by_id(db: Session, payment_id) -> Optional[SupplyPayment]:
    return db.query(SupplyPayment).filter(SupplyPayment.id == payment_id).first()


def get_contract_supply_payments(db: Session, contract_id, payment_settings: PaymentSettings):
    rows = (
        db.query(SupplyPayment)
        .filter(SupplyPayment.property_contract_id == contract_id)
        .order_by(SupplyPayment.sequence)
        .all()
    )
    return [to_out(row, payment_settings) for row in rows]


# ----------------------------------------------------
# ✅ Period reconciliation
# ----------------------------------------------------
def calculate_amounts_for_period(db: Session, payment: SupplyPayment,
                                 payment_settings: PaymentSettings,
                                 other_deductions: Optional[Decimal] = None) -> ReconciliationResult:
    if other_deductions is None:
        other_deductions = payment.other_deductions or Decimal("0")
    return reconcile_period(
        db,
        payment.property_id,
        payment.due_date_start,
        payment.due_date_end,
        payment.commission_rate,
        payment_settings,
        other_deductions=other_deductions,
    )


def get_categorized_payments(db: Session, payment: SupplyPayment,
                             payment_settings: PaymentSettings) -> Dict[str, ReconciliationBucket]:
    result = calculate_amounts_for_period(db, payment, payment_settings)
    return {category.value: bucket for category, bucket in result.buckets.items()}


# ----------------------------------------------------
# ✅ Confirmation
# ----------------------------------------------------
def pending_previous_payments(db: Session, payment: SupplyPayment):
    return (
        db.query(SupplyPayment)
        .filter(
            SupplyPayment.property_contract_id == payment.property_contract_id,
            SupplyPayment.sequence < payment.sequence,
            SupplyPayment.paid_date.is_(None),
        )
        .order_by(SupplyPayment.sequence)
        .all()
    )


def can_confirm_payment(db: Session, payment: SupplyPayment,
                        payment_settings: PaymentSettings) -> ConfirmEligibility:
    reasons = []
    if payment.paid_date is not None:
        reasons.append("Payment has already been supplied")
    if current_date(payment_settings) < payment.due_date:
        reasons.append(f"Payment is not due until {payment.due_date.isoformat()}")
    pending = pending_previous_payments(db, payment)
    if pending:
        reasons.append(f"{len(pending)} earlier payment(s) have not been supplied yet")
    return ConfirmEligibility(can_confirm=not reasons, reasons=reasons)


def confirm_supply_payment(db: Session, payment: SupplyPayment, payload: ConfirmSupplyPaymentRequest,
                           payment_settings: PaymentSettings) -> ConfirmResult:
    eligibility = can_confirm_payment(db, payment, payment_settings)
    if not eligibility.can_confirm:
        raise PaymentStateError(
            f"Supply payment {payment.payment_number} cannot be confirmed",
            {
                "reasons": eligibility.reasons,
                "pending_payments": [p.payment_number for p in pending_previous_payments(db, payment)],
            },
        )

    amounts = calculate_amounts_for_period(db, payment, payment_settings, payload.other_deductions)
    try:
        payment.gross_amount = amounts.gross_amount
        payment.commission_amount = amounts.commission_amount
        payment.maintenance_deduction = amounts.maintenance_deduction
        payment.other_deductions = amounts.other_deductions
        payment.paid_date = payload.paid_date or current_date(payment_settings)
        payment.bank_transfer_reference = payload.bank_transfer_reference
        payment.collected_by = payload.collected_by
        if payload.notes:
            payment.notes = payload.notes
        payment.deduction_details = {
            "period_start": amounts.period_start.isoformat(),
            "period_end": amounts.period_end.isoformat(),
            "counted_payments": sum(len(b.payments) for b in amounts.buckets.values() if b.counted),
            "maintenance_deduction": str(amounts.maintenance_deduction),
            "other_deductions": str(amounts.other_deductions),
        }
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)

    net = Decimal(str(payment.net_amount))
    is_settlement = net <= 0
    if net < 0:
        message = f"Recorded a debt of {abs(net):.2f} owed by the owner"
    elif net == 0:
        message = "Settlement confirmed, nothing owed to the owner"
    else:
        message = f"Supplied {net:.2f} to the owner"
    logger.info("Confirmed supply payment %s: gross=%s net=%s",
                payment.payment_number, payment.gross_amount, net)
    return ConfirmResult(payment=to_out(payment, payment_settings),
                         is_settlement=is_settlement, message=message)


def validate_calculations(db: Session, payment: SupplyPayment,
                          payment_settings: PaymentSettings) -> CalculationValidation:
    """Compare the amounts stored at confirmation with a fresh reconciliation."""
    amounts = calculate_amounts_for_period(db, payment, payment_settings)
    checks = []
    for field, recalculated in (
        ("gross_amount", amounts.gross_amount),
        ("commission_amount", amounts.commission_amount),
        ("maintenance_deduction", amounts.maintenance_deduction),
        ("net_amount", amounts.net_amount),
    ):
        stored = Decimal(str(getattr(payment, field) or 0))
        checks.append(CalculationCheck(
            field=field, stored=stored, recalculated=recalculated,
            matches=abs(stored - recalculated) < Decimal("0.01"),
        ))
    return CalculationValidation(valid=all(c.matches for c in checks), checks=checks)


# ----------------------------------------------------
# ✅ Approval
# ----------------------------------------------------
def _set_approval(db: Session, payment: SupplyPayment, status: ApprovalStatus,
                  payload: ApprovalRequest) -> SupplyPayment:
    if payment.approval_status != ApprovalStatus.pending.value:
        raise PaymentStateError(
            f"Supply payment {payment.payment_number} is already {payment.approval_status}",
            {"approval_status": payment.approval_status},
        )
    try:
        payment.approval_status = status.value
        payment.approved_by = payload.approved_by
        payment.approved_at = datetime.now(timezone.utc)
        if payload.notes:
            payment.notes = payload.notes
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)
    return payment


def approve_supply_payment(db: Session, payment: SupplyPayment, payload: ApprovalRequest) -> SupplyPayment:
    return _set_approval(db, payment, ApprovalStatus.approved, payload)


def reject_supply_payment(db: Session, payment: SupplyPayment, payload: ApprovalRequest) -> SupplyPayment:
    return _set_approval(db, payment, ApprovalStatus.rejected, payload)
