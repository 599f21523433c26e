import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from rental_service.app.core.errors import PaymentStateError
from rental_service.app.crud.payments.payment_status import derive_status, status_filter
from rental_service.app.crud.system.settings_crud import current_date
from rental_service.app.enum.payments_enum import PaymentStatus
from rental_service.app.models.payments.collection_payments import CollectionPayment
from rental_service.app.schemas.payments.collection_payments_schemas import (
    BulkCollectItem,
    BulkCollectRequest,
    CollectionPaymentOut,
    CollectionPaymentRequest,
    CollectPaymentRequest,
    LateFeeOut,
    PostponeRequest,
    StatusBucket,
    StatusSummary,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings

logger = logging.getLogger(__name__)


def to_out(payment: CollectionPayment, payment_settings: PaymentSettings, today: date) -> CollectionPaymentOut:
    status = derive_status(payment, today, payment_settings.payment_due_days)
    fee = payment.late_fee(payment_settings, today)
    return CollectionPaymentOut.model_validate({
        **{c.name: getattr(payment, c.name) for c in CollectionPayment.__table__.columns},
        "status": status,
        "status_color": status.color,
        "days_overdue": payment.days_overdue(payment_settings, today),
        "late_fee": fee,
        "total_amount": payment.amount + fee,
    })


def get_by_id(db: Session, payment_id) -> Optional[CollectionPayment]:
    return db.query(CollectionPayment).filter(CollectionPayment.id == payment_id).first()


# ----------------------------------------------------
# ✅ Listing by derived status
# ----------------------------------------------------
def build_filters(params: CollectionPaymentRequest, payment_settings: PaymentSettings, today: date):
    filters = []
    if params.status:
        filters.append(status_filter(params.status, today, payment_settings.payment_due_days))
    if params.contract_id:
        filters.append(CollectionPayment.unit_contract_id == params.contract_id)
    if params.property_id:
        filters.append(CollectionPayment.property_id == params.property_id)
    if params.tenant_id:
        filters.append(CollectionPayment.tenant_id == params.tenant_id)
    if params.search:
        filters.append(CollectionPayment.payment_number.ilike(f"%{params.search}%"))
    return filters


def get_collection_payments(db: Session, params: CollectionPaymentRequest, payment_settings: PaymentSettings):
    today = current_date(payment_settings)
    q = (
        db.query(CollectionPayment)
        .filter(*build_filters(params, payment_settings, today))
        .order_by(CollectionPayment.due_date_start, CollectionPayment.payment_number)
    )
    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()
    return {
        "payments": [to_out(row, payment_settings, today) for row in rows],
        "total": total,
    }


def status_summary(db: Session, payment_settings: PaymentSettings, contract_id=None) -> StatusSummary:
    today = current_date(payment_settings)
    buckets = []
    for status in PaymentStatus:
        q = db.query(func.count(CollectionPayment.id), func.coalesce(func.sum(CollectionPayment.amount), 0))
        q = q.filter(status_filter(status, today, payment_settings.payment_due_days))
        if contract_id:
            q = q.filter(CollectionPayment.unit_contract_id == contract_id)
        count, amount = q.one()
        buckets.append(StatusBucket(status=status, count=count, amount=Decimal(str(amount))))
    return StatusSummary(
        contract_id=contract_id,
        buckets=buckets,
        total_amount=sum((b.amount for b in buckets), Decimal("0")),
    )


# ----------------------------------------------------
# ✅ Late fees
# ----------------------------------------------------
def get_days_overdue(payment: CollectionPayment, payment_settings: PaymentSettings) -> int:
    return payment.days_overdue(payment_settings, current_date(payment_settings))


def calculate_late_fee(payment: CollectionPayment, payment_settings: PaymentSettings) -> LateFeeOut:
    today = current_date(payment_settings)
    fee = payment.late_fee(payment_settings, today)
    return LateFeeOut(
        payment_id=payment.id,
        days_overdue=payment.days_overdue(payment_settings, today),
        daily_rate=float(payment_settings.late_fee_daily_rate),
        late_fee=float(fee),
        total_amount=float(payment.amount + fee),
    )


# ----------------------------------------------------
# ✅ Settlement
# ----------------------------------------------------
def next_receipt_number(db: Session, year: int) -> str:
    prefix = f"REC-{year}-"
    last = (
        db.query(CollectionPayment.receipt_number)
        .filter(CollectionPayment.receipt_number.like(f"{prefix}%"))
        .order_by(CollectionPayment.receipt_number.desc())
        .limit(1)
        .scalar()
    )
    sequence = int(last[-6:]) + 1 if last else 1
    return f"{prefix}{sequence:06d}"


def _apply_collection(db: Session, payment: CollectionPayment, payload: CollectPaymentRequest,
                      payment_settings: PaymentSettings):
    if payment.collection_date:
        raise PaymentStateError(
            f"Payment {payment.payment_number} was already collected on {payment.collection_date}",
            {"payment_id": str(payment.id)},
        )
    collected_on = payload.collection_date or current_date(payment_settings)
    payment.collection_date = collected_on
    payment.payment_reference = payload.payment_reference
    payment.collected_by = payload.collected_by
    if payload.late_payment_notes:
        payment.late_payment_notes = payload.late_payment_notes
    payment.receipt_number = next_receipt_number(db, collected_on.year)
    # flush so the next receipt number in a bulk run sees this one
    db.flush()


def collect_payment(db: Session, payment: CollectionPayment, payload: CollectPaymentRequest,
                    payment_settings: PaymentSettings) -> CollectionPayment:
    try:
        _apply_collection(db, payment, payload, payment_settings)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)
    logger.info("Collected payment %s, receipt %s", payment.payment_number, payment.receipt_number)
    return payment


def bulk_collect(db: Session, payload: BulkCollectRequest,
                 payment_settings: PaymentSettings) -> List[BulkCollectItem]:
    results = []
    for payment_id in payload.payment_ids:
        payment = get_by_id(db, payment_id)
        if not payment:
            results.append(BulkCollectItem(payment_id=payment_id, success=False,
                                           error="Payment not found"))
            continue
        try:
            collect_payment(db, payment, payload, payment_settings)
        except PaymentStateError as e:
            results.append(BulkCollectItem(payment_id=payment_id, success=False, error=e.message))
            continue
        results.append(BulkCollectItem(payment_id=payment_id, success=True,
                                       receipt_number=payment.receipt_number))
    return results


def postpone_payment(db: Session, payment: CollectionPayment, payload: PostponeRequest) -> CollectionPayment:
    if payment.collection_date:
        raise PaymentStateError(
            f"Payment {payment.payment_number} is already collected",
            {"payment_id": str(payment.id)},
        )
    if payment.is_postponed:
        raise PaymentStateError(
            f"Payment {payment.payment_number} is already postponed by {payment.delay_duration} days",
            {"payment_id": str(payment.id)},
        )
    try:
        payment.delay_duration = payload.days
        payment.delay_reason = payload.reason
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)
    logger.info("Postponed payment %s by %d days until %s", payment.payment_number,
                payload.days, payment.due_date_start + timedelta(days=payload.days))
    return payment
