from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shared.core.database import get_rental_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...core.dependencies import payment_settings_dependency
from ...crud.payments import collection_payments_crud as crud
from ...crud.system.settings_crud import current_date
from ...schemas.payments.collection_payments_schemas import (
    BulkCollectRequest,
    CollectionPaymentRequest,
    CollectPaymentRequest,
    PostponeRequest,
)
from ...schemas.system.settings_schemas import PaymentSettings

router = APIRouter(
    prefix="/api/collection-payments",
    tags=["collection-payments"],
)


def _get_or_404(db: Session, payment_id: UUID):
    payment = crud.get_by_id(db, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Collection payment not found")
    return payment


@router.get("/all", response_model=JsonOutResult)
def get_collection_payments(
    params: CollectionPaymentRequest = Depends(),
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(data=crud.get_collection_payments(db, params, payment_settings))


@router.get("/status-summary", response_model=JsonOutResult)
def get_status_summary(
    contract_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(data=crud.status_summary(db, payment_settings, contract_id))


@router.post("/bulk-collect", response_model=JsonOutResult)
def bulk_collect(
    payload: BulkCollectRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    results = crud.bulk_collect(db, payload, payment_settings)
    collected = sum(1 for r in results if r.success)
    return success_response(data=results,
                            message=f"Collected {collected} of {len(results)} payments",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.get("/{payment_id}", response_model=JsonOutResult)
def get_collection_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    payment = _get_or_404(db, payment_id)
    return success_response(data=crud.to_out(payment, payment_settings, current_date(payment_settings)))


@router.get("/{payment_id}/late-fee", response_model=JsonOutResult)
def get_late_fee(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(data=crud.calculate_late_fee(_get_or_404(db, payment_id), payment_settings))


@router.post("/{payment_id}/collect", response_model=JsonOutResult)
def collect_payment(
    payment_id: UUID,
    payload: CollectPaymentRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    payment = crud.collect_payment(db, _get_or_404(db, payment_id), payload, payment_settings)
    return success_response(data=crud.to_out(payment, payment_settings, current_date(payment_settings)),
                            message="Payment collected",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/{payment_id}/postpone", response_model=JsonOutResult)
def postpone_payment(
    payment_id: UUID,
    payload: PostponeRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    payment = crud.postpone_payment(db, _get_or_404(db, payment_id), payload)
    return success_response(data=crud.to_out(payment, payment_settings, current_date(payment_settings)),
                            message="Payment postponed",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)
