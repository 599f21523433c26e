from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shared.core.database import get_rental_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...core.dependencies import payment_settings_dependency
from ...crud.payments import supply_payments_crud as crud
from ...schemas.payments.supply_payments_schemas import ApprovalRequest, ConfirmSupplyPaymentRequest
from ...schemas.system.settings_schemas import PaymentSettings

router = APIRouter(
    prefix="/api/supply-payments",
    tags=["supply-payments"],
)


def _get_or_404(db: Session, payment_id: UUID):
    payment = crud.get_by_id(db, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Supply payment not found")
    return payment


@router.get("/contract/{contract_id}", response_model=JsonOutResult)
def get_contract_supply_payments(
    contract_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(data=crud.get_contract_supply_payments(db, contract_id, payment_settings))


@router.get("/{payment_id}", response_model=JsonOutResult)
def get_supply_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(data=crud.to_out(_get_or_404(db, payment_id), payment_settings))


@router.get("/{payment_id}/reconciliation", response_model=JsonOutResult)
def get_reconciliation(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(
        data=crud.calculate_amounts_for_period(db, _get_or_404(db, payment_id), payment_settings))


@router.get("/{payment_id}/categorized", response_model=JsonOutResult)
def get_categorized_payments(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(
        data=crud.get_categorized_payments(db, _get_or_404(db, payment_id), payment_settings))


@router.get("/{payment_id}/can-confirm", response_model=JsonOutResult)
def can_confirm(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(
        data=crud.can_confirm_payment(db, _get_or_404(db, payment_id), payment_settings))


@router.post("/{payment_id}/confirm", response_model=JsonOutResult)
def confirm_supply_payment(
    payment_id: UUID,
    payload: ConfirmSupplyPaymentRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    result = crud.confirm_supply_payment(db, _get_or_404(db, payment_id), payload, payment_settings)
    return success_response(data=result, message=result.message,
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.get("/{payment_id}/validate", response_model=JsonOutResult)
def validate_calculations(
    payment_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    return success_response(
        data=crud.validate_calculations(db, _get_or_404(db, payment_id), payment_settings))


@router.post("/{payment_id}/approve", response_model=JsonOutResult)
def approve_supply_payment(
    payment_id: UUID,
    payload: ApprovalRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    payment = crud.approve_supply_payment(db, _get_or_404(db, payment_id), payload)
    return success_response(data=crud.to_out(payment, payment_settings), message="Supply payment approved",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/{payment_id}/reject", response_model=JsonOutResult)
def reject_supply_payment(
    payment_id: UUID,
    payload: ApprovalRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    payment = crud.reject_supply_payment(db, _get_or_404(db, payment_id), payload)
    return success_response(data=crud.to_out(payment, payment_settings), message="Supply payment rejected",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)
