from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shared.core.database import get_rental_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...core.dependencies import payment_settings_dependency
from ...crud.contracts import contracts_crud, reschedule_service
from ...crud.contracts import unit_contracts_crud as crud
from ...crud.scheduler import contracts_scheduler
from ...models.contracts.unit_contracts import UnitContract
from ...schemas.contracts.contracts_schemas import (
    AvailabilityRequest,
    ContractRequest,
    RenewRequest,
    RescheduleRequest,
    TerminateRequest,
    UnitContractCreate,
    UnitContractOut,
    UnitContractUpdate,
)
from ...schemas.system.settings_schemas import PaymentSettings

router = APIRouter(
    prefix="/api/unit-contracts",
    tags=["unit-contracts"],
)


def _get_or_404(db: Session, contract_id: UUID) -> UnitContract:
    contract = crud.get_unit_contract(db, contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Unit contract not found")
    return contract


@router.get("/all", response_model=JsonOutResult)
def get_unit_contracts(
    params: ContractRequest = Depends(),
    db: Session = Depends(get_db),
):
    return success_response(data=crud.get_unit_contracts(db, params))


@router.post("/check-availability", response_model=JsonOutResult)
def check_availability(payload: AvailabilityRequest, db: Session = Depends(get_db)):
    return success_response(data=contracts_crud.check_availability(db, UnitContract, payload))


@router.post("/expire-sweep", response_model=JsonOutResult)
def expire_contracts(db: Session = Depends(get_db)):
    return success_response(
        data=contracts_scheduler.expire_contracts(db),
        message="Expired contracts updated",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
    )


@router.get("/{contract_id}", response_model=JsonOutResult)
def get_unit_contract(contract_id: UUID, db: Session = Depends(get_db)):
    return success_response(data=UnitContractOut.model_validate(_get_or_404(db, contract_id)))


@router.post("/", response_model=JsonOutResult)
def create_unit_contract(
    payload: UnitContractCreate,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    result = crud.create_unit_contract(db, payload, payment_settings)
    return success_response(data=result, message="Unit contract created successfully",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{contract_id}", response_model=JsonOutResult)
def update_unit_contract(
    contract_id: UUID,
    payload: UnitContractUpdate,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    contract = _get_or_404(db, contract_id)
    result = crud.update_unit_contract(db, contract, payload, payment_settings)
    return success_response(data=result, message="Unit contract updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.post("/{contract_id}/activate", response_model=JsonOutResult)
def activate_unit_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    result = contracts_crud.activate_contract(db, _get_or_404(db, contract_id), payment_settings)
    return success_response(data=result, message="Unit contract activated",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/{contract_id}/terminate", response_model=JsonOutResult)
def terminate_unit_contract(
    contract_id: UUID,
    payload: TerminateRequest,
    db: Session = Depends(get_db),
):
    contract = contracts_crud.terminate_contract(
        db, _get_or_404(db, contract_id), payload.reason, payload.terminated_at)
    return success_response(data=UnitContractOut.model_validate(contract),
                            message="Unit contract terminated",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/{contract_id}/generate-payments", response_model=JsonOutResult)
def generate_unit_contract_payments(
    contract_id: UUID,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    count = contracts_crud.generate_contract_payments(db, _get_or_404(db, contract_id), payment_settings)
    return success_response(data={"payments_generated": count},
                            message=f"Generated {count} payments",
                            status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.post("/{contract_id}/reschedule", response_model=JsonOutResult)
def reschedule_unit_contract(
    contract_id: UUID,
    payload: RescheduleRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    result = reschedule_service.reschedule(
        db, _get_or_404(db, contract_id), payload.new_rate,
        payload.additional_months, payload.new_frequency, payment_settings)
    return success_response(data=result, message="Payments rescheduled",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.post("/{contract_id}/renew", response_model=JsonOutResult)
def renew_unit_contract(
    contract_id: UUID,
    payload: RenewRequest,
    db: Session = Depends(get_db),
    payment_settings: PaymentSettings = Depends(payment_settings_dependency),
):
    result = reschedule_service.renew(
        db, _get_or_404(db, contract_id), payload.new_rate,
        payload.extension_months, payload.new_frequency, payment_settings)
    return success_response(data=result, message="Contract renewed",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.get("/{contract_id}/payment-summary", response_model=JsonOutResult)
def unit_contract_payment_summary(contract_id: UUID, db: Session = Depends(get_db)):
    return success_response(data=contracts_crud.payment_summary(db, _get_or_404(db, contract_id)))
