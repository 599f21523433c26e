from sqlalchemy.orm import Session

from rental_service.app.crud.contracts import contracts_crud
from rental_service.app.models.contracts.unit_contracts import UnitContract
from rental_service.app.models.parties.tenants import Tenant
from rental_service.app.models.properties.units import Unit
from rental_service.app.schemas.contracts.contracts_schemas import (
    ContractRequest,
    UnitContractCreate,
    UnitContractOut,
    UnitContractUpdate,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode


def _get_unit(db: Session, unit_id) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id, Unit.is_deleted == False).first()
    if not unit:
        return error_response(message="Unit not found",
                              status_code=AppStatusCode.NOT_FOUND, http_status=404)
    return unit


def _check_tenant(db: Session, tenant_id):
    exists = db.query(Tenant.id).filter(Tenant.id == tenant_id, Tenant.is_deleted == False).first()
    if not exists:
        error_response(message="Tenant not found",
                       status_code=AppStatusCode.NOT_FOUND, http_status=404)


def get_unit_contracts(db: Session, params: ContractRequest):
    rows, total = contracts_crud.get_list(db, UnitContract, params)
    return {
        "contracts": [UnitContractOut.model_validate(row) for row in rows],
        "total": total,
    }


def get_unit_contract(db: Session, contract_id):
    return contracts_crud.get_by_id(db, UnitContract, contract_id)


def create_unit_contract(db: Session, payload: UnitContractCreate, payment_settings: PaymentSettings):
    unit = _get_unit(db, payload.unit_id)
    _check_tenant(db, payload.tenant_id)

    data = payload.model_dump()
    data["payment_frequency"] = payload.payment_frequency.value
    data["status"] = payload.status.value
    data["property_id"] = unit.property_id
    return contracts_crud.create_contract(db, UnitContract, data, payment_settings)


def update_unit_contract(db: Session, contract: UnitContract, payload: UnitContractUpdate,
                         payment_settings: PaymentSettings):
    data = payload.model_dump(exclude_unset=True)
    if "payment_frequency" in data and data["payment_frequency"] is not None:
        data["payment_frequency"] = payload.payment_frequency.value
    if "status" in data and data["status"] is not None:
        data["status"] = payload.status.value
    if data.get("unit_id"):
        data["property_id"] = _get_unit(db, data["unit_id"]).property_id
    if data.get("tenant_id"):
        _check_tenant(db, data["tenant_id"])
    data = {k: v for k, v in data.items() if v is not None or k == "notes"}
    return contracts_crud.update_contract(db, contract, data, payment_settings)
