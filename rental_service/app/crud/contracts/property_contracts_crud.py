from sqlalchemy.orm import Session

from rental_service.app.crud.contracts import contracts_crud
from rental_service.app.models.contracts.property_contracts import PropertyContract
from rental_service.app.models.parties.owners import Owner
from rental_service.app.models.properties.properties import Property
from rental_service.app.schemas.contracts.contracts_schemas import (
    ContractRequest,
    PropertyContractCreate,
    PropertyContractOut,
    PropertyContractUpdate,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode


def _check_property(db: Session, property_id):
    exists = (
        db.query(Property.id)
        .filter(Property.id == property_id, Property.is_deleted == False)
        .first()
    )
    if not exists:
        error_response(message="Property not found",
                       status_code=AppStatusCode.NOT_FOUND, http_status=404)


def _check_owner(db: Session, owner_id):
    exists = db.query(Owner.id).filter(Owner.id == owner_id, Owner.is_deleted == False).first()
    if not exists:
        error_response(message="Owner not found",
                       status_code=AppStatusCode.NOT_FOUND, http_status=404)


def get_property_contracts(db: Session, params: ContractRequest):
    rows, total = contracts_crud.get_list(db, PropertyContract, params)
    return {
        "contracts": [PropertyContractOut.model_validate(row) for row in rows],
        "total": total,
    }


def get_property_contract(db: Session, contract_id):
    return contracts_crud.get_by_id(db, PropertyContract, contract_id)


def create_property_contract(db: Session, payload: PropertyContractCreate,
                             payment_settings: PaymentSettings):
    _check_property(db, payload.property_id)
    _check_owner(db, payload.owner_id)

    data = payload.model_dump()
    data["payment_frequency"] = payload.payment_frequency.value
    data["status"] = payload.status.value
    return contracts_crud.create_contract(db, PropertyContract, data, payment_settings)


def update_property_contract(db: Session, contract: PropertyContract,
                             payload: PropertyContractUpdate, payment_settings: PaymentSettings):
    data = payload.model_dump(exclude_unset=True)
    if data.get("payment_frequency") is not None:
        data["payment_frequency"] = payload.payment_frequency.value
    if data.get("status") is not None:
        data["status"] = payload.status.value
    if data.get("property_id"):
        _check_property(db, data["property_id"])
    if data.get("owner_id"):
        _check_owner(db, data["owner_id"])
    data = {k: v for k, v in data.items() if v is not None or k == "notes"}
    return contracts_crud.update_contract(db, contract, data, payment_settings)
