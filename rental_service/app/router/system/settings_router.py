from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_rental_db as get_db
from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.system import settings_crud as crud
from ...schemas.system.settings_schemas import PaymentSettingsUpdate

router = APIRouter(
    prefix="/api/settings",
    tags=["settings"],
)


@router.get("/payments", response_model=JsonOutResult)
def get_payment_settings(db: Session = Depends(get_db)):
    return success_response(data=crud.get_payment_settings(db))


@router.put("/payments", response_model=JsonOutResult)
def update_payment_settings(payload: PaymentSettingsUpdate, db: Session = Depends(get_db)):
    return success_response(data=crud.update_payment_settings(db, payload),
                            message="Payment settings updated",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
