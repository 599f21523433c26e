from fastapi import Depends
from sqlalchemy.orm import Session

from rental_service.app.crud.system.settings_crud import get_payment_settings
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.core.database import get_rental_db as get_db


def payment_settings_dependency(db: Session = Depends(get_db)) -> PaymentSettings:
    return get_payment_settings(db)
