from datetime import date

from sqlalchemy.orm import Session

from rental_service.app.models.system.settings import Setting
from rental_service.app.schemas.system.settings_schemas import PaymentSettings, PaymentSettingsUpdate
from shared.helpers.period_helper import get_current_date

PAYMENT_SETTING_KEYS = tuple(PaymentSettings.model_fields)


def get_payment_settings(db: Session) -> PaymentSettings:
    rows = {
        row.key: row.value
        for row in db.query(Setting).filter(Setting.key.in_(PAYMENT_SETTING_KEYS)).all()
        if row.value not in (None, "")
    }
    # unset keys fall back to the process defaults declared on the schema
    return PaymentSettings(**rows)


def update_payment_settings(db: Session, payload: PaymentSettingsUpdate) -> PaymentSettings:
    try:
        for key, value in payload.model_dump(exclude_unset=True).items():
            text = value.isoformat() if isinstance(value, date) else (
                None if value is None else str(value))
            row = db.query(Setting).filter(Setting.key == key).first()
            if row:
                row.value = text
            else:
                db.add(Setting(key=key, value=text))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_payment_settings(db)


def current_date(payment_settings: PaymentSettings) -> date:
    return get_current_date(payment_settings.test_date)
