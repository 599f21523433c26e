from datetime import date
from decimal import Decimal

from rental_service.app.crud.system import settings_crud
from rental_service.app.schemas.system.settings_schemas import PaymentSettingsUpdate
from shared.core.config import settings


class TestPaymentSettings:
    def test_defaults_come_from_process_config(self, db):
        loaded = settings_crud.get_payment_settings(db)
        assert loaded.payment_due_days == settings.PAYMENT_DUE_DAYS
        assert loaded.late_fee_daily_rate == Decimal(str(settings.LATE_FEE_DAILY_RATE))
        assert loaded.test_date is None

    def test_update_and_read_back(self, db):
        settings_crud.update_payment_settings(db, PaymentSettingsUpdate(
            payment_due_days=3, late_fee_daily_rate=Decimal("0.01"), test_date=date(2025, 5, 1)))

        loaded = settings_crud.get_payment_settings(db)
        assert loaded.payment_due_days == 3
        assert loaded.late_fee_daily_rate == Decimal("0.01")
        assert settings_crud.current_date(loaded) == date(2025, 5, 1)

    def test_clearing_test_date(self, db):
        settings_crud.update_payment_settings(db, PaymentSettingsUpdate(test_date=date(2025, 5, 1)))
        settings_crud.update_payment_settings(db, PaymentSettingsUpdate(test_date=None))
        loaded = settings_crud.get_payment_settings(db)
        assert loaded.test_date is None
        assert settings_crud.current_date(loaded) == date.today()
