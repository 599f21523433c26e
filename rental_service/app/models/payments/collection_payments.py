from sqlalchemy import Column, String, Date, Integer, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship, synonym

from rental_service.app.core.late_fees import days_overdue, late_fee
from rental_service.app.models.payments.payment_base import PaymentObligationMixin
from shared.core.database import Base


class CollectionPayment(PaymentObligationMixin, Base):
    """Rent owed by a tenant for one billing period."""
    __tablename__ = "collection_payments"

    unit_contract_id = Column(Uuid, ForeignKey(
        "unit_contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=False, index=True)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)

    amount = Column(Numeric(14, 2), nullable=False)
    collection_date = Column(Date, nullable=True)
    delay_duration = Column(Integer, nullable=True)  # days
    delay_reason = Column(String(255), nullable=True)
    late_payment_notes = Column(String(255), nullable=True)
    payment_reference = Column(String(100), nullable=True)
    receipt_number = Column(String(32), nullable=True, unique=True)
    collected_by = Column(String(100), nullable=True)

    settlement_date = synonym("collection_date")

    contract = relationship("UnitContract", back_populates="payments")
    unit = relationship("Unit")
    tenant = relationship("Tenant")

    @property
    def is_postponed(self) -> bool:
        return not self.collection_date and (self.delay_duration or 0) > 0

    def days_overdue(self, payment_settings, today):
        return days_overdue(self.due_date_start, self.collection_date, today,
                            payment_settings.payment_due_days)

    def late_fee(self, payment_settings, today):
        return late_fee(self.amount, self.days_overdue(payment_settings, today),
                        payment_settings.late_fee_daily_rate)

    def total_amount(self, payment_settings, today):
        return self.amount + self.late_fee(payment_settings, today)
