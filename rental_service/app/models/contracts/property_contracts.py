from datetime import timedelta
from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from rental_service.app.models.contracts.contract_base import ContractMixin, register_contract_events
from rental_service.app.models.payments.supply_payments import SupplyPayment
from shared.core.database import Base
from shared.helpers.period_helper import month_year


class PropertyContract(ContractMixin, Base):
    """Management agreement between an owner and a property."""
    __tablename__ = "property_contracts"

    entity_field = "property_id"
    rate_field = "commission_rate"
    payment_model = SupplyPayment
    payment_fk = "property_contract_id"

    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    commission_rate = Column(Numeric(5, 2), nullable=False)  # percent, 0..100
    payment_day = Column(Integer, nullable=True)

    owner = relationship("Owner", back_populates="contracts")
    property = relationship("Property", back_populates="contracts")
    payments = relationship(
        "SupplyPayment", back_populates="contract",
        cascade="all, delete-orphan", order_by="SupplyPayment.sequence")

    def build_payment(self, sequence, period_start, period_end, frequency, rate, payment_settings):
        # amounts stay at zero until the period is reconciled against collections
        return SupplyPayment(
            payment_number=f"SUP-{self.contract_number}-{sequence:03d}",
            property_contract_id=self.id,
            owner_id=self.owner_id,
            property_id=self.property_id,
            sequence=sequence,
            gross_amount=Decimal("0"),
            commission_rate=Decimal(str(rate)),
            commission_amount=Decimal("0"),
            maintenance_deduction=Decimal("0"),
            other_deductions=Decimal("0"),
            net_amount=Decimal("0"),
            due_date_start=period_start,
            due_date_end=period_end,
            due_date=period_end + timedelta(days=payment_settings.supply_payment_due_days),
            month_year=month_year(period_start),
        )


register_contract_events(PropertyContract, lambda today: f"PC-{today:%Y}-")
