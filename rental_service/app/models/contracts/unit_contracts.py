from decimal import Decimal

from sqlalchemy import Column, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from rental_service.app.models.contracts.contract_base import ContractMixin, register_contract_events
from rental_service.app.models.payments.collection_payments import CollectionPayment
from shared.core.database import Base
from shared.helpers.period_helper import month_year, months_per_period


class UnitContract(ContractMixin, Base):
    """Lease between a tenant and a unit."""
    __tablename__ = "unit_contracts"

    entity_field = "unit_id"
    rate_field = "monthly_rent"
    payment_model = CollectionPayment
    payment_fk = "unit_contract_id"

    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=False)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    monthly_rent = Column(Numeric(14, 2), nullable=False)
    security_deposit = Column(Numeric(14, 2), nullable=True)

    tenant = relationship("Tenant", back_populates="contracts")
    unit = relationship("Unit", back_populates="contracts")
    property = relationship("Property")
    payments = relationship(
        "CollectionPayment", back_populates="contract",
        cascade="all, delete-orphan", order_by="CollectionPayment.sequence")

    def build_payment(self, sequence, period_start, period_end, frequency, rate, payment_settings):
        amount = Decimal(str(rate)) * months_per_period(frequency)
        return CollectionPayment(
            payment_number=f"PAY-{self.contract_number}-{sequence:04d}",
            unit_contract_id=self.id,
            unit_id=self.unit_id,
            property_id=self.property_id,
            tenant_id=self.tenant_id,
            sequence=sequence,
            amount=amount,
            due_date_start=period_start,
            due_date_end=period_end,
            month_year=month_year(period_start),
        )


register_contract_events(UnitContract, lambda today: f"UC-{today:%Y%m}-")
