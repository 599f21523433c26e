from datetime import date
from decimal import Decimal

from sqlalchemy import Column, String, Date, DateTime, Numeric, ForeignKey, Uuid, JSON, event
from sqlalchemy.orm import relationship, synonym

from rental_service.app.enum.payments_enum import ApprovalStatus, SupplyStatus
from rental_service.app.models.payments.payment_base import PaymentObligationMixin
from shared.core.database import Base


class SupplyPayment(PaymentObligationMixin, Base):
    """Net proceeds owed to an owner for one management period."""
    __tablename__ = "supply_payments"

    property_contract_id = Column(Uuid, ForeignKey(
        "property_contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)

    gross_amount = Column(Numeric(14, 2), nullable=False, default=0)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=0)
    commission_amount = Column(Numeric(14, 2), nullable=False, default=0)
    maintenance_deduction = Column(Numeric(14, 2), nullable=False, default=0)
    other_deductions = Column(Numeric(14, 2), nullable=False, default=0)
    net_amount = Column(Numeric(14, 2), nullable=False, default=0)

    due_date = Column(Date, nullable=False)
    paid_date = Column(Date, nullable=True)
    collected_by = Column(String(100), nullable=True)
    approval_status = Column(String(16), nullable=False,
                             default=ApprovalStatus.pending.value)
    approved_by = Column(String(100), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    bank_transfer_reference = Column(String(100), nullable=True)
    deduction_details = Column(JSON, nullable=True)

    settlement_date = synonym("paid_date")

    contract = relationship("PropertyContract", back_populates="payments")
    owner = relationship("Owner")

    def status_on(self, today: date) -> SupplyStatus:
        if self.paid_date:
            return SupplyStatus.collected
        if self.due_date <= today:
            return SupplyStatus.worth_collecting
        return SupplyStatus.pending


def compute_net_amount(payment: SupplyPayment) -> Decimal:
    return (
        Decimal(str(payment.gross_amount or 0))
        - Decimal(str(payment.commission_amount or 0))
        - Decimal(str(payment.maintenance_deduction or 0))
        - Decimal(str(payment.other_deductions or 0))
    )


@event.listens_for(SupplyPayment, "before_insert")
@event.listens_for(SupplyPayment, "before_update")
def refresh_net_amount(mapper, connection, target):
    target.net_amount = compute_net_amount(target)
