"""Columns and flush hooks shared by unit and property contracts."""
import uuid
from datetime import date

from sqlalchemy import Column, String, Date, Integer, DateTime, Text, Uuid, event, inspect, select
from sqlalchemy.sql import func

from rental_service.app.core.errors import OverlapError
from rental_service.app.crud.contracts.duration_validator import (
    ensure_date_order,
    find_overlapping,
)
from rental_service.app.enum.contracts_enum import (
    BLOCKING_CONTRACT_STATUSES,
    ContractStatus,
    PaymentFrequency,
)
from shared.helpers.period_helper import contract_end_date, months_per_period


class ContractMixin:
    # column holding the leased entity ("unit_id" / "property_id")
    entity_field = None
    # column holding the monthly rent or the commission percentage
    rate_field = None
    payment_model = None
    payment_fk = None

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_number = Column(String(32), unique=True, nullable=True)
    start_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=False)
    payment_frequency = Column(String(16), nullable=False,
                               default=PaymentFrequency.monthly.value)
    end_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default=ContractStatus.draft.value)
    notes = Column(Text, nullable=True)
    terminated_at = Column(Date, nullable=True)
    termination_reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def entity_id(self):
        return getattr(self, self.entity_field)

    @property
    def months_per_payment(self) -> int:
        return months_per_period(self.payment_frequency)

    @property
    def rate(self):
        return getattr(self, self.rate_field)

    @rate.setter
    def rate(self, value):
        setattr(self, self.rate_field, value)

    def build_payment(self, sequence: int, period_start: date, period_end: date,
                      frequency: str, rate, payment_settings):
        """Unsaved obligation row for one billing period of this contract."""
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.contract_number} {self.start_date}..{self.end_date} {self.status}>"


def next_contract_number(connection, table, prefix: str) -> str:
    last = connection.scalar(
        select(table.c.contract_number)
        .where(table.c.contract_number.like(f"{prefix}%"))
        .order_by(table.c.contract_number.desc())
        .limit(1)
    )
    sequence = int(last[-4:]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


def _sync_end_date(target):
    if target.start_date is None or target.duration_months is None:
        return
    target.end_date = contract_end_date(target.start_date, target.duration_months)
    ensure_date_order(target.start_date, target.end_date)


def _recheck_overlap(connection, target):
    if target.status not in BLOCKING_CONTRACT_STATUSES:
        return
    conflict = find_overlapping(
        connection, type(target), target.entity_id,
        target.start_date, target.end_date, exclude_contract_id=target.id)
    if conflict:
        raise OverlapError(conflict.contract_number, conflict.start_date,
                           conflict.end_date, contract_id=conflict.id)


def register_contract_events(model, number_prefix):
    """Attach flush listeners; ``number_prefix`` maps today's date to a number prefix."""

    @event.listens_for(model, "before_insert")
    def before_contract_insert(mapper, connection, target):
        _sync_end_date(target)
        if not target.contract_number:
            target.contract_number = next_contract_number(
                connection, mapper.local_table, number_prefix(date.today()))
        _recheck_overlap(connection, target)

    @event.listens_for(model, "before_update")
    def before_contract_update(mapper, connection, target):
        state = inspect(target)
        watched = ("start_date", "duration_months", "status", model.entity_field)
        if not any(state.attrs[name].history.has_changes() for name in watched):
            return
        _sync_end_date(target)
        _recheck_overlap(connection, target)
