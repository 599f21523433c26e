from datetime import date
from decimal import Decimal

import pytest

from rental_service.app.core.errors import (
    ContractStateError,
    DurationDivisionError,
    OverlapError,
    RescheduleConflictError,
    StaleStateError,
)
from rental_service.app.crud.contracts import reschedule_service
from rental_service.app.crud.payments.payment_schedule_service import generate, obligations_query
from rental_service.app.models.payments.collection_payments import CollectionPayment
from rental_service.app.models.payments.supply_payments import SupplyPayment


def _rows(db, contract, model=CollectionPayment):
    return obligations_query(db, contract).order_by(model.sequence).all()


def _settle_first(db, contract, count, model=CollectionPayment):
    rows = _rows(db, contract, model)
    for row in rows[:count]:
        row.settlement_date = row.due_date_start
    db.commit()
    return {row.id: row.due_date_start for row in rows[:count]}


@pytest.fixture
def lease(db, make_unit_contract, payment_settings):
    contract = make_unit_contract(start=date(2025, 1, 1), months=12)
    generate(db, contract, payment_settings)
    return contract


class TestReschedule:
    def test_three_paid_six_more_quarterly(self, db, lease, payment_settings):
        settled = _settle_first(db, lease, 3)

        result = reschedule_service.reschedule(
            db, lease, Decimal("1200"), 6, "quarterly", payment_settings)

        assert result.deleted_count == 9
        assert result.created_count == 2
        assert result.paid_months == 3
        assert result.new_duration_months == 9
        assert result.new_start_date == date(2025, 4, 1)
        assert result.new_end_date == date(2025, 9, 30)

        rows = _rows(db, lease)
        assert len(rows) == 5
        for row in rows[:3]:
            assert settled[row.id] == row.collection_date
        assert [(r.sequence, r.due_date_start, r.due_date_end, r.amount) for r in rows[3:]] == [
            (4, date(2025, 4, 1), date(2025, 6, 30), Decimal("3600")),
            (5, date(2025, 7, 1), date(2025, 9, 30), Decimal("3600")),
        ]

        db.refresh(lease)
        assert lease.duration_months == 9
        assert lease.end_date == date(2025, 9, 30)
        assert lease.payment_frequency == "quarterly"
        assert lease.monthly_rent == Decimal("1200")

    def test_without_settlements_restarts_at_contract_start(self, db, lease, payment_settings):
        result = reschedule_service.reschedule(
            db, lease, Decimal("1000"), 6, "semi_annually", payment_settings)

        assert result.paid_months == 0
        assert result.deleted_count == 12
        rows = _rows(db, lease)
        assert [(r.due_date_start, r.due_date_end) for r in rows] == [
            (date(2025, 1, 1), date(2025, 6, 30))]

    def test_indivisible_months_abort_before_deleting(self, db, lease, payment_settings):
        _settle_first(db, lease, 2)
        with pytest.raises(DurationDivisionError):
            reschedule_service.reschedule(db, lease, Decimal("1000"), 7, "quarterly", payment_settings)
        assert len(_rows(db, lease)) == 12

    def test_conflict_with_following_contract(self, db, lease, make_unit_contract, payment_settings):
        make_unit_contract(start=date(2026, 1, 1), months=12, status="draft")

        with pytest.raises(RescheduleConflictError) as exc_info:
            reschedule_service.reschedule(db, lease, Decimal("1000"), 15, "monthly", payment_settings)

        assert isinstance(exc_info.value, OverlapError)
        assert exc_info.value.start_date == date(2026, 1, 1)
        assert len(_rows(db, lease)) == 12
        db.refresh(lease)
        assert lease.duration_months == 12

    def test_closed_contract_cannot_be_rescheduled(self, db, lease, payment_settings):
        lease.status = "terminated"
        db.commit()
        assert not reschedule_service.can_reschedule(db, lease)
        with pytest.raises(ContractStateError):
            reschedule_service.reschedule(db, lease, Decimal("1000"), 6, "monthly", payment_settings)

    def test_settlement_during_reschedule_is_retried(self, db, lease, payment_settings, monkeypatch):
        _settle_first(db, lease, 3)
        real_delete = reschedule_service._delete_unsettled
        calls = []

        def settle_then_delete(session, contract, payment_ids):
            if not calls:
                # a collection lands between the read and the delete
                racing = session.get(CollectionPayment, payment_ids[0])
                racing.collection_date = date(2025, 4, 2)
                session.flush()
            calls.append(len(payment_ids))
            return real_delete(session, contract, payment_ids)

        monkeypatch.setattr(reschedule_service, "_delete_unsettled", settle_then_delete)
        result = reschedule_service.reschedule(
            db, lease, Decimal("1000"), 6, "quarterly", payment_settings)

        assert calls == [9, 0]
        assert result.deleted_count == 8
        assert result.paid_months == 4
        assert result.new_start_date == date(2025, 5, 1)
        rows = _rows(db, lease)
        assert sum(1 for r in rows if r.collection_date) == 4
        assert len(rows) == 6

    def test_persistent_mismatch_raises_stale_state(self, db, lease, payment_settings, monkeypatch):
        _settle_first(db, lease, 3)
        monkeypatch.setattr(reschedule_service, "_delete_unsettled",
                            lambda session, contract, payment_ids: 0)

        with pytest.raises(StaleStateError):
            reschedule_service.reschedule(db, lease, Decimal("1000"), 6, "monthly", payment_settings)

        assert len(_rows(db, lease)) == 12
        db.refresh(lease)
        assert lease.payment_frequency == "monthly"

    def test_property_contract_reschedule(self, db, make_property_contract, payment_settings):
        contract = make_property_contract(months=12, commission=Decimal("10"))
        generate(db, contract, payment_settings)
        _settle_first(db, contract, 1, SupplyPayment)

        result = reschedule_service.reschedule(
            db, contract, Decimal("8"), 6, "semi_annually", payment_settings)

        assert result.created_count == 1
        rows = _rows(db, contract, SupplyPayment)
        assert rows[-1].commission_rate == Decimal("8")
        assert rows[-1].due_date_start == date(2025, 2, 1)
        assert rows[-1].due_date_end == date(2025, 7, 31)
        db.refresh(contract)
        assert contract.commission_rate == Decimal("8")
        assert contract.duration_months == 7


class TestRenew:
    def test_appends_after_current_end(self, db, lease, payment_settings):
        _settle_first(db, lease, 2)
        before = {r.id for r in _rows(db, lease)}

        result = reschedule_service.renew(db, lease, Decimal("1100"), 12, "quarterly", payment_settings)

        assert result.deleted_count == 0
        assert result.created_count == 4
        assert result.new_start_date == date(2026, 1, 1)
        assert result.new_end_date == date(2026, 12, 31)
        assert result.new_duration_months == 24

        rows = _rows(db, lease)
        assert before <= {r.id for r in rows}
        assert [r.sequence for r in rows[12:]] == [13, 14, 15, 16]
        assert rows[12].amount == Decimal("3300")
        db.refresh(lease)
        assert lease.end_date == date(2026, 12, 31)
        assert lease.status == "active"

    def test_only_active_contracts_renew(self, db, make_unit_contract, payment_settings):
        draft = make_unit_contract(status="draft")
        with pytest.raises(ContractStateError):
            reschedule_service.renew(db, draft, Decimal("1000"), 12, "monthly", payment_settings)

    def test_renewal_window_conflict(self, db, lease, make_unit_contract, payment_settings):
        make_unit_contract(start=date(2026, 3, 1), months=6)
        with pytest.raises(RescheduleConflictError):
            reschedule_service.renew(db, lease, Decimal("1000"), 6, "monthly", payment_settings)
        assert len(_rows(db, lease)) == 12

    def test_renewal_divisibility(self, db, lease, payment_settings):
        with pytest.raises(DurationDivisionError):
            reschedule_service.renew(db, lease, Decimal("1000"), 5, "semi_annually", payment_settings)
