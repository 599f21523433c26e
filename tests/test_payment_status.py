from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from rental_service.app.crud.payments.payment_schedule_service import generate, obligations_query
from rental_service.app.crud.payments.payment_status import (
    collected_payments,
    derive_status,
    due_for_collection,
    overdue_payments,
    postponed_payments,
    status_filter,
    upcoming_payments,
)
from rental_service.app.enum.payments_enum import PaymentStatus
from rental_service.app.models.payments.collection_payments import CollectionPayment

TODAY = date(2025, 6, 15)


def _payment(due, collected=None, delay=None):
    return SimpleNamespace(due_date_start=due, collection_date=collected, delay_duration=delay)


class TestDeriveStatus:
    """Precedence: collected, postponed, overdue, due, upcoming."""

    def test_collected_beats_everything(self):
        p = _payment(date(2025, 1, 1), collected=date(2025, 6, 1), delay=30)
        assert derive_status(p, TODAY, 7) == PaymentStatus.collected

    def test_postponed_beats_overdue(self):
        assert derive_status(_payment(date(2025, 1, 1), delay=10), TODAY, 7) == PaymentStatus.postponed

    def test_postponement_never_expires(self):
        p = _payment(date(2025, 1, 1), delay=1)
        assert derive_status(p, date(2030, 1, 1), 7) == PaymentStatus.postponed

    def test_zero_delay_is_not_postponed(self):
        assert derive_status(_payment(date(2025, 1, 1), delay=0), TODAY, 7) == PaymentStatus.overdue

    @pytest.mark.parametrize("due,expected", [
        (TODAY - timedelta(days=8), PaymentStatus.overdue),
        (TODAY - timedelta(days=7), PaymentStatus.due),
        (TODAY, PaymentStatus.due),
        (TODAY + timedelta(days=1), PaymentStatus.upcoming),
    ])
    def test_grace_window_edges(self, due, expected):
        assert derive_status(_payment(due), TODAY, 7) == expected

    def test_zero_grace(self):
        assert derive_status(_payment(TODAY - timedelta(days=1)), TODAY, 0) == PaymentStatus.overdue
        assert derive_status(_payment(TODAY), TODAY, 0) == PaymentStatus.due

    def test_status_colors(self):
        assert PaymentStatus.overdue.color == "danger"
        assert PaymentStatus.collected.color == "success"


class TestPredicateEquivalence:
    """Filtering by a status predicate selects exactly the rows derived as that status."""

    @pytest.fixture
    def payments(self, db, make_unit_contract, payment_settings):
        contract = make_unit_contract(start=date(2025, 1, 1), months=24)
        generate(db, contract, payment_settings)
        rows = obligations_query(db, contract).order_by(CollectionPayment.sequence).all()
        # mix of settled, postponed and zero-delay rows across the timeline
        rows[0].collection_date = date(2025, 1, 3)
        rows[1].collection_date = date(2025, 3, 20)
        rows[2].delay_duration = 15
        rows[3].delay_duration = 0
        rows[5].collection_date = date(2025, 5, 30)
        rows[5].delay_duration = 10
        rows[8].delay_duration = 30
        rows[20].collection_date = date(2025, 6, 1)
        db.commit()
        return obligations_query(db, contract).all()

    @pytest.mark.parametrize("today", [
        date(2024, 12, 1), date(2025, 1, 1), date(2025, 1, 8), date(2025, 1, 9),
        date(2025, 6, 15), date(2025, 7, 7), date(2025, 7, 8), date(2027, 3, 1),
    ])
    @pytest.mark.parametrize("grace", [0, 7, 30])
    def test_predicates_match_derivation(self, db, payments, today, grace):
        seen = set()
        for status in PaymentStatus:
            selected = {
                row.id for row in db.query(CollectionPayment)
                .filter(status_filter(status, today, grace)).all()
            }
            derived = {p.id for p in payments if derive_status(p, today, grace) == status}
            assert selected == derived, status
            assert not (selected & seen)
            seen |= selected
        assert seen == {p.id for p in payments}

    def test_named_predicates(self, db, payments):
        def ids(clause):
            return {r.id for r in db.query(CollectionPayment).filter(clause).all()}

        assert ids(collected_payments()) == ids(status_filter("collected", TODAY, 7))
        assert ids(postponed_payments()) == ids(status_filter("postponed", TODAY, 7))
        assert ids(overdue_payments(TODAY, 7)) == ids(status_filter("overdue", TODAY, 7))
        assert ids(due_for_collection(TODAY, 7)) == ids(status_filter("due", TODAY, 7))
        assert ids(upcoming_payments(TODAY)) == ids(status_filter("upcoming", TODAY, 7))
        assert len(ids(collected_payments())) == 4
        assert len(ids(postponed_payments())) == 2


class TestLateFee:
    @pytest.fixture
    def payment(self):
        return CollectionPayment(amount=Decimal("1000"), due_date_start=date(2025, 3, 1))

    def test_no_fee_inside_grace(self, payment, payment_settings):
        assert payment.days_overdue(payment_settings, date(2025, 3, 8)) == 0
        assert payment.late_fee(payment_settings, date(2025, 3, 8)) == Decimal("0.00")

    def test_fee_accrues_after_grace(self, payment, payment_settings):
        assert payment.days_overdue(payment_settings, date(2025, 3, 11)) == 3
        assert payment.late_fee(payment_settings, date(2025, 3, 11)) == Decimal("150.00")
        assert payment.total_amount(payment_settings, date(2025, 3, 11)) == Decimal("1150.00")

    def test_fee_freezes_at_settlement(self, payment, payment_settings):
        payment.collection_date = date(2025, 3, 10)
        assert payment.late_fee(payment_settings, date(2025, 12, 31)) == Decimal("100.00")

    def test_fee_rounds_to_cents(self, payment_settings):
        payment = CollectionPayment(amount=Decimal("333.33"), due_date_start=date(2025, 3, 1))
        settings = payment_settings.model_copy(update={"late_fee_daily_rate": Decimal("0.001")})
        assert payment.late_fee(settings, date(2025, 3, 9)) == Decimal("0.33")
