import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from rental_service.app.crud.payments.payment_schedule_service import (
    build_schedule,
    can_generate_payments,
    generate,
    generate_payments_if_needed,
    obligations_query,
)
from rental_service.app.enum.contracts_enum import PaymentFrequency
from rental_service.app.models.contracts.unit_contracts import UnitContract
from rental_service.app.models.payments.collection_payments import CollectionPayment
from rental_service.app.models.payments.supply_payments import SupplyPayment
from shared.helpers.period_helper import contract_end_date


def _transient_contract(start, months, frequency):
    return UnitContract(
        contract_number="UC-TEST-0001",
        start_date=start,
        duration_months=months,
        end_date=contract_end_date(start, months),
        payment_frequency=frequency,
        monthly_rent=Decimal("1000"),
        status="active",
    )


class TestBuildSchedule:
    """Schedules are built in memory; nothing here touches the database."""

    @pytest.mark.parametrize("frequency", list(PaymentFrequency))
    @pytest.mark.parametrize("start", [date(2025, 1, 1), date(2025, 1, 31), date(2024, 2, 29)])
    def test_count_contiguity_and_last_end(self, frequency, start, payment_settings):
        for months in (12, 24, 36):
            contract = _transient_contract(start, months, frequency.value)
            payments = build_schedule(contract, start, months, frequency, contract.rate,
                                      payment_settings, window_end=contract.end_date)

            assert len(payments) == months // frequency.months
            assert payments[0].due_date_start == start
            for prev, nxt in zip(payments, payments[1:]):
                assert nxt.due_date_start == prev.due_date_end + timedelta(days=1)
            assert payments[-1].due_date_end == contract.end_date
            assert [p.sequence for p in payments] == list(range(1, len(payments) + 1))

    def test_twelve_month_lease_periods(self, payment_settings):
        contract = _transient_contract(date(2025, 1, 1), 12, "monthly")
        payments = build_schedule(contract, contract.start_date, 12, "monthly",
                                  contract.rate, payment_settings)

        assert [(p.due_date_start, p.due_date_end) for p in payments][:2] == [
            (date(2025, 1, 1), date(2025, 1, 31)),
            (date(2025, 2, 1), date(2025, 2, 28)),
        ]
        assert (payments[-1].due_date_start, payments[-1].due_date_end) == (
            date(2025, 12, 1), date(2025, 12, 31))
        assert all(p.amount == Decimal("1000") for p in payments)
        assert payments[0].payment_number == "PAY-UC-TEST-0001-0001"
        assert payments[0].month_year == "2025-01"

    def test_quarterly_amount_covers_three_months(self, payment_settings):
        contract = _transient_contract(date(2025, 1, 1), 12, "quarterly")
        payments = build_schedule(contract, contract.start_date, 12, "quarterly",
                                  contract.rate, payment_settings)
        assert len(payments) == 4
        assert {p.amount for p in payments} == {Decimal("3000")}

    def test_first_sequence_offsets_numbers(self, payment_settings):
        contract = _transient_contract(date(2025, 1, 1), 12, "monthly")
        payments = build_schedule(contract, date(2025, 7, 1), 6, "monthly",
                                  contract.rate, payment_settings, first_sequence=7)
        assert [p.sequence for p in payments] == [7, 8, 9, 10, 11, 12]


class TestGenerate:
    def test_generate_persists_collection_payments(self, db, make_unit_contract, payment_settings):
        contract = make_unit_contract(months=12)
        generate(db, contract, payment_settings)

        rows = obligations_query(db, contract).order_by(CollectionPayment.sequence).all()
        assert len(rows) == 12
        assert rows[0].unit_id == contract.unit_id
        assert rows[0].tenant_id == contract.tenant_id
        assert rows[-1].due_date_end == contract.end_date
        assert all(r.collection_date is None for r in rows)

    def test_supply_payments_wait_for_reconciliation(self, db, make_property_contract, payment_settings):
        contract = make_property_contract(months=6, frequency="quarterly", commission=Decimal("7.5"))
        generate(db, contract, payment_settings)

        rows = obligations_query(db, contract).order_by(SupplyPayment.sequence).all()
        assert len(rows) == 2
        first = rows[0]
        assert first.gross_amount == 0 and first.net_amount == 0
        assert first.commission_rate == Decimal("7.5")
        assert first.due_date_end == date(2025, 3, 31)
        assert first.due_date == date(2025, 4, 5)
        assert first.payment_number == f"SUP-{contract.contract_number}-001"
        assert first.approval_status == "pending"

    def test_can_generate_only_active_without_payments(self, db, make_unit_contract, payment_settings):
        draft = make_unit_contract(status="draft")
        assert not can_generate_payments(db, draft)

        draft.status = "active"
        db.commit()
        assert can_generate_payments(db, draft)

        generate(db, draft, payment_settings)
        assert not can_generate_payments(db, draft)

    def test_hook_is_a_noop_when_payments_exist(self, db, make_unit_contract, payment_settings):
        contract = make_unit_contract()
        assert generate_payments_if_needed(db, contract, payment_settings) == (12, None)
        assert generate_payments_if_needed(db, contract, payment_settings) == (0, None)
        assert obligations_query(db, contract).count() == 12

    def test_hook_failure_is_reported_not_raised(self, db, make_unit_contract, payment_settings, caplog):
        # stored directly, bypassing the pre-save divisibility check
        contract = make_unit_contract(months=7, frequency="quarterly")

        with caplog.at_level(logging.WARNING):
            generated, error = generate_payments_if_needed(db, contract, payment_settings)

        assert generated == 0
        assert "not divisible" in error
        assert "Failed to auto-generate payments" in caplog.text
        assert db.get(UnitContract, contract.id) is not None
        assert obligations_query(db, contract).count() == 0
