import re
from datetime import date
from decimal import Decimal

import pytest

from rental_service.app.core.errors import ContractStateError, DurationDivisionError, OverlapError
from rental_service.app.crud.contracts import contracts_crud, property_contracts_crud, unit_contracts_crud
from rental_service.app.crud.payments.payment_schedule_service import obligations_query
from rental_service.app.crud.scheduler.contracts_scheduler import expire_contracts
from rental_service.app.models.contracts.unit_contracts import UnitContract
from rental_service.app.models.payments.collection_payments import CollectionPayment
from rental_service.app.schemas.contracts.contracts_schemas import (
    AvailabilityRequest,
    ContractRequest,
    PropertyContractCreate,
    UnitContractCreate,
    UnitContractUpdate,
)


def _lease_payload(tenant, unit, **overrides):
    values = dict(
        tenant_id=tenant.id,
        unit_id=unit.id,
        start_date=date(2025, 1, 1),
        duration_months=12,
        payment_frequency="monthly",
        monthly_rent=Decimal("1000"),
        status="active",
    )
    values.update(overrides)
    return UnitContractCreate(**values)


class TestCreate:
    def test_active_contract_gets_its_schedule(self, db, tenant, unit, payment_settings):
        result = unit_contracts_crud.create_unit_contract(db, _lease_payload(tenant, unit), payment_settings)

        assert result.payments_generated == 12
        assert result.generation_error is None
        assert re.fullmatch(rf"UC-{date.today():%Y%m}-0001", result.contract_number)

        contract = db.get(UnitContract, result.contract_id)
        assert contract.property_id == unit.property_id
        assert contract.end_date == date(2025, 12, 31)

    def test_contract_numbers_increment(self, db, tenant, unit, make_unit, payment_settings):
        first = unit_contracts_crud.create_unit_contract(db, _lease_payload(tenant, unit), payment_settings)
        second = unit_contracts_crud.create_unit_contract(
            db, _lease_payload(tenant, make_unit("A-103")), payment_settings)
        assert first.contract_number.endswith("-0001")
        assert second.contract_number.endswith("-0002")

    def test_draft_waits_for_activation(self, db, tenant, unit, payment_settings):
        result = unit_contracts_crud.create_unit_contract(
            db, _lease_payload(tenant, unit, status="draft"), payment_settings)
        assert result.payments_generated == 0

        contract = db.get(UnitContract, result.contract_id)
        activated = contracts_crud.activate_contract(db, contract, payment_settings)
        assert activated.payments_generated == 12
        assert contract.status == "active"

        with pytest.raises(ContractStateError):
            contracts_crud.activate_contract(db, contract, payment_settings)

    def test_indivisible_duration_is_rejected(self, db, tenant, unit, payment_settings):
        with pytest.raises(DurationDivisionError):
            unit_contracts_crud.create_unit_contract(
                db, _lease_payload(tenant, unit, duration_months=7, payment_frequency="quarterly"),
                payment_settings)
        assert db.query(UnitContract).count() == 0

    def test_overlap_is_rejected(self, db, tenant, unit, payment_settings):
        first = unit_contracts_crud.create_unit_contract(
            db, _lease_payload(tenant, unit, duration_months=6), payment_settings)
        with pytest.raises(OverlapError) as exc_info:
            unit_contracts_crud.create_unit_contract(
                db, _lease_payload(tenant, unit, start_date=date(2025, 6, 15)), payment_settings)
        assert exc_info.value.contract_number == first.contract_number

    def test_property_contract_number_format(self, db, owner, property_, payment_settings):
        payload = PropertyContractCreate(
            owner_id=owner.id, property_id=property_.id, start_date=date(2025, 1, 1),
            duration_months=12, payment_frequency="quarterly", commission_rate=Decimal("5"),
            status="active",
        )
        result = property_contracts_crud.create_property_contract(db, payload, payment_settings)
        assert re.fullmatch(rf"PC-{date.today():%Y}-0001", result.contract_number)
        assert result.payments_generated == 4


class TestUpdate:
    def test_draft_terms_recompute_end_date(self, db, tenant, unit, payment_settings):
        result = unit_contracts_crud.create_unit_contract(
            db, _lease_payload(tenant, unit, status="draft"), payment_settings)
        contract = db.get(UnitContract, result.contract_id)

        unit_contracts_crud.update_unit_contract(
            db, contract, UnitContractUpdate(duration_months=24), payment_settings)
        assert contract.end_date == date(2026, 12, 31)

    def test_terms_are_frozen_once_scheduled(self, db, tenant, unit, payment_settings):
        result = unit_contracts_crud.create_unit_contract(db, _lease_payload(tenant, unit), payment_settings)
        contract = db.get(UnitContract, result.contract_id)

        with pytest.raises(ContractStateError):
            unit_contracts_crud.update_unit_contract(
                db, contract, UnitContractUpdate(duration_months=24), payment_settings)

        unit_contracts_crud.update_unit_contract(
            db, contract, UnitContractUpdate(notes="keys handed over"), payment_settings)
        assert contract.notes == "keys handed over"


class TestLifecycle:
    def test_terminate(self, db, make_unit_contract):
        contract = make_unit_contract()
        contracts_crud.terminate_contract(db, contract, "tenant left", date(2025, 5, 1))
        assert contract.status == "terminated"
        assert contract.terminated_at == date(2025, 5, 1)

        with pytest.raises(ContractStateError):
            contracts_crud.terminate_contract(db, contract)

    def test_manual_generation(self, db, make_unit_contract, payment_settings):
        contract = make_unit_contract(months=6)
        assert contracts_crud.generate_contract_payments(db, contract, payment_settings) == 6
        with pytest.raises(ContractStateError):
            contracts_crud.generate_contract_payments(db, contract, payment_settings)

    def test_payment_summary(self, db, make_unit_contract, payment_settings):
        contract = make_unit_contract()
        contracts_crud.generate_contract_payments(db, contract, payment_settings)
        for row in obligations_query(db, contract).order_by(CollectionPayment.sequence).limit(3).all():
            row.collection_date = row.due_date_start
        db.commit()

        summary = contracts_crud.payment_summary(db, contract)
        assert summary.total_payments == 12
        assert summary.settled_payments == 3
        assert summary.paid_months == 3
        assert summary.remaining_months == 9
        assert summary.can_reschedule and summary.can_renew
        assert not summary.can_generate_payments

    def test_list_filters(self, db, make_unit_contract, make_unit):
        make_unit_contract()
        make_unit_contract(status="draft", on_unit=make_unit("B-1"))

        rows, total = contracts_crud.get_list(db, UnitContract, ContractRequest(status="draft"))
        assert total == 1 and rows[0].status == "draft"

        listing = unit_contracts_crud.get_unit_contracts(db, ContractRequest(search="UC-"))
        assert listing["total"] == 2


class TestAvailability:
    def test_conflict_is_reported(self, db, make_unit_contract, unit):
        existing = make_unit_contract(months=6)
        result = contracts_crud.check_availability(db, UnitContract, AvailabilityRequest(
            entity_id=unit.id, start_date=date(2025, 3, 1), duration_months=6))
        assert not result.available
        assert result.error_code == "300"
        assert result.conflict["conflicting_contract_number"] == existing.contract_number

    def test_free_window(self, db, make_unit_contract, unit):
        make_unit_contract(months=6)
        result = contracts_crud.check_availability(db, UnitContract, AvailabilityRequest(
            entity_id=unit.id, start_date=date(2025, 7, 1), duration_months=6,
            payment_frequency="quarterly"))
        assert result.available
        assert result.end_date == date(2025, 12, 31)
        assert result.payments_count == 2


class TestExpirySweep:
    def test_expires_ended_contracts(self, db, make_unit_contract, make_unit, make_property_contract):
        ended = make_unit_contract(start=date(2025, 1, 1), months=6)
        ending = make_unit_contract(start=date(2025, 2, 1), months=6, on_unit=make_unit("C-1"))
        managed = make_property_contract(start=date(2024, 7, 1), months=12)

        result = expire_contracts(db, today=date(2025, 7, 25))

        assert set(result.expired) == {ended.contract_number, managed.contract_number}
        assert result.expiring_soon == [ending.contract_number]
        db.refresh(ended)
        assert ended.status == "expired"
