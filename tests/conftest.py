import os

# the app module creates its tables on import; keep that off disk
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rental_service.app.models import (
    Owner,
    Property,
    PropertyContract,
    Tenant,
    Unit,
    UnitContract,
)
from rental_service.app.schemas.system.settings_schemas import PaymentSettings
from shared.core.database import Base


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)()
    yield session
    session.close()


@pytest.fixture
def payment_settings():
    return PaymentSettings(
        payment_due_days=7,
        late_fee_daily_rate=Decimal("0.05"),
        supply_payment_due_days=5,
    )


@pytest.fixture
def settings_on(payment_settings):
    """Factory for payment settings evaluated as of a fixed day."""
    def _on(day: date, **overrides) -> PaymentSettings:
        return payment_settings.model_copy(update={"test_date": day, **overrides})
    return _on


# ----------------------------------------------------
# Parties and places
# ----------------------------------------------------
@pytest.fixture
def owner(db):
    owner = Owner(name="Sara Owner", phone="0500000001")
    db.add(owner)
    db.commit()
    return owner


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Omar Tenant", phone="0500000002")
    db.add(tenant)
    db.commit()
    return tenant


@pytest.fixture
def property_(db, owner):
    prop = Property(owner_id=owner.id, name="Palm Residence", address="12 King Road")
    db.add(prop)
    db.commit()
    return prop


@pytest.fixture
def unit(db, property_):
    unit = Unit(property_id=property_.id, name="A-101", rent_price=Decimal("1000"))
    db.add(unit)
    db.commit()
    return unit


@pytest.fixture
def make_unit(db, property_):
    def _make(name, prop=None):
        unit = Unit(property_id=(prop or property_).id, name=name)
        db.add(unit)
        db.commit()
        return unit
    return _make


# ----------------------------------------------------
# Contracts
# ----------------------------------------------------
@pytest.fixture
def make_unit_contract(db, tenant, unit):
    def _make(start=date(2025, 1, 1), months=12, frequency="monthly",
              rent=Decimal("1000"), status="active", on_unit=None):
        target = on_unit or unit
        contract = UnitContract(
            tenant_id=tenant.id,
            unit_id=target.id,
            property_id=target.property_id,
            start_date=start,
            duration_months=months,
            payment_frequency=frequency,
            monthly_rent=rent,
            status=status,
        )
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract
    return _make


@pytest.fixture
def make_property_contract(db, owner, property_):
    def _make(start=date(2025, 1, 1), months=12, frequency="monthly",
              commission=Decimal("10"), status="active"):
        contract = PropertyContract(
            owner_id=owner.id,
            property_id=property_.id,
            start_date=start,
            duration_months=months,
            payment_frequency=frequency,
            commission_rate=commission,
            status=status,
        )
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract
    return _make


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from rental_service.app.main import app
    from shared.core.database import get_rental_db

    app.dependency_overrides[get_rental_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
