from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from assetforge.models.database import get_engine, get_session_factory, init_db
from assetforge.models.orm import Asset, AssetTemplate, Base


@pytest.fixture(scope="session")
def engine():
    eng = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    sess = Session(bind=connection)
    yield sess
    sess.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def vehicle_template(session):
    """Active vehicle template with a 90-day maintenance interval."""
    template = AssetTemplate(
        name="Fleet Van",
        asset_type="Vehicle",
        default_manufacturer="Ford",
        default_cost=Decimal("42000.00"),
        maintenance_interval_days=90,
        is_active=True,
        configuration_notes="Standard van fit-out",
    )
    session.add(template)
    session.flush()
    return template


@pytest.fixture
def switch_template(session):
    template = AssetTemplate(
        name="Core Switch",
        asset_type="Switch",
        default_manufacturer="Cisco",
        default_cost=Decimal("18500.00"),
        maintenance_interval_days=180,
        is_active=True,
    )
    session.add(template)
    session.flush()
    return template


@pytest.fixture
def inactive_template(session):
    template = AssetTemplate(
        name="Legacy Terminal",
        asset_type="Terminal",
        default_manufacturer="IBM",
        default_cost=Decimal("1500.00"),
        maintenance_interval_days=365,
        is_active=False,
    )
    session.add(template)
    session.flush()
    return template


@pytest.fixture
def live_asset(session, vehicle_template):
    """A Live, Active vehicle last serviced on 2024-01-01."""
    asset = Asset(
        name="HQ-VEHICLE-0001",
        site="HQ",
        asset_type="Vehicle",
        manufacturer="Ford",
        status="Active",
        criticality="High",
        condition="Good",
        version_status="Live",
        version_label="1.0",
        purchase_cost=Decimal("42000.00"),
        current_value=Decimal("30000.00"),
        gl_account="1500-100",
        maintenance_interval_days=90,
        last_maintenance_date=date(2024, 1, 1),
        template_id=vehicle_template.id,
    )
    session.add(asset)
    session.flush()
    return asset


FLEET_ROWS = [
    {
        "name": "HQ-VEHICLE-0001",
        "site": "HQ",
        "status": "Active",
        "criticality": "Critical",
        "condition": "Good",
        "version_status": "Live",
        "purchase_cost": Decimal("40000"),
        "current_value": Decimal("30000"),
        "next_maintenance_due": date(2024, 5, 1),
        "maintenance_status": "Overdue",
    },
    {
        "name": "HQ-VEHICLE-0002",
        "site": "HQ",
        "status": "Active",
        "criticality": "High",
        "condition": "Excellent",
        "version_status": "Live",
        "purchase_cost": Decimal("40000"),
        "current_value": Decimal("35000"),
        "next_maintenance_due": date(2024, 6, 10),
        "maintenance_status": "Due Soon",
    },
    {
        "name": "HQ-SWITCH-0001",
        "site": "HQ",
        "status": "Active",
        "criticality": "Low",
        "condition": "Fair",
        "version_status": "Live",
        "purchase_cost": Decimal("18000"),
        "current_value": None,
        "next_maintenance_due": date(2024, 9, 1),
        "maintenance_status": "Current",
    },
    {
        "name": "PLANT-A-HVAC-0001",
        "site": "PLANT-A",
        "status": "Inactive",
        "criticality": "Medium",
        "condition": "Poor",
        "version_status": "Live",
        "purchase_cost": Decimal("65000"),
        "current_value": Decimal("20000"),
    },
    {
        "name": "PLANT-A-HVAC-0001",
        "site": "PLANT-A",
        "status": "Active",
        "criticality": "Medium",
        "condition": "Good",
        "version_status": "Planned",
        "version_label": "2.0",
        "purchase_cost": Decimal("70000"),
        "current_value": Decimal("70000"),
    },
    {
        "name": "DEPOT-FORKLIFT-0001",
        "site": None,
        "status": "Retired",
        "criticality": "Critical",
        "condition": "Critical",
        "version_status": "Superseded",
        "purchase_cost": Decimal("35000"),
        "current_value": Decimal("5000"),
    },
]


@pytest.fixture
def fleet(session):
    """Six assets across two sites plus one unassigned, as of 2024-06-01."""
    assets = [Asset(**{"version_label": "1.0", **row}) for row in FLEET_ROWS]
    session.add_all(assets)
    session.flush()
    return assets


@pytest.fixture
def file_engine(tmp_path):
    """File-backed engine for code that opens its own sessions across threads."""
    eng = get_engine(f"sqlite:///{tmp_path / 'assetforge.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_factory(file_engine):
    return get_session_factory(file_engine)


@pytest.fixture
def seeded_factory(file_factory):
    """Session factory over a committed copy of the fleet."""
    with file_factory() as sess:
        sess.add_all([Asset(**{"version_label": "1.0", **row}) for row in FLEET_ROWS])
        sess.commit()
    return file_factory
