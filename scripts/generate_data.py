"""Demo data generator for assetforge.

Creates a set of asset templates, generates batches of assets at three sites
through the bulk generation engine, then fills in condition, criticality and
maintenance history and plans a few new versions.
"""

import random
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Ensure src is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from sqlalchemy.orm import Session

from assetforge.generation.bulk_generator import BulkAssetGenerator
from assetforge.lifecycle.versioning import VersionTransitionService
from assetforge.maintenance.derivation import record_maintenance
from assetforge.models.database import get_engine, init_db
from assetforge.models.enums import AssetStatus, Condition, Criticality
from assetforge.models.orm import Asset, AssetTemplate, Base

SEED = 42
random.seed(SEED)

SITES = ["HQ", "PLANT-A", "DEPOT-N"]

# (name, asset_type, manufacturer, cost, interval_days, per_site)
TEMPLATE_DEFAULTS = [
    ("Fleet Van", "Vehicle", "Ford", 42_000, 90, 12),
    ("Core Switch", "Switch", "Cisco", 18_500, 180, 4),
    ("Edge Router", "Router", "Juniper", 9_800, 180, 3),
    ("Rooftop HVAC", "HVAC", "Carrier", 65_000, 120, 2),
    ("Backup Generator", "Generator", "Caterpillar", 120_000, 365, 1),
    ("Forklift", "Forklift", "Toyota", 35_000, 60, 6),
]

CONDITION_WEIGHTS = [
    (Condition.EXCELLENT, 25),
    (Condition.GOOD, 40),
    (Condition.FAIR, 20),
    (Condition.POOR, 10),
    (Condition.CRITICAL, 5),
]

CRITICALITY_WEIGHTS = [
    (Criticality.LOW, 30),
    (Criticality.MEDIUM, 40),
    (Criticality.HIGH, 20),
    (Criticality.CRITICAL, 10),
]


def _weighted(choices):
    values, weights = zip(*choices)
    return random.choices(values, weights=weights, k=1)[0]


def generate_templates(session: Session) -> list[AssetTemplate]:
    templates = []
    for name, asset_type, manufacturer, cost, interval, _ in TEMPLATE_DEFAULTS:
        templates.append(
            AssetTemplate(
                name=name,
                asset_type=asset_type,
                default_manufacturer=manufacturer,
                default_cost=Decimal(str(cost)),
                maintenance_interval_days=interval,
                is_active=True,
                configuration_notes=f"Standard {asset_type.lower()} configuration",
            )
        )
    # A retired template kept for history.
    templates.append(
        AssetTemplate(
            name="Legacy Terminal",
            asset_type="Terminal",
            default_manufacturer="IBM",
            default_cost=Decimal("1500"),
            maintenance_interval_days=365,
            is_active=False,
        )
    )
    session.add_all(templates)
    session.flush()
    return templates


def generate_assets(session: Session, templates: list[AssetTemplate]) -> list[int]:
    generator = BulkAssetGenerator(session)
    asset_ids: list[int] = []
    for template, row in zip(templates, TEMPLATE_DEFAULTS):
        per_site = row[5]
        for site in SITES:
            result = generator.generate(template.id, per_site, site, 1)
            asset_ids.extend(result.asset_ids)
    return asset_ids


def enrich_assets(session: Session, asset_ids: list[int]) -> None:
    today = date.today()
    for asset_id in asset_ids:
        asset = session.get(Asset, asset_id)
        asset.condition = _weighted(CONDITION_WEIGHTS).value
        asset.criticality = _weighted(CRITICALITY_WEIGHTS).value
        if asset.purchase_cost is not None:
            depreciation = Decimal(str(round(random.uniform(0.35, 0.95), 2)))
            asset.current_value = (asset.purchase_cost * depreciation).quantize(
                Decimal("0.01")
            )
        asset.warranty_expiration = today + timedelta(days=random.randint(-400, 900))
        asset.gl_account = f"1500-{random.randint(100, 999)}"

        status = AssetStatus.ACTIVE.value
        roll = random.random()
        if roll < 0.05:
            status = AssetStatus.RETIRED.value
        elif roll < 0.12:
            status = AssetStatus.INACTIVE.value

        interval = asset.maintenance_interval_days or 90
        last_done = today - timedelta(days=random.randint(0, int(interval * 1.4)))
        record_maintenance(
            session,
            asset.id,
            last_maintenance_date=last_done,
            status=status,
        )


def plan_versions(session: Session, asset_ids: list[int]) -> int:
    service = VersionTransitionService(session)
    planned = 0
    for asset_id in random.sample(asset_ids, k=min(8, len(asset_ids))):
        result = service.create_planned_version(
            asset_id,
            "2.0",
            version_notes="Hardware refresh",
            go_live_date=date.today() + timedelta(days=random.randint(14, 120)),
        )
        planned += 1
        # Activate half of them straight away.
        if planned % 2 == 0:
            service.activate_planned_version(result.asset_id)
    return planned


def main() -> None:
    """Run the full demo data pipeline."""
    print("Initializing database...")
    Path("data").mkdir(exist_ok=True)
    engine = get_engine()
    Base.metadata.drop_all(engine)
    init_db(engine)

    from sqlalchemy.orm import sessionmaker

    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()

    try:
        print("Creating templates...")
        templates = generate_templates(session)
        print(f"  Created {len(templates)} templates")

        print("Generating assets...")
        asset_ids = generate_assets(session, templates)
        print(f"  Created {len(asset_ids)} assets")

        print("Recording condition and maintenance history...")
        enrich_assets(session, asset_ids)

        print("Planning new versions...")
        planned = plan_versions(session, asset_ids)
        print(f"  Planned {planned} versions")

        session.commit()
        print("\nData generation complete!")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
