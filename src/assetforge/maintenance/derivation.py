"""Derivation of next-due dates and maintenance status.

The derivation is a pure function of an asset's maintenance inputs and the
current date. Callers that mutate assets invoke :func:`sync_maintenance_status`
explicitly with the state captured before the edit; nothing here reacts to its
own writes.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from assetforge.config.settings import get_settings
from assetforge.errors import NotFoundError, ValidationError
from assetforge.models.enums import AssetStatus, MaintenanceStatus, VersionStatus
from assetforge.models.orm import Asset
from assetforge.models.schemas import MaintenanceFields, MaintenanceInputs

logger = logging.getLogger(__name__)


def compute_next_due(
    last_maintenance_date: date | None, interval_days: int | None
) -> date | None:
    """Last maintenance date plus the interval; None if either is absent."""
    if last_maintenance_date is None or interval_days is None:
        return None
    return last_maintenance_date + timedelta(days=interval_days)


def classify_maintenance(
    next_due: date | None, today: date, is_active: bool, window_days: int
) -> str | None:
    """Categorise a due date as Overdue, Due Soon or Current."""
    if next_due is None or not is_active:
        return None
    if next_due < today:
        return MaintenanceStatus.OVERDUE.value
    if next_due <= today + timedelta(days=window_days):
        return MaintenanceStatus.DUE_SOON.value
    return MaintenanceStatus.CURRENT.value


def snapshot_inputs(asset: Asset) -> MaintenanceInputs:
    return MaintenanceInputs(
        maintenance_interval_days=asset.maintenance_interval_days,
        last_maintenance_date=asset.last_maintenance_date,
        status=asset.status,
        version_status=asset.version_status,
    )


def derive_maintenance(
    inputs: MaintenanceInputs, today: date, window_days: int
) -> MaintenanceFields:
    next_due = compute_next_due(
        inputs.last_maintenance_date, inputs.maintenance_interval_days
    )
    # Planned and Superseded versions are not evaluated.
    evaluated = (
        inputs.status == AssetStatus.ACTIVE.value
        and inputs.version_status == VersionStatus.LIVE.value
    )
    return MaintenanceFields(
        next_maintenance_due=next_due,
        maintenance_status=classify_maintenance(
            next_due, today, evaluated, window_days
        ),
    )


def recompute_derived_fields(
    records: Iterable[Asset],
    prior_states: Mapping[int, MaintenanceInputs] | None = None,
    today: date | None = None,
    window_days: int | None = None,
) -> dict[int, MaintenanceFields]:
    """Return new derived fields for records that need a write.

    A record qualifies when it has no prior state (new record) or one of its
    maintenance inputs differs from the prior state. Qualifying records whose
    stored derived fields already match are skipped, so recomputing unchanged
    inputs never produces a write.
    """
    prior_states = prior_states or {}
    today = today or date.today()
    if window_days is None:
        window_days = get_settings().due_soon_window_days

    updates: dict[int, MaintenanceFields] = {}
    for record in records:
        current = snapshot_inputs(record)
        prior = prior_states.get(record.id)
        if prior is not None and prior == current:
            continue
        derived = derive_maintenance(current, today, window_days)
        stored = MaintenanceFields(
            next_maintenance_due=record.next_maintenance_due,
            maintenance_status=record.maintenance_status,
        )
        if derived != stored:
            updates[record.id] = derived
    return updates


def apply_derived_fields(
    records: Iterable[Asset], updates: Mapping[int, MaintenanceFields]
) -> int:
    """Write derived fields only; user-entered fields are left untouched."""
    applied = 0
    for record in records:
        fields = updates.get(record.id)
        if fields is None:
            continue
        record.next_maintenance_due = fields.next_maintenance_due
        record.maintenance_status = fields.maintenance_status
        applied += 1
    return applied


def sync_maintenance_status(
    records: Iterable[Asset],
    prior_states: Mapping[int, MaintenanceInputs] | None = None,
    today: date | None = None,
    window_days: int | None = None,
) -> dict[int, MaintenanceFields]:
    """Recompute and apply derived fields for a set of mutated records."""
    records = list(records)
    updates = recompute_derived_fields(records, prior_states, today, window_days)
    apply_derived_fields(records, updates)
    return updates


def refresh_all_maintenance(
    session: Session, today: date | None = None, window_days: int | None = None
) -> int:
    """Re-derive every asset's status as of ``today``.

    Statuses move from Current to Due Soon to Overdue as time passes without
    any record changing, so this sweep runs periodically.
    """
    assets = list(session.scalars(select(Asset).order_by(Asset.id)).all())
    updates = sync_maintenance_status(assets, None, today, window_days)
    session.flush()
    logger.info(
        "Maintenance refresh updated %d of %d assets", len(updates), len(assets)
    )
    return len(updates)


def record_maintenance(
    session: Session,
    asset_id: int,
    last_maintenance_date: date | None = None,
    maintenance_interval_days: int | None = None,
    status: str | None = None,
    today: date | None = None,
) -> Asset:
    """Apply a direct edit of maintenance inputs and re-derive status."""
    asset = session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError(f"Asset {asset_id} not found", {"asset_id": asset_id})
    if maintenance_interval_days is not None and maintenance_interval_days <= 0:
        raise ValidationError(
            "Maintenance interval must be a positive number of days"
        )
    if status is not None and status not in {s.value for s in AssetStatus}:
        raise ValidationError(f"Unknown asset status '{status}'", {"status": status})

    prior = {asset.id: snapshot_inputs(asset)}
    if last_maintenance_date is not None:
        asset.last_maintenance_date = last_maintenance_date
    if maintenance_interval_days is not None:
        asset.maintenance_interval_days = maintenance_interval_days
    if status is not None:
        asset.status = status

    sync_maintenance_status([asset], prior, today)
    session.flush()
    return asset
