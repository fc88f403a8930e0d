"""Live / Planned / Superseded version transitions for assets.

A version chain is the set of assets sharing a logical name, linked explicitly
through ``predecessor_id``. At most one member of a chain is Live at a time.
Transitions touching two records are flushed together so the demotion and the
promotion are never visible separately; the caller's session commits them.
"""

import logging
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from assetforge.errors import (
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from assetforge.maintenance.derivation import snapshot_inputs, sync_maintenance_status
from assetforge.models.enums import Transition, VersionStatus
from assetforge.models.orm import Asset
from assetforge.models.schemas import AssetDetails, ChainMember, TransitionResult

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, list[str]] = {
    VersionStatus.LIVE.value: [
        Transition.CREATE_PLANNED.value,
        Transition.SUPERSEDE.value,
    ],
    VersionStatus.PLANNED.value: [Transition.ACTIVATE_PLANNED.value],
    VersionStatus.SUPERSEDED.value: [],
}

# Fields a planned version inherits from the version it replaces.
_INHERITED_FIELDS = (
    "name",
    "site",
    "asset_type",
    "manufacturer",
    "status",
    "criticality",
    "condition",
    "purchase_cost",
    "current_value",
    "warranty_expiration",
    "gl_account",
    "firmware_version",
    "ip_address",
    "mac_address",
    "configuration_notes",
    "maintenance_interval_days",
    "last_maintenance_date",
    "parent_asset_id",
    "template_id",
)


def available_transitions(asset: Asset) -> list[str]:
    return list(ALLOWED_TRANSITIONS.get(asset.version_status, []))


class VersionTransitionService:
    """Applies version transitions within the caller's session."""

    def __init__(self, session: Session):
        self.session = session

    def get_asset(self, asset_id: int) -> Asset:
        asset = self.session.get(Asset, asset_id)
        if asset is None:
            raise NotFoundError(f"Asset {asset_id} not found", {"asset_id": asset_id})
        return asset

    def get_asset_details(self, asset_id: int) -> AssetDetails:
        asset = self.get_asset(asset_id)
        return AssetDetails(
            id=asset.id,
            name=asset.name,
            site=asset.site,
            asset_type=asset.asset_type,
            status=asset.status,
            criticality=asset.criticality,
            condition=asset.condition,
            version_status=asset.version_status,
            version_label=asset.version_label,
            version_notes=asset.version_notes,
            go_live_date=asset.go_live_date,
            assigned_engineer_id=asset.assigned_engineer_id,
            purchase_cost=(
                float(asset.purchase_cost) if asset.purchase_cost is not None else None
            ),
            current_value=(
                float(asset.current_value) if asset.current_value is not None else None
            ),
            maintenance_interval_days=asset.maintenance_interval_days,
            last_maintenance_date=asset.last_maintenance_date,
            next_maintenance_due=asset.next_maintenance_due,
            maintenance_status=asset.maintenance_status,
            parent_asset_id=asset.parent_asset_id,
            predecessor_id=asset.predecessor_id,
            template_id=asset.template_id,
            available_transitions=available_transitions(asset),
        )

    def create_planned_version(
        self,
        original_asset_id: int,
        new_version: str,
        version_notes: str | None = None,
        go_live_date: date | None = None,
        assigned_engineer_id: str | None = None,
    ) -> TransitionResult:
        """Create a Planned copy of a Live asset; the original stays Live."""
        label = (new_version or "").strip()
        if not label:
            raise ValidationError("New version label is required")

        original = self.get_asset(original_asset_id)
        self._require_state(original, VersionStatus.LIVE, Transition.CREATE_PLANNED)

        used_labels = set(
            self.session.scalars(
                select(Asset.version_label).where(Asset.name == original.name)
            ).all()
        )
        if label in used_labels:
            raise ValidationError(
                f"Version '{label}' already exists for {original.name}",
                {"name": original.name, "version_label": label},
            )

        planned = Asset(
            **{field: getattr(original, field) for field in _INHERITED_FIELDS},
            version_status=VersionStatus.PLANNED.value,
            version_label=label,
            version_notes=version_notes,
            go_live_date=go_live_date,
            assigned_engineer_id=assigned_engineer_id,
            predecessor_id=original.id,
        )
        self.session.add(planned)
        self._flush()
        sync_maintenance_status([planned])
        self._flush()

        logger.info(
            "Planned version %s of %s created (asset %s)",
            label,
            original.name,
            planned.id,
        )
        return TransitionResult(
            transition=Transition.CREATE_PLANNED.value,
            asset_id=planned.id,
            affected_asset_ids=[planned.id, original.id],
        )

    def find_related_live_asset(self, asset_name: str) -> int:
        """Return the id of the single Live asset named ``asset_name``."""
        ids = list(
            self.session.scalars(
                select(Asset.id)
                .where(
                    Asset.name == asset_name,
                    Asset.version_status == VersionStatus.LIVE.value,
                )
                .order_by(Asset.id)
            ).all()
        )
        if not ids:
            raise NotFoundError(
                f"No Live asset named '{asset_name}'", {"name": asset_name}
            )
        if len(ids) > 1:
            raise InvalidStateError(
                f"{len(ids)} Live assets share the name '{asset_name}'",
                {"name": asset_name, "asset_ids": ids},
            )
        return ids[0]

    def activate_planned_version(
        self, planned_asset_id: int, related_live_asset_id: int | None = None
    ) -> TransitionResult:
        """Promote a Planned asset to Live and supersede the current Live one.

        When ``related_live_asset_id`` is omitted the predecessor link is used,
        falling back to a lookup by name.
        """
        planned = self.get_asset(planned_asset_id)
        self._require_state(
            planned, VersionStatus.PLANNED, Transition.ACTIVATE_PLANNED
        )

        if related_live_asset_id is None:
            related_live_asset_id = self._resolve_live_predecessor(planned)
        live = self.get_asset(related_live_asset_id)
        if live.version_status != VersionStatus.LIVE.value:
            raise InvalidStateError(
                f"Related asset {live.id} is {live.version_status}, expected Live",
                {"asset_id": live.id, "version_status": live.version_status},
            )
        if live.name != planned.name and planned.predecessor_id != live.id:
            raise ValidationError(
                f"Asset {live.id} is not in the version chain of {planned.name}",
                {"planned_asset_id": planned.id, "related_live_asset_id": live.id},
            )

        other_live = self.session.execute(
            select(func.count(Asset.id)).where(
                Asset.name == planned.name,
                Asset.version_status == VersionStatus.LIVE.value,
                Asset.id != live.id,
            )
        ).scalar()
        if other_live:
            raise InvalidStateError(
                f"Another Live version of {planned.name} exists",
                {"name": planned.name},
            )

        prior = {a.id: snapshot_inputs(a) for a in (planned, live)}
        live.version_status = VersionStatus.SUPERSEDED.value
        planned.version_status = VersionStatus.LIVE.value
        if planned.predecessor_id is None:
            planned.predecessor_id = live.id
        if planned.go_live_date is None:
            planned.go_live_date = date.today()
        sync_maintenance_status([planned, live], prior)
        self._flush()

        logger.info(
            "Activated asset %s (%s %s); superseded asset %s",
            planned.id,
            planned.name,
            planned.version_label,
            live.id,
        )
        return TransitionResult(
            transition=Transition.ACTIVATE_PLANNED.value,
            asset_id=planned.id,
            affected_asset_ids=[planned.id, live.id],
        )

    def supersede_version(self, asset_id: int) -> TransitionResult:
        """Mark a Live asset Superseded without a replacement."""
        asset = self.get_asset(asset_id)
        self._require_state(asset, VersionStatus.LIVE, Transition.SUPERSEDE)

        prior = {asset.id: snapshot_inputs(asset)}
        asset.version_status = VersionStatus.SUPERSEDED.value
        sync_maintenance_status([asset], prior)
        self._flush()

        logger.info("Superseded asset %s (%s)", asset.id, asset.name)
        return TransitionResult(
            transition=Transition.SUPERSEDE.value,
            asset_id=asset.id,
            affected_asset_ids=[asset.id],
        )

    def version_chain(self, asset_id: int) -> list[ChainMember]:
        """Assets sharing the logical name or linked explicitly, oldest first."""
        asset = self.get_asset(asset_id)
        members = list(
            self.session.scalars(
                select(Asset)
                .where(
                    or_(
                        Asset.name == asset.name,
                        Asset.id == asset.predecessor_id,
                        Asset.predecessor_id == asset.id,
                    )
                )
                .order_by(Asset.id)
            ).all()
        )
        return [
            ChainMember(
                id=m.id,
                name=m.name,
                version_label=m.version_label,
                version_status=m.version_status,
                predecessor_id=m.predecessor_id,
            )
            for m in members
        ]

    def _resolve_live_predecessor(self, planned: Asset) -> int:
        predecessor = planned.predecessor
        if (
            predecessor is not None
            and predecessor.version_status == VersionStatus.LIVE.value
        ):
            return predecessor.id
        return self.find_related_live_asset(planned.name)

    def _require_state(
        self, asset: Asset, expected: VersionStatus, transition: Transition
    ) -> None:
        if asset.version_status != expected.value:
            raise InvalidStateError(
                f"Cannot {transition.value} asset {asset.id}: it is "
                f"{asset.version_status}, expected {expected.value}",
                {
                    "asset_id": asset.id,
                    "version_status": asset.version_status,
                    "transition": transition.value,
                },
            )

    def _flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise PersistenceError(
                "Version transition rejected by storage",
                details={"reason": str(exc.orig)},
            ) from exc
