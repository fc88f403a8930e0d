"""Read-only rollups over the asset population for the dashboard.

Every aggregation is independent. :func:`collect_dashboard` runs them in
parallel, one session per worker, and reports failures per aggregation.
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from assetforge.config.settings import get_settings
from assetforge.errors import AssetForgeError, QueryError
from assetforge.models.enums import (
    AssetStatus,
    Criticality,
    MaintenanceStatus,
)
from assetforge.models.orm import Asset
from assetforge.models.schemas import (
    AggregationResult,
    AssetValue,
    DashboardMetrics,
    ErrorPayload,
    MaintenanceItem,
    SiteValue,
)

logger = logging.getLogger(__name__)

UNSPECIFIED = "Unspecified"
NOT_ASSIGNED = "Not Assigned"

_asset_value = func.coalesce(Asset.current_value, Asset.purchase_cost, 0)


class DashboardAggregator:
    """Grouped counts and sums over the current asset population."""

    def __init__(self, session: Session, today: date | None = None):
        self.session = session
        self.today = today or date.today()

    def _rows(self, stmt) -> list[Any]:
        try:
            return list(self.session.execute(stmt).all())
        except SQLAlchemyError as exc:
            raise QueryError(f"Dashboard query failed: {exc}") from exc

    def _count_by(self, column) -> dict[str, int]:
        rows = self._rows(
            select(column, func.count(Asset.id)).group_by(column).order_by(column)
        )
        return {(label or UNSPECIFIED): int(count) for label, count in rows}

    def dashboard_metrics(self) -> DashboardMetrics:
        row = self._rows(
            select(
                func.count(Asset.id),
                func.sum(case((Asset.status == AssetStatus.ACTIVE.value, 1), else_=0)),
                func.sum(
                    case(
                        (
                            Asset.maintenance_status
                            == MaintenanceStatus.OVERDUE.value,
                            1,
                        ),
                        else_=0,
                    )
                ),
                func.sum(
                    case((Asset.criticality == Criticality.CRITICAL.value, 1), else_=0)
                ),
                func.sum(_asset_value),
            )
        )[0]
        total, active, overdue, critical, value = row
        return DashboardMetrics(
            total_assets=int(total or 0),
            active_assets=int(active or 0),
            overdue_assets=int(overdue or 0),
            critical_assets=int(critical or 0),
            total_value=round(float(value or 0), 2),
        )

    def assets_by_status(self) -> dict[str, int]:
        return self._count_by(Asset.status)

    def assets_by_criticality(self) -> dict[str, int]:
        return self._count_by(Asset.criticality)

    def assets_by_version_status(self) -> dict[str, int]:
        return self._count_by(Asset.version_status)

    def assets_by_maintenance_status(self) -> dict[str, int]:
        # Assets without a derived status are not tracked for maintenance.
        rows = self._rows(
            select(Asset.maintenance_status, func.count(Asset.id))
            .where(Asset.maintenance_status.is_not(None))
            .group_by(Asset.maintenance_status)
        )
        order = [s.value for s in MaintenanceStatus]
        counts = {label: int(count) for label, count in rows}
        return {label: counts[label] for label in order if label in counts}

    def assets_by_condition(self) -> dict[str, int]:
        return self._count_by(Asset.condition)

    def assets_by_site(self) -> dict[str, int]:
        rows = self._rows(
            select(Asset.site, func.count(Asset.id))
            .group_by(Asset.site)
            .order_by(Asset.site)
        )
        return {(site or NOT_ASSIGNED): int(count) for site, count in rows}

    def value_by_criticality(self) -> dict[str, float]:
        rows = self._rows(
            select(Asset.criticality, func.sum(_asset_value))
            .group_by(Asset.criticality)
            .order_by(Asset.criticality)
        )
        return {(label or UNSPECIFIED): round(float(v or 0), 2) for label, v in rows}

    def value_by_site(self) -> dict[str, SiteValue]:
        rows = self._rows(
            select(
                Asset.site,
                func.sum(func.coalesce(Asset.purchase_cost, 0)),
                func.sum(func.coalesce(Asset.current_value, 0)),
            )
            .group_by(Asset.site)
            .order_by(Asset.site)
        )
        return {
            (site or NOT_ASSIGNED): SiteValue(
                purchase_cost=round(float(purchase or 0), 2),
                current_value=round(float(current or 0), 2),
            )
            for site, purchase, current in rows
        }

    def maintenance_status_by_site(self) -> dict[str, dict[str, int]]:
        rows = self._rows(
            select(Asset.site, Asset.maintenance_status, func.count(Asset.id))
            .where(Asset.maintenance_status.is_not(None))
            .group_by(Asset.site, Asset.maintenance_status)
            .order_by(Asset.site)
        )
        result: dict[str, dict[str, int]] = {}
        for site, status, count in rows:
            bucket = result.setdefault(
                site or NOT_ASSIGNED, {s.value: 0 for s in MaintenanceStatus}
            )
            bucket[status] = int(count)
        return result

    def top_assets_by_value(self, limit: int = 10) -> list[AssetValue]:
        rows = self._rows(
            select(Asset.id, Asset.name, _asset_value.label("value"))
            .order_by(_asset_value.desc(), Asset.id)
            .limit(limit)
        )
        return [
            AssetValue(id=r.id, name=r.name, value=round(float(r.value or 0), 2))
            for r in rows
        ]

    def assets_needing_maintenance(self, limit: int = 50) -> list[MaintenanceItem]:
        """Active assets that are Overdue or Due Soon, soonest due first."""
        rows = self._rows(
            select(
                Asset.id,
                Asset.name,
                Asset.site,
                Asset.next_maintenance_due,
                Asset.maintenance_status,
            )
            .where(
                Asset.status == AssetStatus.ACTIVE.value,
                Asset.maintenance_status.in_(
                    [MaintenanceStatus.OVERDUE.value, MaintenanceStatus.DUE_SOON.value]
                ),
            )
            .order_by(Asset.next_maintenance_due, Asset.id)
            .limit(limit)
        )
        return [
            MaintenanceItem(
                id=r.id,
                name=r.name,
                site=r.site or NOT_ASSIGNED,
                next_maintenance_due=r.next_maintenance_due,
                status=r.maintenance_status,
                days_until_due=(
                    (r.next_maintenance_due - self.today).days
                    if r.next_maintenance_due
                    else None
                ),
            )
            for r in rows
        ]


def _aggregations(top_n: int) -> dict[str, Callable[[DashboardAggregator], Any]]:
    return {
        "metrics": DashboardAggregator.dashboard_metrics,
        "by_status": DashboardAggregator.assets_by_status,
        "by_criticality": DashboardAggregator.assets_by_criticality,
        "by_version_status": DashboardAggregator.assets_by_version_status,
        "by_maintenance_status": DashboardAggregator.assets_by_maintenance_status,
        "by_condition": DashboardAggregator.assets_by_condition,
        "by_site": DashboardAggregator.assets_by_site,
        "value_by_criticality": DashboardAggregator.value_by_criticality,
        "value_by_site": DashboardAggregator.value_by_site,
        "maintenance_by_site": DashboardAggregator.maintenance_status_by_site,
        "top_by_value": lambda agg: agg.top_assets_by_value(top_n),
        "needing_maintenance": DashboardAggregator.assets_needing_maintenance,
    }


AGGREGATION_NAMES = tuple(_aggregations(10))


def run_aggregation(
    session: Session, name: str, top_n: int = 10, today: date | None = None
) -> Any:
    """Run a single named aggregation on an existing session."""
    aggregations = _aggregations(top_n)
    if name not in aggregations:
        raise KeyError(name)
    return aggregations[name](DashboardAggregator(session, today))


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def collect_dashboard(
    session_factory: sessionmaker[Session],
    names: Sequence[str] | None = None,
    max_workers: int | None = None,
    top_n: int | None = None,
    today: date | None = None,
) -> dict[str, AggregationResult]:
    """Fetch aggregations concurrently; one failure never blanks the others."""
    settings = get_settings()
    top_n = top_n or settings.dashboard_top_n
    aggregations = _aggregations(top_n)
    selected = list(names) if names is not None else list(aggregations)
    unknown = [n for n in selected if n not in aggregations]
    if unknown:
        raise KeyError(", ".join(unknown))

    def _run(name: str) -> Any:
        session = session_factory()
        try:
            return aggregations[name](DashboardAggregator(session, today))
        finally:
            session.close()

    results: dict[str, AggregationResult] = {}
    workers = max_workers or settings.dashboard_max_workers
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(_run, name): name for name in selected}
        for future in as_completed(futures):
            name = futures[future]
            try:
                data = future.result()
            except AssetForgeError as exc:
                logger.error("Dashboard aggregation %s failed: %s", name, exc.message)
                results[name] = AggregationResult(
                    name=name,
                    ok=False,
                    error=ErrorPayload(kind=exc.kind, message=exc.message),
                )
            except Exception as exc:
                logger.exception("Dashboard aggregation %s raised", name)
                results[name] = AggregationResult(
                    name=name,
                    ok=False,
                    error=ErrorPayload(kind=QueryError.kind, message=str(exc)),
                )
            else:
                results[name] = AggregationResult(
                    name=name, ok=True, data=_to_jsonable(data)
                )

    return {name: results[name] for name in selected}
