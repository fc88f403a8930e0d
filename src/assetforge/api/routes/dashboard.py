from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, sessionmaker

from assetforge.analytics.charts import build_dashboard_charts
from assetforge.analytics.dashboard_service import (
    AGGREGATION_NAMES,
    DashboardAggregator,
    collect_dashboard,
    run_aggregation,
)
from assetforge.api.dependencies import get_db, get_session_factory_dep
from assetforge.config.settings import get_settings
from assetforge.models.schemas import DashboardMetrics

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/")
def get_dashboard(factory: sessionmaker[Session] = Depends(get_session_factory_dep)):
    """All aggregations fetched concurrently, with per-aggregation errors."""
    results = collect_dashboard(factory)
    return {
        "aggregations": {name: r.model_dump() for name, r in results.items()},
        "errors": sorted(name for name, r in results.items() if not r.ok),
    }


@router.get("/metrics", response_model=DashboardMetrics)
def get_dashboard_metrics(session: Session = Depends(get_db)):
    return DashboardAggregator(session).dashboard_metrics()


@router.get("/charts")
def get_dashboard_charts(
    factory: sessionmaker[Session] = Depends(get_session_factory_dep),
):
    """Typed chart configurations for every aggregation that succeeded."""
    results = collect_dashboard(factory)
    payloads = {name: r.data for name, r in results.items() if r.ok}
    charts = build_dashboard_charts(payloads)
    return {
        "charts": charts.model_dump()["charts"],
        "errors": {
            name: r.error.model_dump() for name, r in results.items() if r.error
        },
    }


@router.get("/{aggregation}")
def get_aggregation(aggregation: str, session: Session = Depends(get_db)):
    if aggregation not in AGGREGATION_NAMES:
        raise HTTPException(404, f"Unknown aggregation '{aggregation}'")
    data = run_aggregation(session, aggregation, get_settings().dashboard_top_n)
    return {"name": aggregation, "data": data}
