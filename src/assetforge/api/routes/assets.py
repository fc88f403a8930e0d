from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from assetforge.api.dependencies import get_db
from assetforge.generation.bulk_generator import BulkAssetGenerator
from assetforge.lifecycle.versioning import VersionTransitionService
from assetforge.maintenance.derivation import record_maintenance
from assetforge.models.schemas import (
    ActivateRequest,
    AssetDetails,
    ChainMember,
    CreatePlannedRequest,
    GenerationRequest,
    GenerationResult,
    MaintenanceUpdate,
    TransitionResult,
)

router = APIRouter(prefix="/assets", tags=["assets"])


@router.post("/generate", status_code=201, response_model=GenerationResult)
def generate_assets(body: GenerationRequest, session: Session = Depends(get_db)):
    """Create a batch of assets from a template (all or nothing)."""
    return BulkAssetGenerator(session).generate(
        body.template_id, body.quantity, body.site_prefix, body.start_number
    )


@router.get("/live")
def find_live_asset(
    name: str = Query(..., min_length=1), session: Session = Depends(get_db)
):
    """Find the Live asset sharing a logical name."""
    asset_id = VersionTransitionService(session).find_related_live_asset(name)
    return {"name": name, "asset_id": asset_id}


@router.get("/{asset_id}", response_model=AssetDetails)
def get_asset_details(asset_id: int, session: Session = Depends(get_db)):
    return VersionTransitionService(session).get_asset_details(asset_id)


@router.get("/{asset_id}/chain", response_model=list[ChainMember])
def get_version_chain(asset_id: int, session: Session = Depends(get_db)):
    """All versions of the asset, oldest first."""
    return VersionTransitionService(session).version_chain(asset_id)


@router.post(
    "/{asset_id}/planned-versions", status_code=201, response_model=TransitionResult
)
def create_planned_version(
    asset_id: int, body: CreatePlannedRequest, session: Session = Depends(get_db)
):
    return VersionTransitionService(session).create_planned_version(
        asset_id,
        body.new_version,
        body.version_notes,
        body.go_live_date,
        body.assigned_engineer_id,
    )


@router.post("/{asset_id}/activate", response_model=TransitionResult)
def activate_planned_version(
    asset_id: int,
    body: ActivateRequest | None = None,
    session: Session = Depends(get_db),
):
    """Promote a Planned asset; the related Live asset becomes Superseded."""
    related = body.related_live_asset_id if body else None
    return VersionTransitionService(session).activate_planned_version(
        asset_id, related
    )


@router.post("/{asset_id}/supersede", response_model=TransitionResult)
def supersede_version(asset_id: int, session: Session = Depends(get_db)):
    return VersionTransitionService(session).supersede_version(asset_id)


@router.post("/{asset_id}/maintenance", response_model=AssetDetails)
def update_maintenance(
    asset_id: int, body: MaintenanceUpdate, session: Session = Depends(get_db)
):
    """Record maintenance inputs and return the re-derived asset."""
    record_maintenance(
        session,
        asset_id,
        last_maintenance_date=body.last_maintenance_date,
        maintenance_interval_days=body.maintenance_interval_days,
        status=body.status,
    )
    return VersionTransitionService(session).get_asset_details(asset_id)
