from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from assetforge.api.dependencies import get_db
from assetforge.generation.bulk_generator import BulkAssetGenerator
from assetforge.generation.templates import list_active_templates
from assetforge.models.schemas import NamePreview, PreviewRequest, TemplateSummary

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/", response_model=list[TemplateSummary])
def get_active_templates(session: Session = Depends(get_db)):
    """List active templates for the generator picker."""
    return [
        TemplateSummary(id=t.id, name=t.name, asset_type=t.asset_type)
        for t in list_active_templates(session)
    ]


@router.post("/{template_id}/preview", response_model=NamePreview)
def preview_template_names(
    template_id: int, body: PreviewRequest, session: Session = Depends(get_db)
):
    """Preview the first names a generation request would produce."""
    return BulkAssetGenerator(session).preview(
        template_id, body.quantity, body.site_prefix, body.start_number
    )
