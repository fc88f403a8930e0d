from sqlalchemy import select
from sqlalchemy.orm import Session

from assetforge.errors import TemplateNotFoundError, ValidationError
from assetforge.models.orm import AssetTemplate


def list_active_templates(session: Session) -> list[AssetTemplate]:
    """Load active templates ordered by name."""
    stmt = (
        select(AssetTemplate)
        .where(AssetTemplate.is_active.is_(True))
        .order_by(AssetTemplate.name, AssetTemplate.id)
    )
    return list(session.scalars(stmt).all())


def get_active_template(session: Session, template_id: int) -> AssetTemplate:
    """Load one active template, raising if it is unknown or deactivated."""
    template = session.get(AssetTemplate, template_id)
    if template is None or not template.is_active:
        raise TemplateNotFoundError(
            f"Template {template_id} not found or inactive",
            {"template_id": template_id},
        )
    return template


def validate_template(template: AssetTemplate) -> None:
    """Check the invariants an active template must satisfy before use."""
    if not (template.asset_type or "").strip():
        raise ValidationError(
            f"Template '{template.name}' has no asset type",
            {"template_id": template.id},
        )
    interval = template.maintenance_interval_days
    if interval is not None and interval <= 0:
        raise ValidationError(
            f"Template '{template.name}' maintenance interval must be positive",
            {"template_id": template.id, "maintenance_interval_days": interval},
        )
    if template.default_cost is not None and template.default_cost < 0:
        raise ValidationError(
            f"Template '{template.name}' default cost cannot be negative",
            {"template_id": template.id},
        )


def deactivate_template(session: Session, template_id: int) -> AssetTemplate:
    """Soft-deactivate a template; referencing assets keep their link."""
    template = get_active_template(session, template_id)
    template.is_active = False
    session.flush()
    return template
