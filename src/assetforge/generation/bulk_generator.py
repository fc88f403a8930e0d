import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from assetforge.config.settings import Settings, get_settings
from assetforge.errors import PersistenceError, ValidationError
from assetforge.generation.naming import generate_names, preview_names
from assetforge.generation.templates import get_active_template, validate_template
from assetforge.maintenance.derivation import sync_maintenance_status
from assetforge.models.enums import AssetStatus, VersionStatus
from assetforge.models.orm import ASSET_NAME_LENGTH, Asset, AssetTemplate
from assetforge.models.schemas import GenerationResult, NamePreview

logger = logging.getLogger(__name__)


class BulkAssetGenerator:
    """Creates batches of assets from a template, all or nothing."""

    def __init__(self, session: Session, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    def preview(
        self, template_id: int, quantity: int, site_prefix: str, start_number: int
    ) -> NamePreview:
        """Return the first names the batch would receive."""
        template = get_active_template(self.session, template_id)
        names = preview_names(site_prefix, template.asset_type, start_number, quantity)
        return NamePreview(
            template_id=template.id,
            names=names,
            remaining_count=max(quantity - len(names), 0),
        )

    def generate(
        self, template_id: int, quantity: int, site_prefix: str, start_number: int
    ) -> GenerationResult:
        """Create ``quantity`` assets named from the template's asset type.

        Args:
            template_id: Active template to copy defaults from.
            quantity: Batch size, 1-100.
            site_prefix: Leading name segment, usually the site code.
            start_number: First sequence number, 0 or greater.

        Returns:
            GenerationResult with ids in name order.

        Raises:
            TemplateNotFoundError: unknown or inactive template.
            ValidationError: bad inputs or an invalid template.
            PersistenceError: a name already exists; nothing is written.
        """
        template = get_active_template(self.session, template_id)
        validate_template(template)
        names = generate_names(site_prefix, template.asset_type, start_number, quantity)

        too_long = [n for n in names if len(n) > ASSET_NAME_LENGTH]
        if too_long:
            raise ValidationError(
                f"Asset names exceed {ASSET_NAME_LENGTH} characters",
                {"names": too_long[:5]},
            )

        existing = self._existing_names(names)
        if existing:
            logger.warning(
                "Rejected batch from template %s: %d name(s) already exist",
                template.id,
                len(existing),
            )
            raise PersistenceError(
                "Asset name(s) already exist: " + ", ".join(existing),
                conflicting_names=existing,
            )

        assets = [self._build_asset(template, name, site_prefix) for name in names]
        self.session.add_all(assets)
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Batch from template %s lost a naming race", template.id)
            raise PersistenceError(
                "Asset batch rejected by storage; names were taken concurrently",
                conflicting_names=self._existing_names(names),
                details={"reason": str(exc.orig)},
            ) from exc

        sync_maintenance_status(
            assets, None, window_days=self.settings.due_soon_window_days
        )
        self.session.flush()

        logger.info(
            "Generated %d assets from template %s (%s .. %s)",
            len(assets),
            template.id,
            names[0],
            names[-1],
        )
        return GenerationResult(
            template_id=template.id,
            asset_ids=[a.id for a in assets],
            names=names,
        )

    def _existing_names(self, names: list[str]) -> list[str]:
        stmt = select(Asset.name).where(Asset.name.in_(names)).distinct()
        taken = set(self.session.scalars(stmt).all())
        return [n for n in names if n in taken]

    def _build_asset(
        self, template: AssetTemplate, name: str, site_prefix: str
    ) -> Asset:
        return Asset(
            name=name,
            site=site_prefix.strip(),
            asset_type=template.asset_type,
            manufacturer=template.default_manufacturer,
            purchase_cost=template.default_cost,
            current_value=template.default_cost,
            maintenance_interval_days=template.maintenance_interval_days,
            configuration_notes=template.configuration_notes,
            status=AssetStatus.ACTIVE.value,
            version_status=VersionStatus.LIVE.value,
            version_label=self.settings.initial_version_label,
            template_id=template.id,
        )
