from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

# --- Template / generation schemas ---


class TemplateSummary(BaseModel):
    id: int
    name: str
    asset_type: str | None


class TemplateDetail(TemplateSummary):
    default_manufacturer: str | None
    default_cost: Decimal | None
    maintenance_interval_days: int | None
    is_active: bool
    configuration_notes: str | None


class GenerationRequest(BaseModel):
    template_id: int
    quantity: int
    site_prefix: str
    start_number: int = 1


class PreviewRequest(BaseModel):
    quantity: int
    site_prefix: str
    start_number: int = 1


class NamePreview(BaseModel):
    template_id: int
    names: list[str]
    remaining_count: int


class GenerationResult(BaseModel):
    """Identifiers of one committed batch, in name order."""

    template_id: int
    asset_ids: list[int]
    names: list[str]

    @property
    def created(self) -> int:
        return len(self.asset_ids)


# --- Lifecycle schemas ---


class AssetDetails(BaseModel):
    id: int
    name: str
    site: str | None
    asset_type: str | None
    status: str | None
    criticality: str | None
    condition: str | None
    version_status: str
    version_label: str
    version_notes: str | None
    go_live_date: date | None
    assigned_engineer_id: str | None
    purchase_cost: float | None
    current_value: float | None
    maintenance_interval_days: int | None
    last_maintenance_date: date | None
    next_maintenance_due: date | None
    maintenance_status: str | None
    parent_asset_id: int | None
    predecessor_id: int | None
    template_id: int | None
    available_transitions: list[str]


class CreatePlannedRequest(BaseModel):
    new_version: str
    version_notes: str | None = None
    go_live_date: date | None = None
    assigned_engineer_id: str | None = None


class ActivateRequest(BaseModel):
    related_live_asset_id: int | None = None


class TransitionResult(BaseModel):
    """Event returned by every transition; UIs refresh the listed assets."""

    transition: str
    asset_id: int
    affected_asset_ids: list[int]


class ChainMember(BaseModel):
    id: int
    name: str
    version_label: str
    version_status: str
    predecessor_id: int | None


# --- Maintenance schemas ---


class MaintenanceInputs(BaseModel):
    """Fields whose change triggers maintenance status derivation."""

    model_config = {"frozen": True}

    maintenance_interval_days: int | None
    last_maintenance_date: date | None
    status: str | None
    version_status: str | None


class MaintenanceFields(BaseModel):
    model_config = {"frozen": True}

    next_maintenance_due: date | None
    maintenance_status: str | None


class MaintenanceUpdate(BaseModel):
    last_maintenance_date: date | None = None
    maintenance_interval_days: int | None = Field(None, ge=1)
    status: str | None = None


# --- Dashboard schemas ---


class DashboardMetrics(BaseModel):
    total_assets: int
    active_assets: int
    overdue_assets: int
    critical_assets: int
    total_value: float


class SiteValue(BaseModel):
    purchase_cost: float
    current_value: float


class AssetValue(BaseModel):
    id: int
    name: str
    value: float


class MaintenanceItem(BaseModel):
    id: int
    name: str
    site: str | None
    next_maintenance_due: date | None
    status: str | None
    days_until_due: int | None


class ErrorPayload(BaseModel):
    kind: str
    message: str


class AggregationResult(BaseModel):
    name: str
    ok: bool
    data: Any = None
    error: ErrorPayload | None = None
