"""Typed chart configurations for the dashboard panels.

Each chart kind is its own model with a fixed payload; ``ChartConfig`` is the
discriminated union on ``type``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from assetforge.models.enums import Condition, MaintenanceStatus, VersionStatus
from assetforge.models.schemas import SiteValue

GREEN = "#4BCA81"
AMBER = "#FFB75D"
RED = "#E74C3C"
BLUE = "#1589EE"
PALETTE = [BLUE, GREEN, AMBER, RED, "#9B59B6", "#3498DB", "#E67E22"]


class ChartSlice(BaseModel):
    label: str
    value: float
    color: str


class ChartSeries(BaseModel):
    label: str
    color: str
    values: list[float]
    point_colors: list[str] | None = None


class DonutChart(BaseModel):
    type: Literal["donut"] = "donut"
    title: str
    slices: list[ChartSlice]


class PieChart(BaseModel):
    type: Literal["pie"] = "pie"
    title: str
    slices: list[ChartSlice]


class BarChart(BaseModel):
    type: Literal["bar"] = "bar"
    title: str
    labels: list[str]
    series: list[ChartSeries]


class HorizontalBarChart(BaseModel):
    type: Literal["horizontalBar"] = "horizontalBar"
    title: str
    labels: list[str]
    series: list[ChartSeries]
    stacked: bool = True


class FunnelChart(BaseModel):
    type: Literal["funnel"] = "funnel"
    title: str
    stages: list[ChartSlice]


class GaugeChart(BaseModel):
    type: Literal["gauge"] = "gauge"
    title: str
    value: int = Field(ge=0, le=100)
    color: str
    breakdown: list[ChartSlice]


ChartConfig = Annotated[
    Union[DonutChart, PieChart, BarChart, HorizontalBarChart, FunnelChart, GaugeChart],
    Field(discriminator="type"),
]


class DashboardCharts(BaseModel):
    charts: dict[str, ChartConfig]


def _slices(data: dict[str, float], colors: list[str]) -> list[ChartSlice]:
    return [
        ChartSlice(label=label, value=value, color=colors[i % len(colors)])
        for i, (label, value) in enumerate(data.items())
    ]


def gauge_color(value: float) -> str:
    if value >= 80:
        return GREEN
    if value >= 60:
        return AMBER
    return RED


def format_compact_currency(value: float) -> str:
    """Format a dollar amount as $1.2K / $3.4M / $5.6B / $7.8T."""
    value = value or 0
    for threshold, suffix in (
        (1_000_000_000_000, "T"),
        (1_000_000_000, "B"),
        (1_000_000, "M"),
        (1_000, "K"),
    ):
        if value >= threshold:
            return f"${value / threshold:.1f}{suffix}"
    return f"${value:,.0f}"


def status_chart(data: dict[str, int]) -> DonutChart:
    return DonutChart(
        title="Assets by Status", slices=_slices(data, [BLUE, GREEN, AMBER])
    )


def criticality_chart(data: dict[str, int]) -> PieChart:
    return PieChart(
        title="Assets by Criticality",
        slices=_slices(data, [RED, AMBER, "#FFD700", GREEN]),
    )


def version_chart(data: dict[str, int]) -> GaugeChart:
    total = sum(data.values())
    live = data.get(VersionStatus.LIVE.value, 0)
    percentage = round(live / total * 100) if total > 0 else 0
    return GaugeChart(
        title="Version Status (% Live)",
        value=percentage,
        color=gauge_color(percentage),
        breakdown=_slices(data, [GREEN, AMBER, RED]),
    )


def maintenance_chart(data: dict[str, int]) -> BarChart:
    colors = {
        MaintenanceStatus.CURRENT.value: GREEN,
        MaintenanceStatus.DUE_SOON.value: AMBER,
        MaintenanceStatus.OVERDUE.value: RED,
    }
    return BarChart(
        title="Maintenance Status",
        labels=list(data),
        series=[
            ChartSeries(
                label="Asset Count",
                color=GREEN,
                values=[float(v) for v in data.values()],
                point_colors=[colors.get(label, BLUE) for label in data],
            )
        ],
    )


def value_chart(data: dict[str, float]) -> BarChart:
    return BarChart(
        title="Asset Value by Criticality",
        labels=list(data),
        series=[
            ChartSeries(
                label="Total Value ($)",
                color=BLUE,
                values=[float(v) for v in data.values()],
            )
        ],
    )


def maintenance_by_site_chart(data: dict[str, dict[str, int]]) -> HorizontalBarChart:
    sites = list(data)
    colors = [GREEN, AMBER, RED]
    return HorizontalBarChart(
        title="Maintenance Status by Site",
        labels=sites,
        series=[
            ChartSeries(
                label=status.value,
                color=colors[i],
                values=[float(data[site].get(status.value, 0)) for site in sites],
            )
            for i, status in enumerate(MaintenanceStatus)
        ],
    )


def condition_chart(data: dict[str, int]) -> FunnelChart:
    """Conditions ordered best to worst; empty conditions are dropped."""
    colors = [GREEN, "#A8E6CF", AMBER, "#FF8C69", RED]
    ordered = {c.value: data[c.value] for c in Condition if data.get(c.value)}
    return FunnelChart(title="Assets by Condition", stages=_slices(ordered, colors))


def site_value_chart(data: dict[str, SiteValue]) -> BarChart:
    sites = list(data)
    return BarChart(
        title="Asset Value by Site",
        labels=sites,
        series=[
            ChartSeries(
                label="Purchase Cost",
                color=BLUE,
                values=[data[s].purchase_cost for s in sites],
            ),
            ChartSeries(
                label="Current Value",
                color=GREEN,
                values=[data[s].current_value for s in sites],
            ),
        ],
    )


def build_dashboard_charts(aggregations: dict) -> DashboardCharts:
    """Build every panel whose aggregation succeeded.

    ``aggregations`` maps aggregation names to their successful payloads, as
    produced by ``collect_dashboard``.
    """
    builders = {
        "status": ("by_status", status_chart),
        "criticality": ("by_criticality", criticality_chart),
        "version": ("by_version_status", version_chart),
        "maintenance": ("by_maintenance_status", maintenance_chart),
        "value": ("value_by_criticality", value_chart),
        "maintenance_by_site": ("maintenance_by_site", maintenance_by_site_chart),
        "condition": ("by_condition", condition_chart),
        "site_value": ("value_by_site", _site_value_from_payload),
    }
    charts = {}
    for chart_name, (source, builder) in builders.items():
        if source in aggregations:
            charts[chart_name] = builder(aggregations[source])
    return DashboardCharts(charts=charts)


def _site_value_from_payload(data: dict) -> BarChart:
    return site_value_chart(
        {
            site: value if isinstance(value, SiteValue) else SiteValue(**value)
            for site, value in data.items()
        }
    )
