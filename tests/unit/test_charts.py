import pytest
from pydantic import TypeAdapter

from assetforge.analytics.charts import (
    AMBER,
    GREEN,
    RED,
    BarChart,
    ChartConfig,
    DashboardCharts,
    FunnelChart,
    GaugeChart,
    HorizontalBarChart,
    build_dashboard_charts,
    condition_chart,
    criticality_chart,
    format_compact_currency,
    gauge_color,
    maintenance_by_site_chart,
    maintenance_chart,
    site_value_chart,
    status_chart,
    version_chart,
)
from assetforge.models.schemas import SiteValue


class TestChartBuilders:
    def test_status_chart_is_donut(self):
        chart = status_chart({"Active": 4, "Inactive": 1})
        assert chart.type == "donut"
        assert [(s.label, s.value) for s in chart.slices] == [
            ("Active", 4),
            ("Inactive", 1),
        ]

    def test_criticality_chart_is_pie(self):
        assert criticality_chart({"High": 2}).type == "pie"

    def test_version_gauge_percentage(self):
        chart = version_chart({"Live": 4, "Planned": 1, "Superseded": 1})
        assert isinstance(chart, GaugeChart)
        assert chart.value == 67
        assert chart.color == AMBER
        assert len(chart.breakdown) == 3

    def test_version_gauge_empty(self):
        chart = version_chart({})
        assert chart.value == 0
        assert chart.color == RED

    def test_maintenance_chart_colours_each_bar(self):
        chart = maintenance_chart({"Current": 1, "Due Soon": 2, "Overdue": 3})
        assert isinstance(chart, BarChart)
        assert chart.series[0].values == [1.0, 2.0, 3.0]
        assert chart.series[0].point_colors == [GREEN, AMBER, RED]

    def test_maintenance_by_site_is_stacked(self):
        chart = maintenance_by_site_chart(
            {
                "HQ": {"Current": 1, "Due Soon": 1, "Overdue": 1},
                "PLANT-A": {"Current": 2, "Due Soon": 0, "Overdue": 0},
            }
        )
        assert isinstance(chart, HorizontalBarChart)
        assert chart.stacked is True
        assert chart.labels == ["HQ", "PLANT-A"]
        assert [s.label for s in chart.series] == ["Current", "Due Soon", "Overdue"]
        assert chart.series[0].values == [1.0, 2.0]

    def test_condition_funnel_best_to_worst(self):
        chart = condition_chart({"Poor": 1, "Excellent": 3, "Fair": 0, "Good": 2})
        assert isinstance(chart, FunnelChart)
        assert [s.label for s in chart.stages] == ["Excellent", "Good", "Poor"]

    def test_site_value_has_two_series(self):
        chart = site_value_chart(
            {"HQ": SiteValue(purchase_cost=98000.0, current_value=65000.0)}
        )
        assert [s.label for s in chart.series] == ["Purchase Cost", "Current Value"]
        assert chart.series[1].values == [65000.0]


class TestChartConfigUnion:
    def test_payload_selects_variant(self):
        adapter = TypeAdapter(ChartConfig)
        chart = adapter.validate_python(
            {
                "type": "gauge",
                "title": "Live",
                "value": 80,
                "color": GREEN,
                "breakdown": [],
            }
        )
        assert isinstance(chart, GaugeChart)

    def test_unknown_variant_rejected(self):
        with pytest.raises(ValueError):
            TypeAdapter(ChartConfig).validate_python({"type": "radar", "title": "x"})

    def test_gauge_value_bounded(self):
        with pytest.raises(ValueError):
            GaugeChart(title="x", value=120, color=GREEN, breakdown=[])

    def test_build_dashboard_charts_skips_failed_sources(self):
        charts = build_dashboard_charts(
            {
                "by_status": {"Active": 2},
                "value_by_site": {
                    "HQ": {"purchase_cost": 10.0, "current_value": 5.0}
                },
            }
        )
        assert isinstance(charts, DashboardCharts)
        assert set(charts.charts) == {"status", "site_value"}
        dumped = charts.model_dump()
        assert dumped["charts"]["site_value"]["type"] == "bar"


class TestFormatting:
    @pytest.mark.parametrize(
        "value,expected",
        [(80, GREEN), (79.9, AMBER), (60, AMBER), (59, RED), (0, RED)],
    )
    def test_gauge_color(self, value, expected):
        assert gauge_color(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "$0"),
            (950, "$950"),
            (1500, "$1.5K"),
            (2_300_000, "$2.3M"),
            (4_000_000_000, "$4.0B"),
            (7_800_000_000_000, "$7.8T"),
        ],
    )
    def test_format_compact_currency(self, value, expected):
        assert format_compact_currency(value) == expected
