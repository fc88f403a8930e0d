"""Streamlit UI for assetforge: generator, version transitions and dashboard."""

from datetime import date

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from sqlalchemy import select

from assetforge.analytics.charts import (
    BarChart,
    DonutChart,
    FunnelChart,
    GaugeChart,
    HorizontalBarChart,
    PieChart,
    build_dashboard_charts,
    format_compact_currency,
)
from assetforge.analytics.dashboard_service import collect_dashboard
from assetforge.errors import AssetForgeError
from assetforge.generation.bulk_generator import BulkAssetGenerator
from assetforge.generation.templates import list_active_templates
from assetforge.lifecycle.versioning import VersionTransitionService
from assetforge.models.database import get_engine, get_session_factory, init_db
from assetforge.models.enums import Transition
from assetforge.models.orm import Asset

TRANSITION_LABELS = {
    Transition.CREATE_PLANNED.value: "Create New Planned Version (from current Live)",
    Transition.SUPERSEDE.value: (
        "Supersede Current Version (mark as superseded without replacement)"
    ),
    Transition.ACTIVATE_PLANNED.value: (
        "Activate Planned Version (Planned → Live, old Live → Superseded)"
    ),
}


@st.cache_resource
def get_db_factory():
    engine = get_engine()
    init_db(engine)
    return get_session_factory(engine)


def run_in_session(action):
    """Run ``action(session)`` in its own transaction, surfacing errors."""
    session = get_db_factory()()
    try:
        result = action(session)
        session.commit()
        return result
    except AssetForgeError as exc:
        session.rollback()
        st.error(exc.message)
        return None
    finally:
        session.close()


def render_chart(chart) -> go.Figure:
    """Translate a typed chart configuration into a plotly figure."""
    fig = go.Figure()
    if isinstance(chart, (DonutChart, PieChart)):
        fig.add_trace(
            go.Pie(
                labels=[s.label for s in chart.slices],
                values=[s.value for s in chart.slices],
                marker=dict(colors=[s.color for s in chart.slices]),
                hole=0.45 if isinstance(chart, DonutChart) else 0,
            )
        )
    elif isinstance(chart, (BarChart, HorizontalBarChart)):
        horizontal = isinstance(chart, HorizontalBarChart)
        for series in chart.series:
            fig.add_trace(
                go.Bar(
                    name=series.label,
                    x=series.values if horizontal else chart.labels,
                    y=chart.labels if horizontal else series.values,
                    orientation="h" if horizontal else "v",
                    marker_color=series.point_colors or series.color,
                )
            )
        if horizontal and chart.stacked:
            fig.update_layout(barmode="stack")
    elif isinstance(chart, FunnelChart):
        fig.add_trace(
            go.Funnel(
                y=[s.label for s in chart.stages],
                x=[s.value for s in chart.stages],
                marker=dict(color=[s.color for s in chart.stages]),
            )
        )
    elif isinstance(chart, GaugeChart):
        fig.add_trace(
            go.Indicator(
                mode="gauge+number",
                value=chart.value,
                number={"suffix": "%"},
                gauge={"axis": {"range": [0, 100]}, "bar": {"color": chart.color}},
            )
        )
    fig.update_layout(title=chart.title, height=350)
    return fig


# ── Page config ──────────────────────────────────────────────────────
st.set_page_config(page_title="Asset Management", layout="wide")

st.sidebar.title("Asset Management")
page = st.sidebar.radio(
    "Navigation", ["Asset Dashboard", "Asset Generator", "Version Transition"]
)

# ═══════════════════════════════════════════════════════════════════════
# PAGE 1: Dashboard
# ═══════════════════════════════════════════════════════════════════════
if page == "Asset Dashboard":
    st.title("Asset Dashboard")
    if st.button("Refresh"):
        st.rerun()

    results = collect_dashboard(get_db_factory())
    for name, result in results.items():
        if not result.ok:
            st.error(f"Error loading {name}: {result.error.message}")

    metrics = results["metrics"]
    if metrics.ok:
        m = metrics.data
        active_pct = (
            round(m["active_assets"] / m["total_assets"] * 100)
            if m["total_assets"]
            else 0
        )
        col1, col2, col3, col4, col5 = st.columns(5)
        col1.metric("Total Assets", f"{m['total_assets']:,}")
        col2.metric("Active Assets", f"{m['active_assets']:,}", f"{active_pct}%")
        col3.metric("Overdue Maintenance", f"{m['overdue_assets']:,}")
        col4.metric("Critical Assets", f"{m['critical_assets']:,}")
        col5.metric("Total Value", format_compact_currency(m["total_value"]))

    charts = build_dashboard_charts(
        {name: r.data for name, r in results.items() if r.ok}
    ).charts
    chart_names = list(charts)
    for i in range(0, len(chart_names), 2):
        cols = st.columns(2)
        for col, chart_name in zip(cols, chart_names[i : i + 2]):
            col.plotly_chart(render_chart(charts[chart_name]), width="stretch")

    top = results["top_by_value"]
    if top.ok and top.data:
        st.subheader("Top Assets by Value")
        st.dataframe(pd.DataFrame(top.data), width="stretch", hide_index=True)

    needing = results["needing_maintenance"]
    if needing.ok:
        st.subheader("Assets Needing Maintenance")
        if needing.data:
            st.dataframe(pd.DataFrame(needing.data), width="stretch", hide_index=True)
        else:
            st.success("No assets are overdue or due soon.")

# ═══════════════════════════════════════════════════════════════════════
# PAGE 2: Generator
# ═══════════════════════════════════════════════════════════════════════
elif page == "Asset Generator":
    st.title("Generate Assets from Template")

    templates = run_in_session(
        lambda s: [(t.id, t.name, t.asset_type) for t in list_active_templates(s)]
    )
    if not templates:
        st.warning("No active templates. Run `assetforge seed-demo` first.")
        st.stop()

    options = {
        f"{name} - {asset_type or 'N/A'}": tid for tid, name, asset_type in templates
    }
    label = st.selectbox("Template", list(options))
    template_id = options[label]
    quantity = st.number_input("Quantity", min_value=1, max_value=100, value=1)
    site_prefix = st.text_input("Site Prefix")
    start_number = st.number_input("Starting Number", min_value=0, value=1)

    if site_prefix.strip():
        preview = run_in_session(
            lambda s: BulkAssetGenerator(s).preview(
                template_id, int(quantity), site_prefix, int(start_number)
            )
        )
        if preview:
            st.subheader("Preview")
            for name in preview.names:
                st.markdown(f"- `{name}`")
            if preview.remaining_count:
                st.caption(f"... and {preview.remaining_count} more")

    if st.button("Generate Assets", disabled=not site_prefix.strip()):
        result = run_in_session(
            lambda s: BulkAssetGenerator(s).generate(
                template_id, int(quantity), site_prefix, int(start_number)
            )
        )
        if result:
            st.success(f"Successfully created {result.created} asset(s)!")

# ═══════════════════════════════════════════════════════════════════════
# PAGE 3: Version Transition
# ═══════════════════════════════════════════════════════════════════════
elif page == "Version Transition":
    st.title("Asset Version Transition")

    assets = run_in_session(
        lambda s: [
            (a.id, a.name, a.version_label, a.version_status)
            for a in s.scalars(select(Asset).order_by(Asset.name, Asset.id)).all()
        ]
    )
    if not assets:
        st.warning("No assets found.")
        st.stop()

    options = {
        f"{name} v{label} ({status})": aid for aid, name, label, status in assets
    }
    asset_id = options[st.selectbox("Asset", list(options))]
    details = run_in_session(
        lambda s: VersionTransitionService(s).get_asset_details(asset_id)
    )
    if details is None:
        st.stop()

    st.markdown(
        f"**{details.name}**  \n"
        f"Version: `{details.version_label}`  \n"
        f"Version Status: **{details.version_status}**"
    )
    if not details.available_transitions:
        st.info("No transitions are available for this asset.")
        st.stop()

    transition = st.radio(
        "Transition",
        details.available_transitions,
        format_func=lambda t: TRANSITION_LABELS[t],
    )

    form = {}
    if transition == Transition.CREATE_PLANNED.value:
        form["new_version"] = st.text_input("New Version")
        form["version_notes"] = st.text_area("Version Notes")
        form["go_live_date"] = st.date_input("Go-Live Date", value=date.today())
        form["assigned_engineer_id"] = st.text_input("Assigned Engineer") or None

    confirmed = st.checkbox("I confirm this transition")
    if st.button("Finish", disabled=not confirmed):
        service_call = {
            Transition.CREATE_PLANNED.value: lambda svc: svc.create_planned_version(
                asset_id, **form
            ),
            Transition.ACTIVATE_PLANNED.value: lambda svc: (
                svc.activate_planned_version(asset_id)
            ),
            Transition.SUPERSEDE.value: lambda svc: svc.supersede_version(asset_id),
        }[transition]
        result = run_in_session(lambda s: service_call(VersionTransitionService(s)))
        if result:
            st.success(
                f"{TRANSITION_LABELS[result.transition]} complete "
                f"(assets {', '.join(str(a) for a in result.affected_asset_ids)})."
            )
