"""
Replenishment Forecast Dashboard

A Streamlit dashboard for safety stock, reorder points and inventory
projections per SKU under what-if scenarios.
Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from connectors import SheetLoader, refresh_pipeline
from engine import ReplenishmentPipeline, ScenarioParameters, default_active_skus
from engine.config import ALL_VENDORS, SERVICE_LEVEL_Z, Settings
from engine.exceptions import BriefingError, IngestionError
from engine.insights import BriefingGenerator
from engine.logging_setup import configure_logging
from engine.pipeline import list_vendors

settings = Settings.from_env()
configure_logging(settings.log_level, settings.log_format)

# Page config
st.set_page_config(
    page_title="Replenishment Forecast",
    page_icon="📈",
    layout="wide",
)

st.title("📈 Replenishment Forecast")


@st.cache_resource
def load_pipeline(source: str):
    """Load the sheet once per source; the pipeline memoizes per scenario."""
    loaded = SheetLoader(source).load()
    return ReplenishmentPipeline(loaded.records, loaded.quality_report)


# --- Sidebar: data source + SKU tree ---
with st.sidebar:
    st.header("Data Source")
    source = st.text_input(
        "Sheet URL or file path",
        value=settings.data_source,
        help="Google Sheet link (must be viewable by link), CSV or Excel file",
    )

try:
    with st.spinner("Loading data..."):
        pipeline = load_pipeline(source)
except IngestionError as exc:
    st.error(f"Error: {exc.message}")
    if exc.details and "missing" in exc.details:
        st.caption(f"Expected columns: {', '.join(exc.details['expected'])}")
    st.stop()

with st.sidebar:
    st.caption(f"Connected: {source[:40]}{'...' if len(source) > 40 else ''}")
    if st.button("🔄 Reload data", use_container_width=True):
        try:
            with st.spinner("Reloading..."):
                refresh_pipeline(pipeline, source)
            st.toast(f"Loaded {len(pipeline.records):,} records")
        except IngestionError as exc:
            st.error(f"Reload failed, keeping the previous data: {exc.message}")

catalog = pipeline.catalog()

if "active_skus" not in st.session_state:
    st.session_state.active_skus = default_active_skus(catalog)

with st.sidebar:
    st.header("Products (SKUs)")
    selected = []
    for parent, skus in catalog.items():
        expanded = any(s in st.session_state.active_skus for s in skus)
        with st.expander(parent or "(no parent item)", expanded=expanded):
            for sku in skus:
                if st.checkbox(sku, value=sku in st.session_state.active_skus, key=f"sku_{sku}"):
                    selected.append(sku)
    st.session_state.active_skus = selected

# --- Scenario controls ---
st.subheader("🎚️ What-If Scenarios")
c1, c2, c3, c4 = st.columns(4)
with c1:
    service_level = st.select_slider(
        "Service Level", options=sorted(SERVICE_LEVEL_Z), value=98, format_func=lambda v: f"{v}%"
    )
    vendor_filter = st.selectbox("Vendor", [ALL_VENDORS] + list_vendors(pipeline.records))
with c2:
    demand_change = st.slider("Demand Change %", -50, 50, 0, step=5)
    lead_time_change = st.slider("Lead Time Change %", -50, 50, 0, step=5)
with c3:
    price_change = st.slider("Unit Price Change %", -50, 50, 0, step=5)
with c4:
    cost_change = st.slider("Unit Cost Change %", -50, 50, 0, step=5)

scenario = ScenarioParameters(
    service_level=service_level,
    lead_time_change_pct=lead_time_change,
    demand_change_pct=demand_change,
    vendor_filter=vendor_filter,
    price_change_pct=price_change,
    cost_change_pct=cost_change,
)

snapshot = pipeline.run(st.session_state.active_skus, scenario)
kpis = snapshot.kpis

if not snapshot.active_skus:
    st.info("Select at least one SKU in the sidebar.")
elif not snapshot.sku_metrics:
    st.warning("The selected SKUs have fewer than two dated records; nothing to forecast yet.")

st.divider()

# --- Key Metrics Row ---
st.header("Key Metrics")
col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric("Total Revenue (history)", f"${kpis['total_revenue']:,.0f}")
with col2:
    st.metric("Total Inventory Value", f"${kpis['inventory_value']:,.0f}")
with col3:
    st.metric(
        "Projected Revenue (120d)",
        f"${kpis['projected_revenue']:,.0f}",
        delta=f"{kpis['average_inventory_turns']:.1f} avg turns",
    )
with col4:
    st.metric(
        "Items to Reorder",
        f"{kpis['items_to_reorder']}",
        delta=f"${kpis['total_purchase_value']:,.0f} to spend",
        delta_color="inverse",
    )

st.divider()

left_col, right_col = st.columns([2, 1])

with left_col:
    st.subheader("Sales & Forecast (Units)")
    series = pd.DataFrame(snapshot.sales_and_forecast)
    if len(series) > 0:
        fig_sales = go.Figure()
        fig_sales.add_trace(
            go.Scatter(x=series["date"], y=series["historical_units"], name="Historical Units",
                       mode="lines", line=dict(color="#4299E1", width=2))
        )
        fig_sales.add_trace(
            go.Scatter(x=series["date"], y=series["forecast_units"], name="Forecasted Units",
                       mode="lines", line=dict(color="#48BB78", width=2, dash="dash"))
        )
        fig_sales.update_layout(height=300, margin=dict(t=20, b=20, l=20, r=20))
        st.plotly_chart(fig_sales, use_container_width=True)

    st.subheader("Inventory Projection (Next 120 Days)")
    projection = pd.DataFrame(snapshot.projection)
    if len(projection) > 0:
        fig_proj = go.Figure(
            data=[go.Scatter(x=projection["label"], y=projection["inventory"], mode="lines",
                             name="Projected Inventory", line=dict(color="#9F7AEA", width=2))]
        )
        total_rop = sum(m.reorder_point for m in snapshot.sku_metrics.values())
        fig_proj.add_hline(y=total_rop, line_dash="dot", line_color="#ED8936",
                           annotation_text="Reorder point")
        fig_proj.update_layout(height=300, margin=dict(t=20, b=20, l=20, r=20))
        st.plotly_chart(fig_proj, use_container_width=True)
        st.caption("Each date sums the selected SKUs whose forecast covers it.")

    st.subheader("Cash Flow Projection")
    cash_flow = pd.DataFrame(snapshot.cash_flow)
    if len(cash_flow) > 0:
        fig_cash = go.Figure(
            data=[
                go.Bar(x=cash_flow["month"], y=cash_flow["revenue"], name="Revenue", marker_color="#38B2AC"),
                go.Bar(x=cash_flow["month"], y=cash_flow["cogs"], name="COGS", marker_color="#E53E3E"),
                go.Bar(x=cash_flow["month"], y=cash_flow["profit"], name="Profit", marker_color="#48BB78"),
            ]
        )
        fig_cash.update_layout(height=300, margin=dict(t=20, b=20, l=20, r=20), yaxis_title="$")
        st.plotly_chart(fig_cash, use_container_width=True)

with right_col:
    st.subheader("🛒 Purchase Advisor")
    if snapshot.recommendations:
        for rec in snapshot.recommendations:
            st.warning(
                f"**{rec['sku']}** ({rec['vendor'] or 'no vendor'}): on hand {rec['current_inventory']}, "
                f"reorder point {rec['reorder_point']}. "
                f"Recommend purchasing **{rec['purchase_quantity']:,}** units (${rec['purchase_value']:,.0f})."
            )
    else:
        st.success("All selected SKUs are above their reorder points. No immediate action needed.")

    st.subheader("✨ AI Strategic Briefing")
    if st.button("Generate Briefing", use_container_width=True):
        try:
            with st.spinner("Analyzing..."):
                briefing = BriefingGenerator(model=settings.briefing_model).generate(snapshot)
            st.markdown(briefing.to_markdown())
        except BriefingError as exc:
            st.error(exc.message)

st.divider()

# --- Per-SKU table ---
st.subheader("📋 Replenishment Parameters")
if snapshot.sku_metrics:
    table = pd.DataFrame(
        [
            {
                "SKU": m.sku,
                "ABC": snapshot.abc_classes.get(m.sku, "-"),
                "Vendor": m.vendor,
                "Avg Daily": m.avg_daily_sales,
                "Std Dev": m.std_dev_daily_sales,
                "Lead Time": m.adjusted_lead_time,
                "Safety Stock": m.safety_stock,
                "Reorder Point": m.reorder_point,
                "Max Stock": m.max_stock,
                "On Hand": m.current_inventory,
                "Buy": m.purchase_recommendation,
                "Turns": m.inventory_turns,
            }
            for m in snapshot.sku_metrics.values()
        ]
    )
    st.dataframe(
        table,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Avg Daily": st.column_config.NumberColumn(format="%.1f"),
            "Std Dev": st.column_config.NumberColumn(format="%.2f"),
            "Turns": st.column_config.NumberColumn(format="%.1f"),
        },
    )

with st.expander("📋 Data Quality Report"):
    quality_report = pipeline.quality_report
    summary = quality_report.summary()
    st.caption(
        f"{summary['total_rows']:,} rows, {summary['dropped_rows']} blank rows dropped, "
        f"{summary['critical']} critical / {summary['warnings']} warnings"
    )
    for issue in quality_report.issues:
        icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
        st.markdown(f"{icon} {issue.column}: {issue.description}")
