"""
Dashboard-level aggregation over per-SKU replenishment metrics.

Computes:
- Merged inventory projection across the selected SKUs
- Purchase recommendations filtered by vendor
- Headline KPIs (projected revenue, turns, purchase value, items to reorder)
- Historical totals, sales-and-forecast series, monthly cash flow

All outputs are plain lists/dicts so they can be rendered or serialized
without knowing about the engine's types.
"""

from typing import Iterable, Mapping

import pandas as pd

from .config import (
    ALL_VENDORS,
    CASH_FLOW_BUCKET_DAYS,
    FORECAST_HORIZON_DAYS,
    TODAY_LABEL,
)
from .records import SalesRecord, ScenarioParameters, SkuMetrics


def merge_projections(metrics: Mapping[str, SkuMetrics]) -> list[dict]:
    """
    Sum projected inventory across SKUs by label.

    "Today" comes first, forecast dates follow in chronological order. SKUs
    whose history ends on different days contribute to different dates; a
    date only reflects the SKUs that have a projection for it.
    """
    rows = [
        (point.label, point.inventory)
        for sku_metrics in metrics.values()
        for point in sku_metrics.projection_series
    ]
    if not rows:
        return []

    frame = pd.DataFrame(rows, columns=["label", "inventory"])
    merged = frame.groupby("label", sort=False)["inventory"].sum().reset_index()

    is_today = merged["label"] == TODAY_LABEL
    merged["order_date"] = pd.to_datetime(merged["label"].where(~is_today), errors="coerce")
    merged["is_dated"] = ~is_today
    merged = merged.sort_values(["is_dated", "order_date", "label"], kind="mergesort")

    return [
        {"label": row.label, "inventory": int(row.inventory)}
        for row in merged.itertuples(index=False)
    ]


def filter_recommendations(
    metrics: Mapping[str, SkuMetrics], vendor_filter: str = ALL_VENDORS
) -> list[dict]:
    """
    SKUs that need a purchase order, restricted to one vendor unless "All".

    Returns one dict per SKU with the fields the purchase advisor shows.
    """
    recommendations = []
    for sku_metrics in metrics.values():
        if not sku_metrics.needs_reorder:
            continue
        if vendor_filter != ALL_VENDORS and sku_metrics.vendor != vendor_filter:
            continue
        recommendations.append(
            {
                "sku": sku_metrics.sku,
                "vendor": sku_metrics.vendor,
                "current_inventory": sku_metrics.current_inventory,
                "reorder_point": sku_metrics.reorder_point,
                "max_stock": sku_metrics.max_stock,
                "purchase_quantity": sku_metrics.purchase_recommendation,
                "unit_cost": sku_metrics.unit_cost,
                "purchase_value": sku_metrics.purchase_recommendation
                * sku_metrics.unit_cost,
            }
        )
    return recommendations


def compute_kpis(
    metrics: Mapping[str, SkuMetrics], recommendations: list[dict]
) -> dict:
    """
    Headline numbers for the KPI cards.

    projected_revenue is the first forecast day's units times unit price,
    extrapolated flat over the whole horizon. The forecast is flat anyway,
    so this equals the series sum unless the horizon were made date-varying.
    """
    projected_revenue = sum(
        (m.forecast_series[0].units if m.forecast_series else 0)
        * m.unit_price
        * FORECAST_HORIZON_DAYS
        for m in metrics.values()
    )
    turns = [m.inventory_turns for m in metrics.values()]

    return {
        "projected_revenue": float(projected_revenue),
        "average_inventory_turns": float(sum(turns) / len(turns)) if turns else 0.0,
        "total_purchase_value": float(
            sum(r["purchase_quantity"] * r["unit_cost"] for r in recommendations)
        ),
        "items_to_reorder": len(recommendations),
    }


def historical_totals(
    records: Iterable[SalesRecord], active_skus: Iterable[str]
) -> dict:
    """
    Revenue over the active SKUs' history, and stock value over every SKU.

    Inventory value uses each SKU's most recent dated record.
    """
    frame = pd.DataFrame(
        [
            (r.date, r.sku, r.units_sold, r.unit_price, r.unit_cost, r.current_inventory)
            for r in records
        ],
        columns=["date", "sku", "units_sold", "unit_price", "unit_cost", "current_inventory"],
    )
    if frame.empty:
        return {"total_revenue": 0.0, "inventory_value": 0.0}

    active = frame[frame["sku"].isin(set(active_skus))]
    total_revenue = (active["units_sold"] * active["unit_price"]).sum()

    dated = frame[frame["date"].notna()]
    latest = (
        dated.sort_values("date", kind="mergesort").groupby("sku", sort=False).tail(1)
    )
    inventory_value = (latest["current_inventory"] * latest["unit_cost"]).sum()

    return {
        "total_revenue": float(total_revenue),
        "inventory_value": float(inventory_value),
    }


def sales_and_forecast_series(
    records: Iterable[SalesRecord],
    metrics: Mapping[str, SkuMetrics],
    active_skus: Iterable[str],
) -> list[dict]:
    """
    Historical and forecast units per day for the active SKUs.

    One entry per date in chronological order, with "date",
    "historical_units" and "forecast_units". When the selected SKUs'
    histories end on different days a date can carry both; otherwise the
    field that does not apply is None.
    """
    active = set(active_skus)
    history = pd.DataFrame(
        [(r.date.isoformat(), r.units_sold) for r in records if r.sku in active and r.date is not None],
        columns=["date", "units"],
    )
    forecast = pd.DataFrame(
        [
            (point.date, point.units)
            for sku_metrics in metrics.values()
            for point in sku_metrics.forecast_series
        ],
        columns=["date", "units"],
    )
    if history.empty and forecast.empty:
        return []

    merged = pd.concat(
        [
            history.groupby("date")["units"].sum().rename("historical_units"),
            forecast.groupby("date")["units"].sum().rename("forecast_units"),
        ],
        axis=1,
        join="outer",
    ).sort_index()

    return [
        {
            "date": day,
            "historical_units": None if pd.isna(row.historical_units) else int(row.historical_units),
            "forecast_units": None if pd.isna(row.forecast_units) else int(row.forecast_units),
        }
        for day, row in zip(merged.index, merged.itertuples(index=False))
    ]


def cash_flow_projection(
    metrics: Mapping[str, SkuMetrics], scenario: ScenarioParameters
) -> list[dict]:
    """
    Monthly revenue / COGS / profit over the forecast horizon.

    One bucket per CASH_FLOW_BUCKET_DAYS, sampled on day 1, 31, 61, ... and
    on the last horizon day; the sampled day's figures stand for the whole
    bucket. Price and cost are adjusted by the scenario's change percents.
    """
    price_factor = 1 + scenario.price_change_pct / 100
    cost_factor = 1 + scenario.cost_change_pct / 100

    rows = []
    for sku_metrics in metrics.values():
        for day, point in enumerate(sku_metrics.forecast_series, start=1):
            if day % CASH_FLOW_BUCKET_DAYS != 1 and day != FORECAST_HORIZON_DAYS:
                continue
            rows.append(
                {
                    "day": day,
                    "date": pd.Timestamp(point.date),
                    "revenue": point.units * sku_metrics.unit_price * price_factor * CASH_FLOW_BUCKET_DAYS,
                    "cogs": point.units * sku_metrics.unit_cost * cost_factor * CASH_FLOW_BUCKET_DAYS,
                }
            )
    if not rows:
        return []

    buckets = (
        pd.DataFrame(rows)
        .groupby("day")
        .agg(date=("date", "min"), revenue=("revenue", "sum"), cogs=("cogs", "sum"))
        .sort_index()
    )

    return [
        {
            "month": row.date.strftime("%b '%y"),
            "revenue": float(row.revenue),
            "cogs": float(row.cogs),
            "profit": float(row.revenue - row.cogs),
        }
        for row in buckets.itertuples()
    ]
