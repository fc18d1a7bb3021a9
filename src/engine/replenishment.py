"""
Replenishment metrics per SKU.

For each SKU with enough history this derives the statistical safety
stock, reorder point and order-up-to level, decides whether to buy and how
much, and simulates on-hand inventory day by day over the forecast horizon.

Formulas (d = avg daily units, s = sample std dev, L = adjusted lead time):
    safety stock   SS  = Z * s * sqrt(L)
    reorder point  ROP = d * L + SS
    max stock      MAX = ROP + d * review period
    inventory turns    = annual COGS / average inventory value

Everything here is a pure function of the records and the scenario: no
randomness, no I/O, same input gives the same output.
"""

from collections import defaultdict
from datetime import timedelta
from typing import Iterable, Sequence
import logging
import math

import numpy as np

from .config import (
    FALLBACK_Z,
    FORECAST_HORIZON_DAYS,
    MIN_HISTORY_RECORDS,
    REVIEW_PERIOD_DAYS,
    SERVICE_LEVEL_Z,
    TODAY_LABEL,
)
from .records import (
    ForecastPoint,
    ProjectionPoint,
    SalesRecord,
    ScenarioParameters,
    SkuMetrics,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def z_score_for(service_level: float) -> float:
    """Z multiplier for a service level, 98%-equivalent when not in the table."""
    z = SERVICE_LEVEL_Z.get(service_level)
    if z is None:
        logger.warning(
            "Service level %s%% not in table, using Z=%s", service_level, FALLBACK_Z
        )
        return FALLBACK_Z
    return z


def group_by_sku(records: Iterable[SalesRecord]) -> dict[str, list[SalesRecord]]:
    """Group records per SKU, keeping only the ones with a usable date, oldest first."""
    grouped: dict[str, list[SalesRecord]] = defaultdict(list)
    for record in records:
        if record.date is not None:
            grouped[record.sku].append(record)
    return {sku: sorted(rows, key=lambda r: r.date) for sku, rows in grouped.items()}


def demand_statistics(units: list[int]) -> tuple[float, float]:
    """Mean and sample standard deviation (n-1) of daily units; std is 0 for n < 2."""
    if not units:
        return 0.0, 0.0
    values = np.asarray(units, dtype=float)
    mean = float(values.mean())
    std = float(values.std(ddof=1)) if len(values) > 1 else 0.0
    return mean, std


def adjusted_lead_time(base_lead_time: int, change_pct: float) -> int:
    return max(0, round_half_up(base_lead_time * (1 + change_pct / 100)))


def inventory_turns(
    avg_daily_sales: float, max_stock: int, safety_stock: int, unit_cost: float
) -> float:
    """Annual cost of goods sold over average inventory value, 0 when there is no value."""
    average_inventory_value = ((max_stock + safety_stock) / 2) * unit_cost
    if average_inventory_value == 0:
        return 0.0
    return (avg_daily_sales * 365 * unit_cost) / average_inventory_value


def project_inventory(
    current_inventory: int,
    forecast: Sequence[ForecastPoint],
    lead_time: int,
    order_quantity: int,
) -> list[ProjectionPoint]:
    """
    Walk on-hand inventory forward one forecast day at a time.

    A positive order_quantity lands once, on day == lead_time. Day 0 is
    "Today" at current inventory. Inventory is allowed to go negative
    (unmet demand shows as a dip below zero).
    """
    projection = [ProjectionPoint(label=TODAY_LABEL, inventory=current_inventory)]
    level = current_inventory
    for day, point in enumerate(forecast, start=1):
        level -= point.units
        if day == lead_time and order_quantity > 0:
            level += order_quantity
        projection.append(ProjectionPoint(label=point.date, inventory=level))
    return projection


def compute_sku_metrics(
    sku: str,
    history: list[SalesRecord],
    scenario: ScenarioParameters,
) -> SkuMetrics | None:
    """
    Derive SkuMetrics from one SKU's dated history (sorted oldest first).

    Returns None when there are fewer than MIN_HISTORY_RECORDS rows.
    """
    if len(history) < MIN_HISTORY_RECORDS:
        logger.debug("Skipping %s: %d dated records", sku, len(history))
        return None

    earliest, latest = history[0], history[-1]

    avg_daily_sales, std_dev = demand_statistics([r.units_sold for r in history])
    lead_time = adjusted_lead_time(earliest.lead_time, scenario.lead_time_change_pct)
    z = z_score_for(scenario.service_level)

    safety_stock = max(0, round_half_up(z * std_dev * math.sqrt(lead_time)))
    reorder_point = round_half_up(avg_daily_sales * lead_time + safety_stock)
    max_stock = round_half_up(reorder_point + avg_daily_sales * REVIEW_PERIOD_DAYS)

    current_inventory = latest.current_inventory
    if current_inventory <= reorder_point:
        purchase = max(0, max_stock - current_inventory)
    else:
        purchase = 0

    daily_units = max(
        0, round_half_up(avg_daily_sales * (1 + scenario.demand_change_pct / 100))
    )
    forecast = tuple(
        ForecastPoint(
            date=(latest.date + timedelta(days=day)).isoformat(), units=daily_units
        )
        for day in range(1, FORECAST_HORIZON_DAYS + 1)
    )

    return SkuMetrics(
        sku=sku,
        avg_daily_sales=avg_daily_sales,
        std_dev_daily_sales=std_dev,
        adjusted_lead_time=lead_time,
        safety_stock=safety_stock,
        reorder_point=reorder_point,
        max_stock=max_stock,
        current_inventory=current_inventory,
        purchase_recommendation=purchase,
        inventory_turns=inventory_turns(
            avg_daily_sales, max_stock, safety_stock, latest.unit_cost
        ),
        vendor=latest.vendor,
        unit_cost=latest.unit_cost,
        unit_price=latest.unit_price,
        forecast_series=forecast,
        projection_series=tuple(
            project_inventory(current_inventory, forecast, lead_time, purchase)
        ),
    )


def compute_replenishment_metrics(
    records: Iterable[SalesRecord],
    active_skus: Iterable[str],
    scenario: ScenarioParameters,
) -> dict[str, SkuMetrics]:
    """
    Compute SkuMetrics for every active SKU that has enough history.

    SKUs with too little history, or not present in the records at all, are
    simply absent from the result. Output order follows active_skus.
    """
    history_by_sku = group_by_sku(records)
    results: dict[str, SkuMetrics] = {}
    for sku in dict.fromkeys(active_skus):
        metrics = compute_sku_metrics(sku, history_by_sku.get(sku, []), scenario)
        if metrics is not None:
            results[sku] = metrics
    return results
