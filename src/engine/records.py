"""
Typed values flowing through the replenishment engine.

SalesRecord is what the ingestion layer hands over: one validated row per
SKU per day. ScenarioParameters is the what-if configuration picked in the
dashboard. SkuMetrics is everything the engine derives for one SKU under
one scenario.
"""

from dataclasses import dataclass, asdict
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from .config import ALL_VENDORS


@dataclass(frozen=True)
class SalesRecord:
    """One day of sales and stock history for one SKU."""

    date: date | None  # None when the source date could not be parsed
    parent_item: str
    sku: str
    units_sold: int
    order_count: int
    unit_price: float
    unit_cost: float
    vendor: str
    current_inventory: int
    lead_time: int


class ScenarioParameters(BaseModel):
    """What-if settings applied on top of historical demand."""

    model_config = ConfigDict(frozen=True)

    service_level: int = Field(
        default=98, description="Target service level in percent (90, 95, 98 or 99)"
    )
    lead_time_change_pct: float = Field(default=0, ge=-50, le=50)
    demand_change_pct: float = Field(default=0, ge=-50, le=50)
    vendor_filter: str = Field(default=ALL_VENDORS)
    # Only used by the cash flow projection
    price_change_pct: float = Field(default=0, ge=-50, le=50)
    cost_change_pct: float = Field(default=0, ge=-50, le=50)

    @property
    def metrics_key(self) -> tuple:
        """The fields per-SKU metrics depend on; vendor, price and cost only affect aggregation."""
        return (self.service_level, self.lead_time_change_pct, self.demand_change_pct)


@dataclass(frozen=True)
class ForecastPoint:
    date: str
    units: int


@dataclass(frozen=True)
class ProjectionPoint:
    label: str
    inventory: int


@dataclass(frozen=True)
class SkuMetrics:
    """
    Replenishment figures for one SKU under one scenario.

    Immutable; cached instances are shared across snapshots.
    """

    sku: str
    avg_daily_sales: float
    std_dev_daily_sales: float
    adjusted_lead_time: int
    safety_stock: int
    reorder_point: int
    max_stock: int
    current_inventory: int
    purchase_recommendation: int
    inventory_turns: float
    vendor: str
    unit_cost: float
    unit_price: float
    forecast_series: tuple[ForecastPoint, ...] = ()
    projection_series: tuple[ProjectionPoint, ...] = ()

    @property
    def needs_reorder(self) -> bool:
        return self.purchase_recommendation > 0

    def to_dict(self) -> dict:
        return asdict(self)
