# Replenishment calculation engine: classification, per-SKU metrics,
# dashboard aggregation. Pure functions of the loaded records.

from .records import SalesRecord, ScenarioParameters, SkuMetrics, ForecastPoint, ProjectionPoint
from .classification import classify_skus, sales_volume_by_sku
from .replenishment import compute_replenishment_metrics, compute_sku_metrics
from .aggregation import (
    merge_projections,
    filter_recommendations,
    compute_kpis,
    historical_totals,
    sales_and_forecast_series,
    cash_flow_projection,
)
from .pipeline import (
    DashboardSnapshot,
    ReplenishmentPipeline,
    run_pipeline,
    build_sku_catalog,
    default_active_skus,
)

__all__ = [
    "SalesRecord",
    "ScenarioParameters",
    "SkuMetrics",
    "ForecastPoint",
    "ProjectionPoint",
    "classify_skus",
    "sales_volume_by_sku",
    "compute_replenishment_metrics",
    "compute_sku_metrics",
    "merge_projections",
    "filter_recommendations",
    "compute_kpis",
    "historical_totals",
    "sales_and_forecast_series",
    "cash_flow_projection",
    "DashboardSnapshot",
    "ReplenishmentPipeline",
    "run_pipeline",
    "build_sku_catalog",
    "default_active_skus",
]
