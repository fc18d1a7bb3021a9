"""
Entry point tying classification, metrics and aggregation together.

run_pipeline() is the stateless version: records, selection and scenario
in, DashboardSnapshot out. ReplenishmentPipeline keeps the record set
between dashboard interactions and memoizes what does not need to be
recomputed when only the selection or scenario changes.
"""

from collections import OrderedDict
from dataclasses import dataclass, field, asdict
from typing import Iterable
import logging

from .aggregation import (
    cash_flow_projection,
    compute_kpis,
    filter_recommendations,
    historical_totals,
    merge_projections,
    sales_and_forecast_series,
)
from .classification import AbcClass, classify_skus
from .config import METRICS_CACHE_SIZE
from .quality import DataQualityReport
from .records import SalesRecord, ScenarioParameters, SkuMetrics
from .replenishment import compute_sku_metrics, group_by_sku

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """Everything the dashboard renders for one selection + scenario."""

    active_skus: list[str]
    scenario: ScenarioParameters
    abc_classes: dict[str, AbcClass]
    sku_metrics: dict[str, SkuMetrics]
    projection: list[dict]
    recommendations: list[dict]
    kpis: dict
    sales_and_forecast: list[dict] = field(default_factory=list)
    cash_flow: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = asdict(self)
        result["scenario"] = self.scenario.model_dump()
        return result


def build_sku_catalog(records: Iterable[SalesRecord]) -> dict[str, list[str]]:
    """Parent item -> its SKUs, both in first-appearance order."""
    catalog: dict[str, list[str]] = {}
    for record in records:
        skus = catalog.setdefault(record.parent_item, [])
        if record.sku not in skus:
            skus.append(record.sku)
    return catalog


def default_active_skus(catalog: dict[str, list[str]]) -> list[str]:
    """Initial selection: the first SKU of the first parent item."""
    for skus in catalog.values():
        if skus:
            return [skus[0]]
    return []


def list_vendors(records: Iterable[SalesRecord]) -> list[str]:
    return sorted({r.vendor for r in records if r.vendor})


def _assemble(
    records: list[SalesRecord],
    active_skus: list[str],
    scenario: ScenarioParameters,
    abc_classes: dict[str, AbcClass],
    sku_metrics: dict[str, SkuMetrics],
) -> DashboardSnapshot:
    recommendations = filter_recommendations(sku_metrics, scenario.vendor_filter)
    kpis = compute_kpis(sku_metrics, recommendations)
    kpis.update(historical_totals(records, active_skus))

    logger.info(
        "Recomputed %d/%d selected SKUs, %d to reorder (vendor=%s)",
        len(sku_metrics),
        len(active_skus),
        len(recommendations),
        scenario.vendor_filter,
    )

    return DashboardSnapshot(
        active_skus=active_skus,
        scenario=scenario,
        abc_classes=abc_classes,
        sku_metrics=sku_metrics,
        projection=merge_projections(sku_metrics),
        recommendations=recommendations,
        kpis=kpis,
        sales_and_forecast=sales_and_forecast_series(records, sku_metrics, active_skus),
        cash_flow=cash_flow_projection(sku_metrics, scenario),
    )


def run_pipeline(
    records: Iterable[SalesRecord],
    active_skus: Iterable[str],
    scenario: ScenarioParameters | None = None,
) -> DashboardSnapshot:
    """Classify, compute metrics and aggregate in one call, without caching."""
    records = list(records)
    active = list(dict.fromkeys(active_skus))
    scenario = scenario or ScenarioParameters()

    history = group_by_sku(records)
    sku_metrics = {}
    for sku in active:
        metrics = compute_sku_metrics(sku, history.get(sku, []), scenario)
        if metrics is not None:
            sku_metrics[sku] = metrics

    return _assemble(records, active, scenario, classify_skus(records), sku_metrics)


class ReplenishmentPipeline:
    """
    Holds the current record set and memoizes derived results.

    - ABC classes are cached per dataset version
    - SkuMetrics are cached per (dataset version, sku, scenario.metrics_key),
      least recently used entries dropped beyond max_cached_metrics

    Vendor filter, price and cost changes do not enter the metrics key, so
    moving those sliders only re-runs aggregation. replace_records() starts
    a new dataset version and drops every cached value. Cached and fresh
    results are identical.
    """

    def __init__(
        self,
        records: Iterable[SalesRecord] = (),
        quality_report: DataQualityReport | None = None,
        max_cached_metrics: int = METRICS_CACHE_SIZE,
    ):
        self.version = 0
        self.max_cached_metrics = max_cached_metrics
        self.quality_report = quality_report
        self._records: list[SalesRecord] = []
        self._history: dict[str, list[SalesRecord]] = {}
        self._abc_cache: dict[int, dict[str, AbcClass]] = {}
        self._metrics_cache: OrderedDict[tuple, SkuMetrics | None] = OrderedDict()
        self.replace_records(records, quality_report)

    @property
    def records(self) -> list[SalesRecord]:
        return list(self._records)

    def replace_records(
        self,
        records: Iterable[SalesRecord],
        quality_report: DataQualityReport | None = None,
    ) -> None:
        self._records = list(records)
        self._history = group_by_sku(self._records)
        self.quality_report = quality_report
        self.version += 1
        self._abc_cache.clear()
        self._metrics_cache.clear()
        logger.debug(
            "Dataset version %d: %d records, %d SKUs",
            self.version,
            len(self._records),
            len(self._history),
        )

    def catalog(self) -> dict[str, list[str]]:
        return build_sku_catalog(self._records)

    def abc_classes(self) -> dict[str, AbcClass]:
        if self.version not in self._abc_cache:
            self._abc_cache[self.version] = classify_skus(self._records)
        return self._abc_cache[self.version]

    def sku_metrics(self, sku: str, scenario: ScenarioParameters) -> SkuMetrics | None:
        key = (self.version, sku, scenario.metrics_key)
        if key in self._metrics_cache:
            self._metrics_cache.move_to_end(key)
            return self._metrics_cache[key]

        metrics = compute_sku_metrics(sku, self._history.get(sku, []), scenario)
        self._metrics_cache[key] = metrics
        while len(self._metrics_cache) > self.max_cached_metrics:
            self._metrics_cache.popitem(last=False)
        return metrics

    @property
    def cache_size(self) -> int:
        return len(self._metrics_cache)

    def run(
        self,
        active_skus: Iterable[str],
        scenario: ScenarioParameters | None = None,
    ) -> DashboardSnapshot:
        active = list(dict.fromkeys(active_skus))
        scenario = scenario or ScenarioParameters()

        sku_metrics = {}
        for sku in active:
            metrics = self.sku_metrics(sku, scenario)
            if metrics is not None:
                sku_metrics[sku] = metrics

        return _assemble(self._records, active, scenario, self.abc_classes(), sku_metrics)
