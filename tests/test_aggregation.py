from datetime import date

import pytest

from engine.aggregation import (
    cash_flow_projection,
    compute_kpis,
    filter_recommendations,
    historical_totals,
    merge_projections,
    sales_and_forecast_series,
)
from engine.config import TODAY_LABEL
from engine.records import ScenarioParameters
from engine.replenishment import compute_replenishment_metrics

from conftest import make_history


def metrics(records, skus, **scenario):
    return compute_replenishment_metrics(records, skus, ScenarioParameters(**scenario))


class TestVendorFilter:
    def test_filter_to_one_vendor(self, two_vendor_records):
        sku_metrics = metrics(two_vendor_records, ["P1", "P2"])
        recs = filter_recommendations(sku_metrics, "V1")
        kpis = compute_kpis(sku_metrics, recs)

        assert [r["sku"] for r in recs] == ["P1"]
        assert kpis["items_to_reorder"] == 1

    def test_all_vendors(self, two_vendor_records):
        sku_metrics = metrics(two_vendor_records, ["P1", "P2"])
        recs = filter_recommendations(sku_metrics, "All")

        assert {r["sku"] for r in recs} == {"P1", "P2"}
        assert compute_kpis(sku_metrics, recs)["total_purchase_value"] == pytest.approx(
            sum(m.purchase_recommendation * m.unit_cost for m in sku_metrics.values())
        )

    def test_no_purchase_needed_is_excluded(self, a1_history):
        records = make_history("A1", [10, 12, 8], current_inventory=10_000)
        assert filter_recommendations(metrics(records, ["A1"])) == []


class TestKpis:
    def test_reference_kpis(self, a1_history):
        sku_metrics = metrics(a1_history, ["A1"])
        recs = filter_recommendations(sku_metrics)
        kpis = compute_kpis(sku_metrics, recs)

        assert kpis["projected_revenue"] == 10 * 10.0 * 120
        assert kpis["average_inventory_turns"] == pytest.approx(3650 / 194)
        assert kpis["total_purchase_value"] == 329 * 5.0
        assert kpis["items_to_reorder"] == 1

    def test_empty_selection(self):
        assert compute_kpis({}, []) == {
            "projected_revenue": 0.0,
            "average_inventory_turns": 0.0,
            "total_purchase_value": 0.0,
            "items_to_reorder": 0,
        }

    def test_historical_totals(self, two_vendor_records):
        totals = historical_totals(two_vendor_records, ["P1"])

        assert totals["total_revenue"] == (10 + 12 + 8 + 11) * 10.0
        # latest inventory of every SKU, selected or not
        assert totals["inventory_value"] == 5 * 5.0 + 3 * 5.0


class TestMergedProjection:
    def test_sums_by_date_with_today_first(self, two_vendor_records):
        sku_metrics = metrics(two_vendor_records, ["P1", "P2"])
        merged = merge_projections(sku_metrics)

        assert merged[0] == {"label": TODAY_LABEL, "inventory": 5 + 3}
        assert len(merged) == 121
        p1, p2 = sku_metrics["P1"].projection_series, sku_metrics["P2"].projection_series
        assert merged[10]["inventory"] == p1[10].inventory + p2[10].inventory

    def test_different_end_dates_stay_chronological(self):
        early = make_history("E", [4, 4, 4], start=date(2024, 1, 1))
        late = make_history("L", [4, 4, 4], start=date(2024, 1, 11))
        merged = merge_projections(metrics(early + late, ["L", "E"]))

        labels = [row["label"] for row in merged]
        assert labels[0] == TODAY_LABEL
        assert labels[1:] == sorted(labels[1:])
        assert labels[1] == "2024-01-04"
        assert labels[-1] == "2024-05-12"

    def test_order_independent(self, two_vendor_records):
        forward = merge_projections(metrics(two_vendor_records, ["P1", "P2"]))
        backward = merge_projections(metrics(two_vendor_records, ["P2", "P1"]))
        assert forward == backward

    def test_empty(self):
        assert merge_projections({}) == []


class TestSeries:
    def test_cash_flow_buckets(self, a1_history):
        flow = cash_flow_projection(metrics(a1_history, ["A1"]), ScenarioParameters())

        assert [b["month"] for b in flow] == ["Jun '24", "Jul '24", "Aug '24", "Sep '24", "Oct '24"]
        assert flow[0]["revenue"] == pytest.approx(10 * 10.0 * 30)
        assert flow[0]["cogs"] == pytest.approx(10 * 5.0 * 30)
        assert flow[0]["profit"] == pytest.approx(1500)

    def test_cash_flow_price_and_cost_change(self, a1_history):
        scenario = ScenarioParameters(price_change_pct=10, cost_change_pct=-20)
        flow = cash_flow_projection(metrics(a1_history, ["A1"]), scenario)

        assert flow[0]["revenue"] == pytest.approx(3300)
        assert flow[0]["cogs"] == pytest.approx(1200)

    def test_sales_and_forecast_one_row_per_date(self):
        early = make_history("E", [4, 4, 4], start=date(2024, 1, 1))
        late = make_history("L", [6] * 10, start=date(2024, 1, 1))
        records = early + late
        series = sales_and_forecast_series(records, metrics(records, ["E", "L"]), ["E", "L"])

        dates = [row["date"] for row in series]
        assert dates == sorted(set(dates))
        # E is already forecasting while L still has history
        assert series[3] == {"date": "2024-01-04", "historical_units": 6, "forecast_units": 4}
        assert series[10] == {"date": "2024-01-11", "historical_units": None, "forecast_units": 4 + 6}
        assert series[-1]["date"] == "2024-05-09"

    def test_sales_and_forecast(self, a1_history):
        sku_metrics = metrics(a1_history, ["A1"])
        series = sales_and_forecast_series(a1_history, sku_metrics, ["A1"])

        assert len(series) == 10 + 120
        assert series[0] == {"date": "2024-06-01", "historical_units": 10, "forecast_units": None}
        assert series[10] == {"date": "2024-06-11", "historical_units": None, "forecast_units": 10}
