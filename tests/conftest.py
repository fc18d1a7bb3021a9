from datetime import date, timedelta

import pytest

from engine.records import SalesRecord

START = date(2024, 6, 1)


def make_history(
    sku: str,
    units: list[int],
    *,
    parent_item: str = "Mugs",
    lead_time: int = 7,
    current_inventory: int = 50,
    unit_cost: float = 5.0,
    unit_price: float = 10.0,
    vendor: str = "V1",
    start: date = START,
) -> list[SalesRecord]:
    """One record per day starting at `start`; inventory is set on every row."""
    return [
        SalesRecord(
            date=start + timedelta(days=i),
            parent_item=parent_item,
            sku=sku,
            units_sold=u,
            order_count=max(1, u // 2),
            unit_price=unit_price,
            unit_cost=unit_cost,
            vendor=vendor,
            current_inventory=current_inventory,
            lead_time=lead_time,
        )
        for i, u in enumerate(units)
    ]


@pytest.fixture
def a1_history():
    return make_history("A1", [10, 12, 8, 11, 9, 10, 13, 9, 10, 8])


@pytest.fixture
def two_vendor_records():
    v1 = make_history("P1", [10, 12, 8, 11], vendor="V1", current_inventory=5)
    v2 = make_history("P2", [20, 18, 22, 20], vendor="V2", current_inventory=3, parent_item="Pens")
    return v1 + v2
