"""
ABC classification of SKUs by sales volume.

Class A covers the SKUs that together make up the first 80% of units sold,
B the next 15%, C the tail. Ties in volume are ordered by SKU so the same
data always produces the same classes.
"""

from typing import Iterable, Literal
import logging

import pandas as pd

from .config import ABC_A_THRESHOLD, ABC_B_THRESHOLD
from .records import SalesRecord

logger = logging.getLogger(__name__)

AbcClass = Literal["A", "B", "C"]


def sales_volume_by_sku(records: Iterable[SalesRecord]) -> pd.DataFrame:
    """
    Total units sold per SKU, ranked for classification.

    Returns DataFrame with:
    - sku
    - total_units
    - cumulative_units
    - cumulative_share (0-1, NaN when nothing was sold at all)
    """
    frame = pd.DataFrame(
        [(r.sku, r.units_sold) for r in records], columns=["sku", "units_sold"]
    )
    if frame.empty:
        return pd.DataFrame(
            columns=["sku", "total_units", "cumulative_units", "cumulative_share"]
        )

    volume = (
        frame.groupby("sku", sort=False)["units_sold"]
        .sum()
        .rename("total_units")
        .reset_index()
        .sort_values(["total_units", "sku"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )
    total = volume["total_units"].sum()
    volume["cumulative_units"] = volume["total_units"].cumsum()
    volume["cumulative_share"] = (
        volume["cumulative_units"] / total if total > 0 else float("nan")
    )
    return volume


def assign_class(cumulative_share: float) -> AbcClass:
    if cumulative_share <= ABC_A_THRESHOLD:
        return "A"
    elif cumulative_share <= ABC_B_THRESHOLD:
        return "B"
    return "C"


def classify_skus(records: Iterable[SalesRecord]) -> dict[str, AbcClass]:
    """
    Map every SKU in the record set to its ABC class.

    Returns an empty mapping when total volume is zero: there is nothing to
    rank, which the dashboard shows as "insufficient data".
    """
    volume = sales_volume_by_sku(records)
    if volume.empty or volume["total_units"].sum() <= 0:
        logger.debug("ABC classification skipped: no sales volume")
        return {}

    classes = {
        row.sku: assign_class(row.cumulative_share)
        for row in volume.itertuples(index=False)
    }
    logger.debug(
        "Classified %d SKUs (A=%d, B=%d, C=%d)",
        len(classes),
        sum(1 for c in classes.values() if c == "A"),
        sum(1 for c in classes.values() if c == "B"),
        sum(1 for c in classes.values() if c == "C"),
    )
    return classes
