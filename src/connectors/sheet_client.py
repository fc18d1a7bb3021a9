"""
Loader for the sales/inventory spreadsheet.

The sheet has one row per SKU per day with these columns, in this order:

    date | parentItem | sku | unitsSold | orderCount | unitPrice |
    unitCost | vendor | currentInventory | leadTime

Older copies of the sheet carry two more columns (reorderPoint,
safetyStock) that were filled in by hand; they are ignored, the engine
computes both.

Handled here:
- CSV or Excel exports, local or by URL (Google Sheets links are turned
  into their CSV export URL)
- Header check against the expected layout
- Fully blank rows dropped
- Numbers read like a lenient spreadsheet user would ("12 units" -> 12,
  blank -> 0), text stripped, dates in several formats
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence
import logging
import re

import pandas as pd

from engine.exceptions import EmptyDatasetError, IngestionError, SchemaMismatchError
from engine.pipeline import ReplenishmentPipeline
from engine.parsers import DateParser, normalize_header, parse_float, parse_int, parse_text
from engine.quality import DataQualityChecker, DataQualityReport
from engine.records import SalesRecord

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = [
    "date",
    "parentItem",
    "sku",
    "unitsSold",
    "orderCount",
    "unitPrice",
    "unitCost",
    "vendor",
    "currentInventory",
    "leadTime",
]

_SPREADSHEET_ID = re.compile(r"spreadsheets/d/([a-zA-Z0-9_-]+)")
_GID = re.compile(r"[#&?]gid=(\d+)")


def csv_export_url(sheet_url: str) -> str:
    """
    Turn a Google Sheets link into its CSV export URL.

    Raises IngestionError when the link has no spreadsheet id.
    """
    match = _SPREADSHEET_ID.search(sheet_url)
    if not match:
        raise IngestionError(
            "Invalid Google Sheet URL format.",
            code="invalid_url",
            details={"url": sheet_url},
        )
    url = f"https://docs.google.com/spreadsheets/d/{match.group(1)}/export?format=csv"
    gid = _GID.search(sheet_url)
    if gid:
        url += f"&gid={gid.group(1)}"
    return url


def check_columns(columns: Sequence) -> None:
    """Raise SchemaMismatchError unless the first columns match EXPECTED_COLUMNS."""
    found = [parse_text(c) for c in columns]
    leading = [normalize_header(c) for c in found[: len(EXPECTED_COLUMNS)]]
    if leading != [normalize_header(c) for c in EXPECTED_COLUMNS]:
        raise SchemaMismatchError(EXPECTED_COLUMNS, found)


def _is_blank(cell) -> bool:
    return parse_text(cell) == ""


def parse_rows(
    rows: Iterable[Sequence], date_parser: DateParser | None = None
) -> list[SalesRecord]:
    """
    Build SalesRecords from positional rows (header already removed).

    Short rows are padded with blanks, fully blank rows are skipped.
    """
    date_parser = date_parser or DateParser()
    records = []
    for row in rows:
        cells = list(row)[: len(EXPECTED_COLUMNS)]
        cells += [None] * (len(EXPECTED_COLUMNS) - len(cells))
        if all(_is_blank(c) for c in cells):
            continue
        (date, parent, sku, units, orders, price, cost, vendor, inventory, lead_time) = cells
        records.append(
            SalesRecord(
                date=date_parser.parse(date),
                parent_item=parse_text(parent),
                sku=parse_text(sku),
                units_sold=max(0, parse_int(units)),
                order_count=max(0, parse_int(orders)),
                unit_price=max(0.0, parse_float(price)),
                unit_cost=max(0.0, parse_float(cost)),
                vendor=parse_text(vendor),
                current_inventory=parse_int(inventory),
                lead_time=max(0, parse_int(lead_time)),
            )
        )
    return records


@dataclass
class LoadedSheet:
    """Records parsed from one export plus what the quality checks found."""

    source: str
    records: list[SalesRecord]
    quality_report: DataQualityReport


class SheetLoader:
    """
    Loads the sales sheet from a CSV/Excel file or URL.

    Usage:
        loaded = SheetLoader("data/sales.csv").load()
        pipeline = ReplenishmentPipeline(loaded.records)
    """

    EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}

    def __init__(self, source: str | Path, sheet_name: str | int = 0):
        source = str(source)
        if "docs.google.com/spreadsheets" in source and "export?format=csv" not in source:
            source = csv_export_url(source)
        self.source = source
        self.sheet_name = sheet_name
        self.date_parser = DateParser()

    def read_frame(self) -> pd.DataFrame:
        """Read the raw export with every cell as text."""
        try:
            if Path(self.source.split("?")[0]).suffix.lower() in self.EXCEL_SUFFIXES:
                frame = pd.read_excel(self.source, sheet_name=self.sheet_name, dtype=str)
            else:
                frame = pd.read_csv(self.source, dtype=str, skip_blank_lines=True)
        except FileNotFoundError as exc:
            raise IngestionError(
                f"Sales export not found: {self.source}",
                code="not_found",
                details={"source": self.source},
            ) from exc
        except ImportError as exc:
            # .xls needs xlrd, which is not installed by default
            raise IngestionError(
                f"Cannot read {self.source}: {exc}. Save the sheet as .xlsx or .csv.",
                code="unsupported_format",
                details={"source": self.source},
            ) from exc
        except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError, OSError) as exc:
            raise IngestionError(
                f"Error reading sales export {self.source}: {exc}",
                code="read_failed",
                details={"source": self.source},
            ) from exc

        check_columns(frame.columns)
        frame = frame.iloc[:, : len(EXPECTED_COLUMNS)]
        frame.columns = EXPECTED_COLUMNS
        return frame

    def load(self) -> LoadedSheet:
        frame = self.read_frame()
        if frame.empty:
            raise EmptyDatasetError(self.source)

        blank = frame.map(_is_blank).all(axis=1)
        kept = frame[~blank].reset_index(drop=True)
        dropped = int(blank.sum())
        if kept.empty:
            raise EmptyDatasetError(self.source)

        records = parse_rows(kept.itertuples(index=False, name=None), self.date_parser)
        report = self._check_quality(kept, dropped)

        logger.info(
            "Loaded %d records (%d SKUs) from %s, %d blank rows dropped",
            len(records),
            len({r.sku for r in records}),
            self.source,
            dropped,
        )
        return LoadedSheet(source=self.source, records=records, quality_report=report)

    def _check_quality(self, frame: pd.DataFrame, dropped: int) -> DataQualityReport:
        checked = frame.copy()
        checked["date_parsed"] = self.date_parser.parse_series(checked["date"])

        checker = (
            DataQualityChecker("Sales Sheet")
            .check_unparsed("date", "date_parsed")
            .check_duplicates(["sku", "date"])
            .check_range("unitsSold", min_val=0, severity="warning")
            .check_range("currentInventory", min_val=0, severity="critical")
            .check_range("leadTime", min_val=0, max_val=365)
        )
        # date_parsed is derived, blank parses are already reported as unparsed
        report = checker.run(checked, dropped_rows=dropped)
        report.issues = [i for i in report.issues if i.column != "date_parsed"]
        return report


def refresh_pipeline(pipeline: ReplenishmentPipeline, source: str | Path) -> LoadedSheet:
    """
    Re-read the sheet and swap the records into an existing pipeline.

    The pipeline starts a new dataset version, so every memoized result is
    dropped. On any loading error the pipeline keeps its current records.
    """
    loaded = SheetLoader(source).load()
    pipeline.replace_records(loaded.records, loaded.quality_report)
    logger.info("Reloaded %s as dataset version %d", loaded.source, pipeline.version)
    return loaded
