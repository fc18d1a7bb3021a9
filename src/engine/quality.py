"""
Data quality checks for loaded sales history.

The engine itself never rejects a record, it just skips what it cannot use.
These checks make the skipped or suspicious rows visible to whoever
maintains the sheet: blank cells, dates that did not parse, negative
stock, duplicate SKU/day rows.
"""

from dataclasses import dataclass, field
from typing import Callable, Any
import logging

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class DataQualityIssue:
    """A single data quality issue found in the sheet."""

    column: str
    issue_type: str  # "missing", "unparsed", "out_of_range", "duplicate"
    severity: str  # "critical", "warning", "info"
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """Quality findings for one loaded source."""

    source_name: str
    total_rows: int
    dropped_rows: int = 0
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "critical"]

    @property
    def warning_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "dropped_rows": self.dropped_rows,
            "critical": len(self.critical_issues),
            "warnings": len(self.warning_issues),
            "info": len([i for i in self.issues if i.severity == "info"]),
        }


def _severity_for(pct: float) -> str:
    return "critical" if pct > 20 else "warning" if pct > 5 else "info"


class DataQualityChecker:
    """
    Runs a list of checks over a raw sales frame.

    Missing values are always checked. Further checks are registered with
    the check_* builders, which return self so they can be chained:

        DataQualityChecker("Sheet1").check_duplicates(["sku", "date"]).run(df)
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self._checks: list[Callable[[pd.DataFrame], list[DataQualityIssue]]] = []
        self.add_check(self._check_missing_values)

    def add_check(
        self, check_fn: Callable[[pd.DataFrame], list[DataQualityIssue]]
    ) -> "DataQualityChecker":
        self._checks.append(check_fn)
        return self

    def _check_missing_values(self, df: pd.DataFrame) -> list[DataQualityIssue]:
        issues = []
        for col in df.columns:
            blank = df[col].isna() | (df[col].astype(str).str.strip() == "")
            missing = int(blank.sum())
            if missing > 0:
                pct = (missing / len(df)) * 100
                issues.append(
                    DataQualityIssue(
                        column=col,
                        issue_type="missing",
                        severity=_severity_for(pct),
                        count=missing,
                        percentage=pct,
                        description=f"{missing:,} blank cells ({pct:.1f}%), read as 0 or empty",
                    )
                )
        return issues

    def check_duplicates(
        self, key_columns: list[str], severity: str = "warning"
    ) -> "DataQualityChecker":
        """Flag rows that repeat the same key (e.g. one SKU twice on one day)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if not set(key_columns).issubset(df.columns):
                return []
            dupes = int(df.duplicated(subset=key_columns, keep=False).sum())
            if dupes == 0:
                return []
            return [
                DataQualityIssue(
                    column=", ".join(key_columns),
                    issue_type="duplicate",
                    severity=severity,
                    count=dupes,
                    percentage=(dupes / len(df)) * 100,
                    description=f"{dupes:,} rows share the same {' + '.join(key_columns)}",
                )
            ]

        return self.add_check(check)

    def check_unparsed(
        self,
        raw_column: str,
        parsed_column: str,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Flag cells that had a value but produced nothing after parsing."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if raw_column not in df.columns or parsed_column not in df.columns:
                return []
            has_value = df[raw_column].notna() & (df[raw_column].astype(str).str.strip() != "")
            unparsed = has_value & df[parsed_column].isna()
            count = int(unparsed.sum())
            if count == 0:
                return []
            return [
                DataQualityIssue(
                    column=raw_column,
                    issue_type="unparsed",
                    severity=severity,
                    count=count,
                    percentage=(count / len(df)) * 100,
                    sample_values=df.loc[unparsed, raw_column].head(5).tolist(),
                    description=f"{count:,} values couldn't be parsed",
                )
            ]

        return self.add_check(check)

    def check_range(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Flag numeric values outside [min_val, max_val]."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            values = pd.to_numeric(df[column], errors="coerce")
            mask = pd.Series(False, index=df.index)
            if min_val is not None:
                mask |= values < min_val
            if max_val is not None:
                mask |= values > max_val

            count = int(mask.sum())
            if count == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="out_of_range",
                    severity=severity,
                    count=count,
                    percentage=(count / len(df)) * 100,
                    sample_values=df.loc[mask, column].head(5).tolist(),
                    description=f"{count:,} values outside expected range",
                )
            ]

        return self.add_check(check)

    def run(self, df: pd.DataFrame, dropped_rows: int = 0) -> DataQualityReport:
        all_issues = []
        if len(df) > 0:
            for check_fn in self._checks:
                all_issues.extend(check_fn(df))

        report = DataQualityReport(
            source_name=self.source_name,
            total_rows=len(df),
            dropped_rows=dropped_rows,
            issues=all_issues,
        )
        for issue in report.issues:
            logger.info(
                "%s: %s [%s] %s", self.source_name, issue.column, issue.severity, issue.description
            )
        return report
