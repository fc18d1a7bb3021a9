"""Error types raised at the edges of the forecasting dashboard."""


class ForecastDashboardError(Exception):
    """Base exception for the forecasting dashboard."""

    def __init__(self, message=None, code=None, details=None):
        """
        Args:
            message: Error message
            code: Short machine-readable error code
            details: Additional error details (dict)
        """
        self.message = message or "An error occurred in the forecasting dashboard"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict:
        """Convert the exception to a dictionary for display."""
        error_dict = {
            "error": self.__class__.__name__,
            "message": self.message,
        }

        if self.code:
            error_dict["code"] = self.code

        if self.details:
            error_dict["details"] = self.details

        return error_dict


class IngestionError(ForecastDashboardError):
    """The sales export could not be read."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Could not load sales data"
        super().__init__(message, code, details)


class SchemaMismatchError(IngestionError):
    """The export's header row does not match the expected columns."""

    def __init__(self, expected: list[str], found: list[str]):
        missing = [c for c in expected if c not in found]
        super().__init__(
            f"Sheet columns do not match the expected layout (missing: {', '.join(missing) or 'none'})",
            code="schema_mismatch",
            details={"expected": expected, "found": found, "missing": missing},
        )
        self.expected = expected
        self.found = found
        self.missing = missing


class EmptyDatasetError(IngestionError):
    """The export has a header but no data rows."""

    def __init__(self, source: str):
        super().__init__(
            f"No data found in {source}",
            code="empty_dataset",
            details={"source": source},
        )


class BriefingError(ForecastDashboardError):
    """The strategic briefing could not be generated."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Could not generate the briefing"
        super().__init__(message, code, details)
