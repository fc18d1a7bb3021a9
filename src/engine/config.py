"""
Constants and runtime settings for the replenishment engine.

The tables here are fixed business rules. Anything that varies per
deployment (log level, briefing model, default data source) is read from
the environment by Settings.from_env().
"""

import os
from dataclasses import dataclass

# Service level (%) -> Z multiplier
SERVICE_LEVEL_Z = {
    90: 1.28,
    95: 1.645,
    98: 2.05,
    99: 2.33,
}

# Used when the requested service level is not in the table (98% equivalent)
FALLBACK_Z = 2.05

FORECAST_HORIZON_DAYS = 120
REVIEW_PERIOD_DAYS = 30
MIN_HISTORY_RECORDS = 2

# Cumulative share of sales volume
ABC_A_THRESHOLD = 0.80
ABC_B_THRESHOLD = 0.95

CASH_FLOW_BUCKET_DAYS = 30

METRICS_CACHE_SIZE = 1024  # per-SKU entries kept by ReplenishmentPipeline

TODAY_LABEL = "Today"
ALL_VENDORS = "All"

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime options for the dashboard and the briefing generator."""

    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    briefing_model: str = "gpt-4o-mini"
    data_source: str = "data/sales.csv"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.environ.get("FORECAST_LOG_LEVEL", cls.log_level),
            log_format=os.environ.get("FORECAST_LOG_FORMAT", cls.log_format),
            briefing_model=os.environ.get(
                "FORECAST_BRIEFING_MODEL", cls.briefing_model
            ),
            data_source=os.environ.get("FORECAST_DATA_SOURCE", cls.data_source),
        )
