"""Console logging configuration shared by the dashboard and scripts."""

import logging

from .config import DEFAULT_LOG_FORMAT


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> logging.Logger:
    """
    Configure the root logger with a single console handler.

    Safe to call more than once (streamlit re-runs the script on every
    interaction): existing handlers are replaced, not stacked.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(fmt))
    root_logger.addHandler(console_handler)

    return root_logger
