# Source-specific loaders that turn spreadsheet exports into SalesRecords

from .sheet_client import SheetLoader, LoadedSheet, csv_export_url, parse_rows, refresh_pipeline

__all__ = ["SheetLoader", "LoadedSheet", "csv_export_url", "parse_rows", "refresh_pipeline"]
