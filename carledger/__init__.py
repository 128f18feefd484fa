"""
Vehicle income, expense and maintenance tracking.

This package provides the data models and calculations behind the ledger:
- Vehicle, FuelType: Tracked vehicles and their service checkpoint
- Record, RecordType: Income and outflow movements
- Month: Calendar month scoping the current view
- MonthSummary, CategoryTotal, TrendPoint: Aggregation results
- Severity, ServiceStatus: Calculated maintenance due state
- LedgerState, Settings: The owned collection of all of the above
- load_state / save_state: YAML persistence adapter
"""

from .severity import Severity
from .fuel_type import FuelType
from .vehicle import Vehicle
from .record import (
    Record,
    RecordType,
    OUTFLOW_TYPES,
    CATEGORY_OPTIONS,
    FALLBACK_CATEGORY,
    suggested_categories,
)
from .month import Month
from .summary import MonthSummary, CategoryTotal, TrendPoint
from .service_status import ServiceStatus
from .calculations import (
    filter_month_records,
    compute_month_summary,
    compute_category_breakdown,
    compute_trailing_series,
    check_severity,
    compute_service_status,
    record_service_now,
)
from .currency import CURRENCIES, format_money
from .state import LedgerState, Settings
from .export import export_records_csv, export_filename, write_records_csv
from .loader import load_state, save_state

__all__ = [
    "Severity",
    "FuelType",
    "Vehicle",
    "Record",
    "RecordType",
    "OUTFLOW_TYPES",
    "CATEGORY_OPTIONS",
    "FALLBACK_CATEGORY",
    "suggested_categories",
    "Month",
    "MonthSummary",
    "CategoryTotal",
    "TrendPoint",
    "ServiceStatus",
    "filter_month_records",
    "compute_month_summary",
    "compute_category_breakdown",
    "compute_trailing_series",
    "check_severity",
    "compute_service_status",
    "record_service_now",
    "CURRENCIES",
    "format_money",
    "LedgerState",
    "Settings",
    "export_records_csv",
    "export_filename",
    "write_records_csv",
    "load_state",
    "save_state",
]
