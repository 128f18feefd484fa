"""Aggregation and service due calculations.

Everything here is a pure function of its arguments: the record list, the
vehicle, the month and "today" are always passed in, never read from the
surrounding state.
"""

import math
from datetime import date
from typing import Iterable, List, Optional, Union

from .month import Month
from .record import Record, RecordType
from .service_status import ServiceStatus
from .severity import Severity
from .summary import CategoryTotal, MonthSummary, TrendPoint
from .vehicle import Vehicle

WARNING_DISTANCE = 500
WARNING_DAYS = 7
TRAILING_MONTHS = 12


# =============================================================================
# Helpers
# =============================================================================


def as_month(month: Union[Month, str]) -> Month:
    """Accept a Month or a 'YYYY-MM' key."""
    return month if isinstance(month, Month) else Month.parse(month)


def as_date(value: Union[date, str]) -> date:
    """Accept a date or an ISO 'YYYY-MM-DD' string."""
    return value if isinstance(value, date) else date.fromisoformat(value)


def as_amount(value) -> float:
    """
    Numeric value of a stored amount.

    Numbers pass through unchanged (negatives included). Missing amounts
    count as zero and unparseable text becomes NaN rather than raising.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _record_date(record: Record) -> Optional[date]:
    try:
        return as_date(record.date)
    except (TypeError, ValueError):
        return None


def filter_month_records(
    records: Iterable[Record], vehicle_id: str, month: Union[Month, str]
) -> List[Record]:
    """
    Records of one vehicle dated within the month (inclusive), by date.

    Records with an unreadable date never match any month.
    """
    month = as_month(month)
    matched = []
    for record in records:
        if record.vehicle_id != vehicle_id:
            continue
        record_date = _record_date(record)
        if record_date is not None and month.contains(record_date):
            matched.append(record)
    return sorted(matched, key=lambda r: str(r.date))


def _summarize(records: Iterable[Record]) -> MonthSummary:
    income = 0
    outflow = 0
    for record in records:
        if record.type == RecordType.INCOME:
            income += as_amount(record.amount)
        elif record.is_outflow:
            outflow += as_amount(record.amount)
    return MonthSummary(income=income, outflow=outflow, net=income - outflow)


# =============================================================================
# Aggregator
# =============================================================================


def compute_month_summary(
    records: Iterable[Record], vehicle_id: str, month: Union[Month, str]
) -> MonthSummary:
    """Income, outflow (maintenance + repair + expense) and net for a month."""
    return _summarize(filter_month_records(records, vehicle_id, month))


def compute_category_breakdown(
    records: Iterable[Record], vehicle_id: str, month: Union[Month, str]
) -> List[CategoryTotal]:
    """
    Outflow totals per category for a month.

    Blank categories are grouped under "Other". The list keeps the order in
    which each category first appears in date order, so chart legends stay
    stable between recomputations.
    """
    totals = {}
    for record in filter_month_records(records, vehicle_id, month):
        if not record.is_outflow:
            continue
        label = record.category_label
        totals[label] = totals.get(label, 0) + as_amount(record.amount)
    return [CategoryTotal(category=k, total=v) for k, v in totals.items()]


def compute_trailing_series(
    records: Iterable[Record],
    vehicle_id: str,
    month: Union[Month, str],
    window_size: int = TRAILING_MONTHS,
) -> List[TrendPoint]:
    """
    Monthly income/outflow/net for `window_size` months ending at `month`.

    Oldest month first; the last entry's key is always `month` itself.
    """
    month = as_month(month)
    vehicle_records = [r for r in records if r.vehicle_id == vehicle_id]
    series = []
    for offset in range(window_size - 1, -1, -1):
        point_month = month.shift(-offset)
        totals = _summarize(
            filter_month_records(vehicle_records, vehicle_id, point_month)
        )
        series.append(
            TrendPoint(
                month_key=point_month.key,
                income=totals.income,
                outflow=totals.outflow,
                net=totals.net,
            )
        )
    return series


# =============================================================================
# Maintenance scheduler
# =============================================================================


def check_severity(
    distance_remaining: float,
    days_remaining: float,
    warning_distance: float = WARNING_DISTANCE,
    warning_days: float = WARNING_DAYS,
) -> Severity:
    """Whichever of distance or time is worse decides the severity."""
    if distance_remaining <= 0 or days_remaining <= 0:
        return Severity.OVERDUE
    if distance_remaining < warning_distance or days_remaining < warning_days:
        return Severity.WARNING
    return Severity.OK


def compute_service_status(
    vehicle: Vehicle,
    today: Union[date, str],
    warning_distance: float = WARNING_DISTANCE,
    warning_days: float = WARNING_DAYS,
) -> ServiceStatus:
    """
    Distance and days remaining until the next service.

    Logic:
    - Distance elapsed never goes below zero (odometer rolled back)
    - Days elapsed is a plain calendar difference and may be negative when
      the last service date lies after `today`
    - Either remaining value reaching zero makes the service overdue
    """
    distance_elapsed = max(0, vehicle.odometer - vehicle.last_service_km)
    distance_remaining = vehicle.service_interval_km - distance_elapsed

    days_elapsed = (as_date(today) - as_date(vehicle.last_service_date)).days
    days_remaining = vehicle.service_interval_days - days_elapsed

    return ServiceStatus(
        distance_remaining=distance_remaining,
        days_remaining=days_remaining,
        severity=check_severity(
            distance_remaining, days_remaining, warning_distance, warning_days
        ),
    )


def record_service_now(vehicle: Vehicle, today: Union[date, str]) -> None:
    """Move the service checkpoint to the current odometer and `today`."""
    vehicle.last_service_km = vehicle.odometer
    vehicle.last_service_date = as_date(today).isoformat()
