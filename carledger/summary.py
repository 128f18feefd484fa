"""Aggregate result types handed to the renderers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MonthSummary:
    """Income, outflow and net for one vehicle in one month."""

    income: float = 0
    outflow: float = 0
    net: float = 0


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float


@dataclass(frozen=True)
class TrendPoint:
    """One month of the trailing series, keyed 'YYYY-MM'."""

    month_key: str
    income: float = 0
    outflow: float = 0
    net: float = 0
