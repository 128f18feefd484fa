"""Month class for scoping the current view to one calendar month."""

import re
from datetime import date
from dateutil.relativedelta import relativedelta
from typing import Optional

_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


class Month:
    """A (year, month) pair with inclusive first/last day boundaries."""

    def __init__(self, year: int, month: int):
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range: {month}")
        self.year = year
        self.month = month

    @classmethod
    def parse(cls, key: str) -> "Month":
        """Parse a 'YYYY-MM' key."""
        match = _KEY_RE.match(str(key).strip())
        if not match:
            raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_date(cls, d: date) -> "Month":
        return cls(d.year, d.month)

    @classmethod
    def current(cls, today: Optional[date] = None) -> "Month":
        return cls.from_date(today or date.today())

    @property
    def key(self) -> str:
        """Canonical, lexically sortable 'YYYY-MM' key."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return self.first_day + relativedelta(months=1, days=-1)

    def shift(self, months: int) -> "Month":
        """Month `months` calendar months away (negative = earlier)."""
        return Month.from_date(self.first_day + relativedelta(months=months))

    def contains(self, d: date) -> bool:
        """Inclusive check at calendar-day granularity."""
        return self.first_day <= d <= self.last_day

    def __eq__(self, other) -> bool:
        if not isinstance(other, Month):
            return NotImplemented
        return (self.year, self.month) == (other.year, other.month)

    def __hash__(self) -> int:
        return hash((self.year, self.month))

    def __repr__(self) -> str:
        return f"Month({self.key!r})"

    def __str__(self) -> str:
        return self.key
