"""ServiceStatus dataclass for calculated maintenance due state."""

from dataclasses import dataclass

from .severity import Severity


@dataclass
class ServiceStatus:
    """Remaining distance/days until the next service and its severity."""

    distance_remaining: float
    days_remaining: int
    severity: Severity

    @property
    def is_due(self) -> bool:
        return self.severity in (Severity.OVERDUE, Severity.WARNING)

    @property
    def distance_overdue(self) -> bool:
        return self.distance_remaining <= 0

    @property
    def days_overdue(self) -> bool:
        return self.days_remaining <= 0
