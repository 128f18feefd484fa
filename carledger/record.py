"""Record class for income and expense movements."""

from enum import Enum
from typing import Dict, List, Optional, Union


class RecordType(Enum):
    INCOME = "income"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    EXPENSE = "expense"


OUTFLOW_TYPES = (RecordType.MAINTENANCE, RecordType.REPAIR, RecordType.EXPENSE)

FALLBACK_CATEGORY = "Other"

# Suggested labels per type. The category field itself stays free text.
CATEGORY_OPTIONS: Dict[RecordType, List[str]] = {
    RecordType.INCOME: ["Income"],
    RecordType.MAINTENANCE: [
        "Oil change",
        "Oil filter",
        "Air filter",
        "Spark plugs",
        "Brake fluid",
        "Alignment and balancing",
        "Battery",
        "General inspection",
    ],
    RecordType.REPAIR: [
        "Brakes",
        "Suspension",
        "Steering",
        "Cooling",
        "Transmission",
        "Engine",
        "Electrical",
        "Tires",
    ],
    RecordType.EXPENSE: [
        "Tolls",
        "Parking",
        "Car wash",
        "Insurance",
        "Registration",
        "Technical inspection",
        "Other",
    ],
}


def suggested_categories(
    record_type: Union[RecordType, str], current: Optional[str] = None
) -> List[str]:
    """Suggested categories for a type, keeping a custom current value."""
    options = list(CATEGORY_OPTIONS[RecordType(record_type)])
    if current and current not in options:
        options.append(current)
    return options


class Record:
    """A single financial movement belonging to one vehicle."""

    def __init__(
        self,
        id: str,
        vehicle_id: str,
        type: Union[RecordType, str],
        date: str,
        amount: float,
        odometer: Optional[float] = None,
        category: Optional[str] = None,
        note: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.type = RecordType(type)
        self.date = date
        self.amount = amount
        self.odometer = odometer
        self.category = category
        self.note = note

    @property
    def is_outflow(self) -> bool:
        return self.type in OUTFLOW_TYPES

    @property
    def category_label(self) -> str:
        """Category used for grouping; blank categories fall back to 'Other'."""
        return self.category or FALLBACK_CATEGORY
