"""Vehicle class - identification, odometer, and service checkpoint."""

import uuid
from datetime import date
from typing import Optional, Union

from .fuel_type import FuelType

DEFAULT_NAME = "My vehicle"
DEFAULT_INTERVAL_KM = 5000
DEFAULT_INTERVAL_DAYS = 180

EDITABLE_FIELDS = (
    "name",
    "plate",
    "make",
    "model",
    "year",
    "fuel_type",
    "odometer",
    "service_interval_km",
    "service_interval_days",
    "last_service_km",
    "last_service_date",
)


def new_id() -> str:
    """Short random identifier for vehicles and records."""
    return uuid.uuid4().hex[:8]


class Vehicle:
    """A tracked vehicle and its last service checkpoint."""

    def __init__(
        self,
        id: str,
        name: str = DEFAULT_NAME,
        plate: str = "",
        make: str = "",
        model: str = "",
        year: Optional[int] = None,
        fuel_type: Union[FuelType, str] = FuelType.GASOLINE,
        odometer: float = 0,
        service_interval_km: float = DEFAULT_INTERVAL_KM,
        service_interval_days: int = DEFAULT_INTERVAL_DAYS,
        last_service_km: float = 0,
        last_service_date: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.plate = plate
        self.make = make
        self.model = model
        self.year = year
        self.fuel_type = FuelType.parse(fuel_type)
        self.odometer = odometer
        self.service_interval_km = service_interval_km
        self.service_interval_days = service_interval_days
        self.last_service_km = last_service_km
        if last_service_date is None:
            last_service_date = date.today().isoformat()
        self.last_service_date = last_service_date

    @classmethod
    def default(
        cls, name: str = DEFAULT_NAME, today: Optional[date] = None
    ) -> "Vehicle":
        """New vehicle with a fresh id, serviced today at 0 km."""
        today = today or date.today()
        return cls(id=new_id(), name=name, last_service_date=today.isoformat())

    @property
    def display_name(self) -> str:
        """Name, falling back to plate and then id."""
        return self.name or self.plate or self.id

    def patch(self, **fields) -> None:
        """
        Update fields in place.

        Every field is checked before any is written: unknown field names
        raise AttributeError, an unreadable fuel type or last service date
        raises ValueError.
        """
        checked = {}
        for field, value in fields.items():
            if field not in EDITABLE_FIELDS:
                raise AttributeError(f"Vehicle has no editable field '{field}'")
            if field == "fuel_type":
                value = FuelType.parse(value)
            elif field == "last_service_date":
                value = _service_date(value)
            checked[field] = value
        for field, value in checked.items():
            setattr(self, field, value)


def _service_date(value: Union[date, str]) -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid last service date '{value}', expected YYYY-MM-DD"
        ) from None
