"""LedgerState - the explicitly owned collection of vehicles, records and settings."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from .calculations import as_date
from .currency import DEFAULT_CURRENCY, normalize_currency
from .month import Month
from .record import Record, RecordType
from .vehicle import Vehicle, new_id

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("type", "date", "amount", "odometer", "category", "note")


@dataclass
class Settings:
    """Small scalar settings persisted next to the collections."""

    active_vehicle_id: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    month: Optional[str] = None


class LedgerState:
    """
    All vehicles, records and settings of one ledger.

    The aggregation functions never see this object directly; callers pass
    `state.records` and the ids they need. Mutations here are plain in-memory
    edits and the persistence adapter saves the whole state afterwards.
    """

    def __init__(
        self,
        vehicles: Optional[List[Vehicle]] = None,
        records: Optional[List[Record]] = None,
        settings: Optional[Settings] = None,
        today: Optional[date] = None,
    ):
        self.vehicles = vehicles if vehicles is not None else []
        self.records = records if records is not None else []
        self.settings = settings or Settings()
        if self.settings.month is None:
            self.settings.month = Month.current(today).key

    @classmethod
    def default(cls, today: Optional[date] = None) -> "LedgerState":
        """One default vehicle, active, viewing the current month."""
        today = today or date.today()
        vehicle = Vehicle.default(today=today)
        return cls(
            vehicles=[vehicle],
            records=[],
            settings=Settings(
                active_vehicle_id=vehicle.id,
                currency=DEFAULT_CURRENCY,
                month=Month.current(today).key,
            ),
        )

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    @property
    def month(self) -> Month:
        """Selected month; set on construction when the settings had none."""
        return Month.parse(self.settings.month)

    def select_month(self, key: str) -> None:
        self.settings.month = Month.parse(key).key

    def select_currency(self, code: str) -> None:
        self.settings.currency = normalize_currency(code)

    # -------------------------------------------------------------------------
    # Vehicles
    # -------------------------------------------------------------------------

    def get_vehicle(self, vehicle_id: Optional[str]) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    @property
    def active_vehicle(self) -> Optional[Vehicle]:
        return self.get_vehicle(self.settings.active_vehicle_id)

    def ensure_active_vehicle(self) -> Optional[Vehicle]:
        """
        Repair a dangling active vehicle id.

        Falls back to the first vehicle, or to no active vehicle at all
        when the ledger has none.
        """
        vehicle = self.active_vehicle
        if vehicle is not None:
            return vehicle
        fallback = self.vehicles[0] if self.vehicles else None
        if self.settings.active_vehicle_id is not None or fallback is not None:
            logger.info(
                "Active vehicle %r not found, selecting %r",
                self.settings.active_vehicle_id,
                fallback.id if fallback else None,
            )
        self.settings.active_vehicle_id = fallback.id if fallback else None
        return fallback

    def select_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            raise KeyError(f"Unknown vehicle id '{vehicle_id}'")
        self.settings.active_vehicle_id = vehicle.id
        return vehicle

    def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Append a vehicle and make it the active one."""
        self.vehicles.append(vehicle)
        self.settings.active_vehicle_id = vehicle.id
        return vehicle

    def update_vehicle(self, **patch: Any) -> Vehicle:
        """Patch the active vehicle's fields."""
        vehicle = self.active_vehicle
        if vehicle is None:
            raise KeyError("No active vehicle")
        vehicle.patch(**patch)
        return vehicle

    def delete_vehicle(self, vehicle_id: str) -> List[Record]:
        """
        Remove a vehicle together with its records.

        Returns the removed records so a caller can export them first.
        """
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            raise KeyError(f"Unknown vehicle id '{vehicle_id}'")
        removed = [r for r in self.records if r.vehicle_id == vehicle_id]
        self.records = [r for r in self.records if r.vehicle_id != vehicle_id]
        self.vehicles.remove(vehicle)
        logger.info(
            "Deleted vehicle %s and %d record(s)", vehicle_id, len(removed)
        )
        self.ensure_active_vehicle()
        return removed

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def get_record(self, record_id: str) -> Optional[Record]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def vehicle_records(self, vehicle_id: Optional[str] = None) -> List[Record]:
        """Records of a vehicle (the active one by default) in stored order."""
        vehicle_id = vehicle_id or self.settings.active_vehicle_id
        return [r for r in self.records if r.vehicle_id == vehicle_id]

    def orphaned_records(self) -> List[Record]:
        """Records whose vehicle id matches no vehicle."""
        known = {v.id for v in self.vehicles}
        return [r for r in self.records if r.vehicle_id not in known]

    def add_record(
        self,
        type: RecordType,
        date: str,
        amount: float,
        odometer: Optional[float] = None,
        category: Optional[str] = None,
        note: Optional[str] = None,
        vehicle_id: Optional[str] = None,
    ) -> Record:
        """Append a record for the active vehicle (or `vehicle_id`)."""
        vehicle_id = vehicle_id or self.settings.active_vehicle_id
        if self.get_vehicle(vehicle_id) is None:
            raise KeyError(f"Unknown vehicle id '{vehicle_id}'")
        record = Record(
            id=new_id(),
            vehicle_id=vehicle_id,
            type=type,
            date=date,
            amount=amount,
            odometer=odometer,
            category=category,
            note=note,
        )
        self.records.append(record)
        return record

    def update_record(self, record_id: str, **fields: Any) -> Record:
        """
        Replace the given fields of a record, keeping its id and vehicle.

        All fields are checked before any is written: an unknown field raises
        AttributeError, an unreadable type, date or amount raises ValueError.
        """
        record = self.get_record(record_id)
        if record is None:
            raise KeyError(f"Unknown record id '{record_id}'")
        checked = {}
        for field, value in fields.items():
            if field not in RECORD_FIELDS:
                raise AttributeError(f"Record has no editable field '{field}'")
            if field == "type":
                value = RecordType(value)
            elif field == "date":
                value = _checked_date(value)
            elif field == "amount":
                value = _checked_amount(value)
            checked[field] = value
        for field, value in checked.items():
            setattr(record, field, value)
        return record

    def delete_record(self, record_id: str) -> Record:
        record = self.get_record(record_id)
        if record is None:
            raise KeyError(f"Unknown record id '{record_id}'")
        self.records.remove(record)
        return record

    def submit_record(
        self, form: Dict[str, Any], editing_id: Optional[str] = None
    ) -> Optional[Record]:
        """
        Handle a record form submission.

        A missing amount or date blocks the submission: nothing changes and
        None is returned. Otherwise the amount is converted to a number and
        the record is added, or updated when `editing_id` is given.
        """
        amount = form.get("amount")
        record_date = form.get("date")
        if amount in (None, "") or not record_date:
            logger.debug("Record form missing amount or date, ignored")
            return None
        try:
            amount = float(amount)
            as_date(record_date)
            record_type = RecordType(form.get("type") or RecordType.EXPENSE.value)
        except (TypeError, ValueError):
            logger.debug("Record form has an unreadable type, amount or date, ignored")
            return None
        fields = {
            "type": record_type,
            "date": record_date,
            "amount": amount,
            "odometer": _optional_number(form.get("odometer")),
            "category": form.get("category") or None,
            "note": form.get("note") or None,
        }
        if editing_id:
            return self.update_record(editing_id, **fields)
        return self.add_record(**fields)


def _checked_date(value) -> str:
    try:
        return as_date(value).isoformat()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None


def _checked_amount(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid amount '{value}'") from None


def _optional_number(value) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
