"""YAML loading and saving of the ledger state file."""

import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

import yaml

from .calculations import as_date
from .currency import normalize_currency
from .fuel_type import FuelType
from .month import Month
from .record import Record
from .state import LedgerState, Settings
from .vehicle import DEFAULT_INTERVAL_DAYS, DEFAULT_INTERVAL_KM, Vehicle

logger = logging.getLogger(__name__)

T = TypeVar("T")

VEHICLES_KEY = "vehicles"
RECORDS_KEY = "records"
SETTINGS_KEY = "settings"


def _iso(value: Any) -> Any:
    """Unquoted YAML dates load as date objects; keep them as ISO strings."""
    return value.isoformat() if isinstance(value, date) else value


def _number(value: Any) -> float:
    """A finite number; booleans, None and text raise."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value!r}")
    return value


def _year(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected a year, got {value!r}")
    return value


def _iso_date(value: Any) -> str:
    return as_date(_iso(value)).isoformat()


def _vehicle_field(
    dct: Dict[str, Any], key: str, check: Callable[[Any], Any], default: Any
) -> Any:
    """A checked vehicle field; a missing or invalid value yields the default."""
    if key not in dct:
        return default
    try:
        return check(dct[key])
    except (TypeError, ValueError):
        logger.warning(
            "Vehicle %s: invalid %s %r, using %r", dct.get("id"), key, dct[key], default
        )
        return default


def _parse_vehicle(dct: Dict[str, Any], today: date) -> Vehicle:
    return Vehicle(
        dct["id"],
        dct.get("name", ""),
        dct.get("plate", ""),
        dct.get("make", ""),
        dct.get("model", ""),
        _vehicle_field(dct, "year", _year, None),
        _vehicle_field(dct, "fuelType", FuelType.parse, FuelType.GASOLINE),
        _vehicle_field(dct, "odometer", _number, 0),
        _vehicle_field(dct, "serviceIntervalKm", _number, DEFAULT_INTERVAL_KM),
        _vehicle_field(dct, "serviceIntervalDays", _number, DEFAULT_INTERVAL_DAYS),
        _vehicle_field(dct, "lastServiceKm", _number, 0),
        _vehicle_field(dct, "lastServiceDate", _iso_date, today.isoformat()),
    )


def _parse_record(dct: Dict[str, Any]) -> Record:
    return Record(
        dct["id"],
        dct["vehicleId"],
        dct["type"],
        _iso(dct["date"]),
        dct["amount"],
        dct.get("odometer"),
        dct.get("category"),
        dct.get("note"),
    )


def _parse_settings(dct: Dict[str, Any]) -> Settings:
    month = dct.get("month")
    return Settings(
        active_vehicle_id=dct.get("activeVehicleId"),
        currency=normalize_currency(dct.get("currency")),
        month=Month.parse(month).key if month else None,
    )


def _load_collection(
    data: Dict[str, Any],
    key: str,
    parse: Callable[[Dict[str, Any]], T],
    default: Callable[[], List[T]],
) -> List[T]:
    """
    Parse one top-level list item by item.

    A malformed item is logged and skipped; the rest of the list still loads.
    A section that is not a list, or whose items are all malformed, yields
    the default.
    """
    raw = data.get(key)
    if raw is None:
        return default()
    if not isinstance(raw, list):
        logger.warning(
            "Ignoring corrupt '%s' section: expected a list, got %s",
            key,
            type(raw).__name__,
        )
        return default()
    items = []
    for index, item in enumerate(raw):
        try:
            if not isinstance(item, dict):
                raise TypeError(f"expected a mapping, got {type(item).__name__}")
            items.append(parse(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping corrupt '%s' item %d: %s", key, index, e)
    if raw and not items:
        return default()
    return items


def _read_document(filename: Union[str, Path]) -> Dict[str, Any]:
    """Raw YAML mapping, or {} when the file is missing or unreadable."""
    try:
        with open(filename, "r", encoding="utf-8") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader)
    except FileNotFoundError:
        logger.info("No ledger file at %s, starting fresh", filename)
        return {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read ledger file %s: %s", filename, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ledger file %s is not a mapping, ignoring it", filename)
        return {}
    return data


def load_state(
    filename: Union[str, Path], today: Optional[date] = None
) -> LedgerState:
    """
    Load the ledger state from a YAML file.

    Never raises for bad data: a missing or unparseable file, or a corrupt
    section, is replaced by its default (one default vehicle, no records,
    default settings). Malformed vehicles and records are skipped one by
    one, an invalid vehicle field falls back to its default value, and a
    dangling active vehicle id is repaired.
    """
    today = today or date.today()
    data = _read_document(filename)

    vehicles = _load_collection(
        data,
        VEHICLES_KEY,
        lambda dct: _parse_vehicle(dct, today),
        lambda: [Vehicle.default(today=today)],
    )
    records = _load_collection(data, RECORDS_KEY, _parse_record, list)

    raw_settings = data.get(SETTINGS_KEY)
    try:
        settings = _parse_settings(raw_settings or {})
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning("Ignoring corrupt '%s' section: %s", SETTINGS_KEY, e)
        settings = Settings()

    state = LedgerState(
        vehicles=vehicles, records=records, settings=settings, today=today
    )
    state.ensure_active_vehicle()
    return state


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the YAML dict format (camelCase keys)."""
    return {
        "id": vehicle.id,
        "name": vehicle.name,
        "plate": vehicle.plate,
        "make": vehicle.make,
        "model": vehicle.model,
        "year": vehicle.year,
        "fuelType": vehicle.fuel_type.value,
        "odometer": vehicle.odometer,
        "serviceIntervalKm": vehicle.service_interval_km,
        "serviceIntervalDays": vehicle.service_interval_days,
        "lastServiceKm": vehicle.last_service_km,
        "lastServiceDate": vehicle.last_service_date,
    }


def _record_to_dict(record: Record) -> Dict[str, Any]:
    """Serialize a Record, omitting None values for cleaner YAML."""
    d: Dict[str, Any] = {
        "id": record.id,
        "vehicleId": record.vehicle_id,
        "type": record.type.value,
        "date": record.date,
        "amount": record.amount,
    }
    if record.odometer is not None:
        d["odometer"] = record.odometer
    if record.category is not None:
        d["category"] = record.category
    if record.note is not None:
        d["note"] = record.note
    return d


def state_to_dict(state: LedgerState) -> Dict[str, Any]:
    return {
        VEHICLES_KEY: [_vehicle_to_dict(v) for v in state.vehicles],
        RECORDS_KEY: [_record_to_dict(r) for r in state.records],
        SETTINGS_KEY: {
            "activeVehicleId": state.settings.active_vehicle_id,
            "currency": state.settings.currency,
            "month": state.settings.month,
        },
    }


def save_state(filename: Union[str, Path], state: LedgerState) -> None:
    """Write the whole ledger state back to its YAML file."""
    with open(filename, "w", encoding="utf-8") as fp:
        yaml.dump(
            state_to_dict(state),
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
    logger.debug(
        "Saved %d vehicle(s) and %d record(s) to %s",
        len(state.vehicles),
        len(state.records),
        filename,
    )
