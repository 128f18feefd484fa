"""CSV export of a vehicle's records."""

import csv
import io
from pathlib import Path
from typing import Iterable, Optional, Union

from .record import Record
from .vehicle import Vehicle

CSV_HEADER = ["id", "vehicle", "type", "date", "amount", "odometer", "category", "note"]


def _number(value) -> str:
    """Render 100.0 as '100' and blanks as ''."""
    if value is None or value == "":
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def record_row(record: Record) -> list:
    """One CSV row in the fixed export column order."""
    note = (record.note or "").replace("\r\n", " ").replace("\n", " ")
    return [
        record.id,
        record.vehicle_id,
        record.type.value,
        record.date,
        _number(record.amount),
        _number(record.odometer),
        record.category or "",
        note,
    ]


def export_records_csv(records: Iterable[Record], vehicle_id: str) -> str:
    """
    Serialize one vehicle's records to CSV text.

    Rows keep stored order. Absent odometer and category are blank and
    newlines inside notes are collapsed to spaces.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        if record.vehicle_id == vehicle_id:
            writer.writerow(record_row(record))
    return buf.getvalue()


def export_filename(vehicle: Optional[Vehicle]) -> str:
    """Download name, e.g. 'vehicle_ABC123.csv'."""
    label = None
    if vehicle is not None:
        label = vehicle.plate or vehicle.name
    return f"vehicle_{label or 'unnamed'}.csv"


def write_records_csv(
    filename: Union[str, Path], records: Iterable[Record], vehicle_id: str
) -> None:
    """Write the CSV export to a file."""
    with open(filename, "w", newline="", encoding="utf-8") as fp:
        fp.write(export_records_csv(records, vehicle_id))
