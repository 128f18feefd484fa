#!/usr/bin/env python3
"""
Unified CLI for the vehicle income and maintenance ledger.

Commands:
  init           - Create a ledger file with one default vehicle
  vehicles       - List vehicles
  add-vehicle    - Add a vehicle and make it active
  select         - Make another vehicle active
  update-vehicle - Change fields of the active vehicle
  delete-vehicle - Remove a vehicle and its records
  status         - Show when the next service is due
  service-now    - Record a service at the current odometer, today
  add            - Add an income or expense record
  edit           - Change fields of a record
  delete         - Remove a record
  history        - List the records of the selected month
  summary        - Month totals and outflow by category
  trend          - Income/outflow/net for the last 12 months
  export         - Export the active vehicle's records as CSV
  currency       - Show or set the display currency
  month          - Show or set the selected month
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from carledger import (
    CURRENCIES,
    FuelType,
    LedgerState,
    Record,
    RecordType,
    ServiceStatus,
    Severity,
    Vehicle,
    compute_category_breakdown,
    compute_month_summary,
    compute_service_status,
    compute_trailing_series,
    export_records_csv,
    filter_month_records,
    format_money,
    load_state,
    record_service_now,
    save_state,
    write_records_csv,
)
from carledger.vehicle import EDITABLE_FIELDS

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_distance_remaining(svc: ServiceStatus) -> str:
    """Remaining distance, or an overdue marker."""
    if svc.distance_overdue:
        return f"OVERDUE by km ({format_km(svc.distance_remaining)})"
    return f"{format_km(svc.distance_remaining)} km"


def format_days_remaining(svc: ServiceStatus) -> str:
    """Remaining days, or an overdue marker."""
    if svc.days_overdue:
        return f"OVERDUE by days ({svc.days_remaining})"
    return f"{svc.days_remaining} days"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def make_history_table(records: List[Record], currency: str) -> List[List[str]]:
    """Convert records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                record.id,
                record.date,
                record.type.value,
                record.category or "-",
                format_money(record.amount, currency),
                format_km(record.odometer),
                truncate(record.note),
            ]
        )
    return rows


def make_vehicle_table(state: LedgerState) -> List[List[str]]:
    """Convert vehicles to table rows, marking the active one."""
    rows = []
    for vehicle in state.vehicles:
        rows.append(
            [
                "*" if vehicle.id == state.settings.active_vehicle_id else "",
                vehicle.id,
                vehicle.display_name,
                vehicle.plate or "-",
                " ".join(str(p) for p in (vehicle.year, vehicle.make, vehicle.model) if p)
                or "-",
                vehicle.fuel_type.value,
                format_km(vehicle.odometer),
            ]
        )
    return rows


def parse_today(args) -> date:
    return date.fromisoformat(args.today) if args.today else date.today()


def require_vehicle(state: LedgerState) -> Vehicle:
    vehicle = state.active_vehicle
    if vehicle is None:
        raise KeyError("No vehicle in ledger (use add-vehicle)")
    return vehicle


# =============================================================================
# Vehicle commands
# =============================================================================


def cmd_init(args, state: LedgerState) -> int:
    """Create a ledger file with one default vehicle."""
    if args.ledger_file.exists() and not args.force:
        print(f"Error: {args.ledger_file} already exists (use --force to overwrite)")
        return 1
    fresh = LedgerState.default(parse_today(args))
    save_state(args.ledger_file, fresh)
    print(f"Created {args.ledger_file} with vehicle {fresh.active_vehicle.id}")
    return 0


def cmd_vehicles(args, state: LedgerState) -> int:
    """List vehicles."""
    if not state.vehicles:
        print("No vehicles.")
        return 0
    headers = ["", "ID", "Name", "Plate", "Vehicle", "Fuel", "Odometer"]
    print(tabulate(make_vehicle_table(state), headers=headers, tablefmt="simple"))
    return 0


def vehicle_fields(args) -> dict:
    """Collect vehicle fields given on the command line."""
    fields = {}
    for name in EDITABLE_FIELDS:
        value = getattr(args, name, None)
        if value is not None:
            fields[name] = value
    return fields


def cmd_add_vehicle(args, state: LedgerState) -> int:
    """Add a vehicle and make it active."""
    vehicle = Vehicle.default(
        name=args.name or f"Vehicle {len(state.vehicles) + 1}",
        today=parse_today(args),
    )
    fields = vehicle_fields(args)
    fields.pop("name", None)
    vehicle.patch(**fields)
    state.add_vehicle(vehicle)
    save_state(args.ledger_file, state)
    print(f"Added vehicle {vehicle.id}: {vehicle.display_name}")
    return 0


def cmd_select(args, state: LedgerState) -> int:
    """Make another vehicle active."""
    vehicle = state.select_vehicle(args.vehicle_id)
    save_state(args.ledger_file, state)
    print(f"Active vehicle: {vehicle.display_name}")
    return 0


def cmd_update_vehicle(args, state: LedgerState) -> int:
    """Change fields of the active vehicle."""
    fields = vehicle_fields(args)
    if not fields:
        print("Error: nothing to update")
        return 1
    vehicle = state.update_vehicle(**fields)
    save_state(args.ledger_file, state)
    print(f"Updated {vehicle.display_name}: {', '.join(sorted(fields))}")
    return 0


def cmd_delete_vehicle(args, state: LedgerState) -> int:
    """Remove a vehicle and its records."""
    vehicle = state.get_vehicle(args.vehicle_id)
    if vehicle is None:
        raise KeyError(f"Unknown vehicle id '{args.vehicle_id}'")
    count = len(state.vehicle_records(vehicle.id))
    print(f"Deleting {vehicle.display_name} and {count} record(s)")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    state.delete_vehicle(vehicle.id)
    save_state(args.ledger_file, state)
    print("Vehicle deleted.")
    return 0


# =============================================================================
# Service commands
# =============================================================================


def cmd_status(args, state: LedgerState) -> int:
    """Show when the next service is due."""
    vehicle = require_vehicle(state)
    svc = compute_service_status(vehicle, parse_today(args))

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Odometer: {format_km(vehicle.odometer)} km")
    print(
        f"Last service: {vehicle.last_service_date} @ {format_km(vehicle.last_service_km)} km"
    )
    print(
        f"Interval: {format_km(vehicle.service_interval_km)} km / "
        f"{vehicle.service_interval_days} days"
    )
    print()
    print(f"Next service: {format_distance_remaining(svc)} / {format_days_remaining(svc)}")
    print(f"Status: {svc.severity.name}")
    return 2 if args.check and svc.severity == Severity.OVERDUE else 0


def cmd_service_now(args, state: LedgerState) -> int:
    """Record a service at the current odometer, today."""
    vehicle = require_vehicle(state)
    today = parse_today(args)
    record_service_now(vehicle, today)
    save_state(args.ledger_file, state)
    svc = compute_service_status(vehicle, today)
    print(f"Service recorded at {format_km(vehicle.odometer)} km on {today.isoformat()}")
    print(f"Status: {svc.severity.name}")
    return 0


# =============================================================================
# Record commands
# =============================================================================


def cmd_add(args, state: LedgerState) -> int:
    """Add an income or expense record."""
    vehicle = require_vehicle(state)
    form = {
        "type": args.type,
        "date": args.date or parse_today(args).isoformat(),
        "amount": args.amount,
        "odometer": args.odometer,
        "category": args.category or ("Income" if args.type == "income" else None),
        "note": args.note,
    }
    record = state.submit_record(form)
    if record is None:
        print("Error: a valid amount and date are required")
        return 1
    save_state(args.ledger_file, state)
    print(
        f"Added {record.type.value} {format_money(record.amount, state.settings.currency)} "
        f"to {vehicle.display_name} ({record.id})"
    )
    return 0


def cmd_edit(args, state: LedgerState) -> int:
    """Change fields of a record."""
    fields = {}
    for name in ("type", "date", "amount", "odometer", "category", "note"):
        value = getattr(args, name)
        if value is not None:
            fields[name] = value
    if not fields:
        print("Error: nothing to update")
        return 1
    record = state.update_record(args.record_id, **fields)
    save_state(args.ledger_file, state)
    print(f"Updated record {record.id}: {', '.join(sorted(fields))}")
    return 0


def cmd_delete(args, state: LedgerState) -> int:
    """Remove a record."""
    record = state.get_record(args.record_id)
    if record is None:
        raise KeyError(f"Unknown record id '{args.record_id}'")
    if not args.yes:
        print(f"Delete {record.type.value} of {record.date} ({record.id})? Use --yes to confirm.")
        return 1
    state.delete_record(record.id)
    save_state(args.ledger_file, state)
    print("Record deleted.")
    return 0


# =============================================================================
# Analytics commands
# =============================================================================


def month_arg(args, state: LedgerState) -> str:
    return args.month or state.month.key


def cmd_history(args, state: LedgerState) -> int:
    """List the records of the selected month."""
    vehicle = require_vehicle(state)
    month = month_arg(args, state)
    records = filter_month_records(state.records, vehicle.id, month)

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Month: {month}")
    print()
    if not records:
        print("No records in this month.")
        return 0

    headers = ["ID", "Date", "Type", "Category", "Amount", "Odometer", "Note"]
    print(
        tabulate(
            make_history_table(records, state.settings.currency),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


def cmd_summary(args, state: LedgerState) -> int:
    """Month totals and outflow by category."""
    vehicle = require_vehicle(state)
    month = month_arg(args, state)
    currency = state.settings.currency
    totals = compute_month_summary(state.records, vehicle.id, month)
    breakdown = compute_category_breakdown(state.records, vehicle.id, month)

    print(f"Vehicle: {vehicle.display_name}")
    print(f"Month: {month}")
    print()
    print(f"Income:  {format_money(totals.income, currency)}")
    print(f"Outflow: {format_money(totals.outflow, currency)}")
    print(f"Net:     {format_money(totals.net, currency)}")
    print()
    if not breakdown:
        print("No outflow in this month.")
        return 0

    print("OUTFLOW BY CATEGORY:")
    rows = [[c.category, format_money(c.total, currency)] for c in breakdown]
    print(tabulate(rows, headers=["Category", "Total"], tablefmt="simple"))
    return 0


def cmd_trend(args, state: LedgerState) -> int:
    """Income/outflow/net for the last months."""
    vehicle = require_vehicle(state)
    month = month_arg(args, state)
    currency = state.settings.currency
    series = compute_trailing_series(state.records, vehicle.id, month, args.window)

    print(f"Vehicle: {vehicle.display_name}")
    print()
    rows = [
        [
            p.month_key,
            format_money(p.income, currency),
            format_money(p.outflow, currency),
            format_money(p.net, currency),
        ]
        for p in series
    ]
    print(
        tabulate(
            rows, headers=["Month", "Income", "Outflow", "Net"], tablefmt="simple"
        )
    )
    return 0


def cmd_export(args, state: LedgerState) -> int:
    """Export the active vehicle's records as CSV."""
    vehicle = require_vehicle(state)
    if args.output:
        write_records_csv(args.output, state.records, vehicle.id)
        print(f"Exported {len(state.vehicle_records(vehicle.id))} record(s) to {args.output}")
    else:
        sys.stdout.write(export_records_csv(state.records, vehicle.id))
    return 0


# =============================================================================
# Settings commands
# =============================================================================


def cmd_currency(args, state: LedgerState) -> int:
    """Show or set the display currency."""
    if args.code:
        state.select_currency(args.code)
        save_state(args.ledger_file, state)
    print(f"Currency: {state.settings.currency}")
    return 0


def cmd_month(args, state: LedgerState) -> int:
    """Show or set the selected month."""
    if args.key:
        state.select_month(args.key)
        save_state(args.ledger_file, state)
    print(f"Month: {state.month.key}")
    return 0


COMMANDS = {
    "init": cmd_init,
    "vehicles": cmd_vehicles,
    "add-vehicle": cmd_add_vehicle,
    "select": cmd_select,
    "update-vehicle": cmd_update_vehicle,
    "delete-vehicle": cmd_delete_vehicle,
    "status": cmd_status,
    "service-now": cmd_service_now,
    "add": cmd_add,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "history": cmd_history,
    "summary": cmd_summary,
    "trend": cmd_trend,
    "export": cmd_export,
    "currency": cmd_currency,
    "month": cmd_month,
}


# =============================================================================
# Main
# =============================================================================


def add_vehicle_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", type=str, help="Display name")
    parser.add_argument("--plate", type=str, help="License plate")
    parser.add_argument("--make", type=str)
    parser.add_argument("--model", type=str)
    parser.add_argument("--year", type=int)
    parser.add_argument(
        "--fuel-type",
        dest="fuel_type",
        choices=[f.value for f in FuelType],
    )
    parser.add_argument("--odometer", type=float, help="Current odometer (km)")
    parser.add_argument(
        "--service-interval-km", dest="service_interval_km", type=float
    )
    parser.add_argument(
        "--service-interval-days", dest="service_interval_days", type=int
    )
    parser.add_argument("--last-service-km", dest="last_service_km", type=float)
    parser.add_argument(
        "--last-service-date",
        dest="last_service_date",
        type=str,
        help="Last service date (YYYY-MM-DD)",
    )


def add_record_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    record_types = [t.value for t in RecordType]
    if required:
        parser.add_argument("type", choices=record_types, help="Record type")
        parser.add_argument("amount", type=float, help="Amount")
    else:
        parser.add_argument("--type", choices=record_types)
        parser.add_argument("--amount", type=float)
    parser.add_argument("--date", type=str, help="Date in YYYY-MM-DD format (default: today)")
    parser.add_argument("--odometer", type=float, help="Odometer at time of record")
    parser.add_argument("--category", type=str, help="Category label (free text)")
    parser.add_argument("--note", type=str, help="Free-text note")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle income and maintenance ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ledger.yaml init
  %(prog)s ledger.yaml update-vehicle --plate ABC123 --odometer 14600
  %(prog)s ledger.yaml status
  %(prog)s ledger.yaml add income 100 --date 2024-03-05
  %(prog)s ledger.yaml add maintenance 40 --category "Oil change"
  %(prog)s ledger.yaml summary --month 2024-03
  %(prog)s ledger.yaml trend
  %(prog)s ledger.yaml export -o vehicle.csv
""",
    )
    parser.add_argument(
        "ledger_file",
        type=Path,
        help="Path to ledger YAML file",
    )
    parser.add_argument(
        "--today",
        type=str,
        help="Treat this date (YYYY-MM-DD) as today",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create a new ledger file")
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    subparsers.add_parser("vehicles", help="List vehicles")

    add_vehicle_parser = subparsers.add_parser(
        "add-vehicle", help="Add a vehicle and make it active"
    )
    add_vehicle_arguments(add_vehicle_parser)

    select_parser = subparsers.add_parser("select", help="Make a vehicle active")
    select_parser.add_argument("vehicle_id", type=str)

    update_vehicle_parser = subparsers.add_parser(
        "update-vehicle", help="Change fields of the active vehicle"
    )
    add_vehicle_arguments(update_vehicle_parser)

    delete_vehicle_parser = subparsers.add_parser(
        "delete-vehicle", help="Remove a vehicle and its records"
    )
    delete_vehicle_parser.add_argument("vehicle_id", type=str)
    delete_vehicle_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without saving",
    )

    status_parser = subparsers.add_parser(
        "status", help="Show when the next service is due"
    )
    status_parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 2 when the service is overdue",
    )

    subparsers.add_parser(
        "service-now", help="Record a service at the current odometer, today"
    )

    add_parser = subparsers.add_parser("add", help="Add an income or expense record")
    add_record_arguments(add_parser, required=True)

    edit_parser = subparsers.add_parser("edit", help="Change fields of a record")
    edit_parser.add_argument("record_id", type=str)
    add_record_arguments(edit_parser, required=False)

    delete_parser = subparsers.add_parser("delete", help="Remove a record")
    delete_parser.add_argument("record_id", type=str)
    delete_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    for name, help_text in (
        ("history", "List the records of a month"),
        ("summary", "Month totals and outflow by category"),
        ("trend", "Income/outflow/net for the trailing months"),
    ):
        month_parser = subparsers.add_parser(name, help=help_text)
        month_parser.add_argument(
            "--month", type=str, help="Month as YYYY-MM (default: selected month)"
        )
        if name == "trend":
            month_parser.add_argument(
                "--window", type=int, default=12, help="Number of months (default: 12)"
            )

    export_parser = subparsers.add_parser(
        "export", help="Export the active vehicle's records as CSV"
    )
    export_parser.add_argument(
        "-o", "--output", type=Path, help="Write to file instead of stdout"
    )

    currency_parser = subparsers.add_parser("currency", help="Show or set the currency")
    currency_parser.add_argument("code", nargs="?", choices=sorted(CURRENCIES))

    month_parser = subparsers.add_parser("month", help="Show or set the selected month")
    month_parser.add_argument("key", nargs="?", help="Month as YYYY-MM")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate ledger file exists
    if args.command != "init" and not args.ledger_file.exists():
        print(f"Error: File not found: {args.ledger_file} (run 'init' first)")
        return 1

    try:
        today = parse_today(args)
        state = None if args.command == "init" else load_state(args.ledger_file, today)
        return COMMANDS[args.command](args, state)
    except (KeyError, ValueError, AttributeError) as e:
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"Error: {message}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
