"""Flask web application for the vehicle income and maintenance ledger."""

import logging
import os
from dataclasses import asdict
from datetime import date
from pathlib import Path

from flask import (
    Flask,
    Response,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from carledger import (
    CURRENCIES,
    FuelType,
    LedgerState,
    RecordType,
    Severity,
    Vehicle,
    compute_category_breakdown,
    compute_month_summary,
    compute_service_status,
    compute_trailing_series,
    export_filename,
    export_records_csv,
    filter_month_records,
    format_money,
    load_state,
    record_service_now,
    save_state,
    suggested_categories,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")
app.config["LEDGER_FILE"] = Path(
    os.environ.get("LEDGER_FILE", Path(__file__).parent.parent / "ledger.yaml")
)
app.config["TODAY"] = None

TABS = ("capture", "history", "analytics")

VEHICLE_NUMBER_FIELDS = {
    "odometer": float,
    "service_interval_km": float,
    "service_interval_days": int,
    "last_service_km": float,
    "year": int,
}
VEHICLE_TEXT_FIELDS = ("name", "plate", "make", "model", "fuel_type", "last_service_date")


def get_today() -> date:
    """Today, overridable through app.config['TODAY'] for tests."""
    return app.config.get("TODAY") or date.today()


def load() -> LedgerState:
    return load_state(app.config["LEDGER_FILE"], get_today())


def save(state: LedgerState) -> None:
    save_state(app.config["LEDGER_FILE"], state)


def severity_color(severity: Severity) -> str:
    """Get Tailwind color classes for a service severity."""
    colors = {
        Severity.OVERDUE: "text-red-600",
        Severity.WARNING: "text-amber-600",
        Severity.OK: "text-emerald-600",
    }
    return colors.get(severity, "text-gray-600")


def record_type_color(record_type: RecordType) -> str:
    """Get Tailwind color classes for a record type badge."""
    colors = {
        RecordType.INCOME: "bg-emerald-100 text-emerald-700",
        RecordType.MAINTENANCE: "bg-blue-100 text-blue-700",
        RecordType.REPAIR: "bg-amber-100 text-amber-700",
        RecordType.EXPENSE: "bg-gray-100 text-gray-700",
    }
    return colors.get(record_type, "bg-gray-100 text-gray-700")


def format_km(km):
    """Format a distance with comma separator."""
    if km is None or km == "":
        return "—"
    return f"{km:,.0f}"


# Register template filters
app.jinja_env.filters["format_km"] = format_km
app.jinja_env.filters["severity_color"] = severity_color
app.jinja_env.filters["record_type_color"] = record_type_color


def parse_vehicle_form(form) -> dict:
    """Vehicle fields from a form; blank numbers become 0 like the inputs show."""
    fields = {}
    for name in VEHICLE_TEXT_FIELDS:
        if name in form:
            fields[name] = form.get(name, "")
    for name, convert in VEHICLE_NUMBER_FIELDS.items():
        if name not in form:
            continue
        raw = form.get(name, "").strip()
        if name == "year" and not raw:
            fields[name] = None
            continue
        try:
            fields[name] = convert(raw) if raw else 0
        except ValueError:
            fields[name] = 0
    if "fuel_type" in fields and not fields["fuel_type"]:
        del fields["fuel_type"]
    return fields


@app.route("/")
def index():
    """Dashboard: vehicle data, month summary, and the active tab."""
    state = load()
    today = get_today()
    tab = request.args.get("tab", "capture")
    if tab not in TABS:
        tab = "capture"

    vehicle = state.active_vehicle
    month = state.month
    currency = state.settings.currency
    records = state.records

    service = compute_service_status(vehicle, today) if vehicle else None
    vehicle_id = vehicle.id if vehicle else None
    totals = compute_month_summary(records, vehicle_id, month)
    month_records = filter_month_records(records, vehicle_id, month)

    editing = None
    edit_id = request.args.get("edit")
    if edit_id:
        editing = state.get_record(edit_id)
        if editing is None:
            flash(f"Record '{edit_id}' not found", "error")

    return render_template(
        "index.html",
        state=state,
        vehicle=vehicle,
        service=service,
        totals=totals,
        month=month,
        month_records=month_records,
        breakdown=compute_category_breakdown(records, vehicle_id, month),
        series=compute_trailing_series(records, vehicle_id, month),
        currency=currency,
        currencies=sorted(CURRENCIES),
        money=lambda amount: format_money(amount, currency),
        fuel_types=list(FuelType),
        outflow_types=[t for t in RecordType if t != RecordType.INCOME],
        suggested_categories=suggested_categories,
        editing=editing,
        today=today.isoformat(),
        tab=tab,
        Severity=Severity,
    )


@app.route("/vehicles", methods=["POST"])
def add_vehicle():
    """Create a vehicle with default values and make it active."""
    state = load()
    name = request.form.get("name") or f"Vehicle {len(state.vehicles) + 1}"
    vehicle = state.add_vehicle(Vehicle.default(name=name, today=get_today()))
    save(state)
    flash(f"Added {vehicle.display_name}", "success")
    return redirect(url_for("index"))


@app.route("/vehicles/select", methods=["POST"])
def select_vehicle():
    state = load()
    try:
        state.select_vehicle(request.form.get("vehicle_id", ""))
    except KeyError:
        flash("Vehicle not found", "error")
        return redirect(url_for("index"))
    save(state)
    return redirect(url_for("index", tab=request.form.get("tab", "capture")))


@app.route("/vehicles/active", methods=["POST"])
def update_vehicle():
    """Patch the active vehicle from the vehicle data form."""
    state = load()
    if state.active_vehicle is None:
        flash("No active vehicle", "error")
        return redirect(url_for("index"))
    try:
        state.update_vehicle(**parse_vehicle_form(request.form))
    except ValueError as e:
        flash(str(e), "error")
        return redirect(url_for("index"))
    save(state)
    flash("Vehicle updated", "success")
    return redirect(url_for("index"))


@app.route("/vehicles/active/service", methods=["POST"])
def service_now():
    """Record a service at the current odometer, today."""
    state = load()
    vehicle = state.active_vehicle
    if vehicle is None:
        flash("No active vehicle", "error")
        return redirect(url_for("index"))
    record_service_now(vehicle, get_today())
    save(state)
    logger.info("Service recorded for %s at %s km", vehicle.id, vehicle.odometer)
    flash(f"Service recorded at {format_km(vehicle.odometer)} km", "success")
    return redirect(url_for("index"))


@app.route("/vehicles/<vehicle_id>/delete", methods=["POST"])
def delete_vehicle(vehicle_id: str):
    """Remove a vehicle and its records."""
    state = load()
    try:
        removed = state.delete_vehicle(vehicle_id)
    except KeyError:
        flash(f"Vehicle '{vehicle_id}' not found", "error")
        return redirect(url_for("index"))
    save(state)
    logger.info("Deleted vehicle %s with %d record(s)", vehicle_id, len(removed))
    flash(f"Vehicle deleted with {len(removed)} record(s)", "success")
    return redirect(url_for("index"))


@app.route("/records", methods=["POST"])
def submit_record():
    """Handle the income and outflow forms (add or edit)."""
    state = load()
    editing_id = request.form.get("editing_id") or None
    try:
        record = state.submit_record(request.form, editing_id=editing_id)
    except KeyError:
        flash("Record or vehicle not found", "error")
        return redirect(url_for("index"))
    if record is None:
        # Missing amount or date: nothing saved
        return redirect(url_for("index", edit=editing_id) if editing_id else url_for("index"))
    save(state)
    return redirect(url_for("index", tab="history" if editing_id else "capture"))


@app.route("/records/<record_id>/delete", methods=["POST"])
def delete_record(record_id: str):
    state = load()
    try:
        state.delete_record(record_id)
    except KeyError:
        flash(f"Record '{record_id}' not found", "error")
        return redirect(url_for("index", tab="history"))
    save(state)
    flash("Record deleted", "success")
    return redirect(url_for("index", tab="history"))


@app.route("/settings", methods=["POST"])
def update_settings():
    """Currency and month selection."""
    state = load()
    if request.form.get("currency"):
        state.select_currency(request.form["currency"])
    if request.form.get("month"):
        try:
            state.select_month(request.form["month"])
        except ValueError as e:
            flash(str(e), "error")
    save(state)
    return redirect(url_for("index", tab=request.form.get("tab", "capture")))


@app.route("/export.csv")
def export_csv():
    """Download the active vehicle's records."""
    state = load()
    vehicle = state.active_vehicle
    vehicle_id = vehicle.id if vehicle else None
    return Response(
        export_records_csv(state.records, vehicle_id),
        mimetype="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(vehicle)}"'
        },
    )


@app.route("/api/analytics")
def analytics():
    """Aggregates for the chart widgets of the active vehicle and month."""
    state = load()
    vehicle = state.active_vehicle
    try:
        month = request.args.get("month") or state.month.key
        vehicle_id = vehicle.id if vehicle else None
        summary = compute_month_summary(state.records, vehicle_id, month)
        breakdown = compute_category_breakdown(state.records, vehicle_id, month)
        series = compute_trailing_series(state.records, vehicle_id, month)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    service = None
    if vehicle is not None:
        status = compute_service_status(vehicle, get_today())
        service = {
            "distanceRemaining": status.distance_remaining,
            "daysRemaining": status.days_remaining,
            "severity": status.severity.name.lower(),
        }

    return jsonify(
        {
            "vehicleId": vehicle.id if vehicle else None,
            "month": month,
            "currency": state.settings.currency,
            "summary": asdict(summary),
            "breakdown": [asdict(c) for c in breakdown],
            "series": [
                {
                    "month": p.month_key,
                    "income": p.income,
                    "outflow": p.outflow,
                    "net": p.net,
                }
                for p in series
            ],
            "service": service,
        }
    )


if __name__ == "__main__":
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
