#!/usr/bin/env python3
"""Tests for the ledger CLI formatting helpers and commands."""

import pytest

from carledger import Record, ServiceStatus, Severity, load_state
from ledger import (
    format_days_remaining,
    format_distance_remaining,
    format_km,
    main,
    make_history_table,
    truncate,
)

TODAY = "2024-03-15"


class TestFormatKm:
    """Tests for format_km."""

    def test_formats_number(self):
        assert format_km(14600) == "14,600"
        assert format_km(0) == "0"

    def test_none_returns_dash(self):
        assert format_km(None) == "-"


class TestFormatRemaining:
    """Tests for remaining distance/days formatting."""

    def test_distance_remaining(self):
        svc = ServiceStatus(400, 30, Severity.WARNING)
        assert format_distance_remaining(svc) == "400 km"

    def test_distance_overdue(self):
        svc = ServiceStatus(-1500, 30, Severity.OVERDUE)
        assert format_distance_remaining(svc) == "OVERDUE by km (-1,500)"

    def test_days_remaining(self):
        svc = ServiceStatus(400, 30, Severity.WARNING)
        assert format_days_remaining(svc) == "30 days"

    def test_days_overdue(self):
        svc = ServiceStatus(400, -3, Severity.OVERDUE)
        assert format_days_remaining(svc) == "OVERDUE by days (-3)"


class TestTruncate:
    """Tests for truncate."""

    def test_none_returns_dash(self):
        assert truncate(None) == "-"

    def test_long_text_truncated_with_ellipsis(self):
        assert truncate("this is a very long note", max_len=15) == "this is a ve..."


class TestMakeHistoryTable:
    """Tests for make_history_table."""

    def test_converts_records_to_rows(self):
        records = [Record("r1", "v1", "maintenance", "2024-03-10", 40, 14500, "Oil change", "Motul")]
        rows = make_history_table(records, "USD")
        assert rows == [["r1", "2024-03-10", "maintenance", "Oil change", "$40.00", "14,500", "Motul"]]

    def test_blank_fields_use_dash(self):
        rows = make_history_table([Record("r1", "v1", "income", "2024-03-05", 100)], "CRC")
        assert rows[0][3] == "-"
        assert rows[0][5] == "-"
        assert rows[0][6] == "-"


# =============================================================================
# Command tests
# =============================================================================


@pytest.fixture
def ledger_file(tmp_path):
    path = tmp_path / "ledger.yaml"
    assert main([str(path), "--today", TODAY, "init"]) == 0
    return path


def run(ledger_file, *args):
    return main([str(ledger_file), "--today", TODAY, *args])


class TestCommands:
    """End-to-end tests for CLI commands against a temp ledger file."""

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "none.yaml"), "status"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_init_refuses_overwrite(self, ledger_file, capsys):
        assert run(ledger_file, "init") == 1
        assert run(ledger_file, "init", "--force") == 0

    def test_add_and_summary(self, ledger_file, capsys):
        assert run(ledger_file, "add", "income", "100", "--date", "2024-03-05") == 0
        assert run(ledger_file, "add", "maintenance", "40", "--date", "2024-03-10", "--category", "Oil change") == 0
        capsys.readouterr()

        assert run(ledger_file, "summary", "--month", "2024-03") == 0
        out = capsys.readouterr().out
        assert "Income:  ₡100" in out
        assert "Outflow: ₡40" in out
        assert "Net:     ₡60" in out
        assert "Oil change" in out

    def test_income_gets_default_category(self, ledger_file):
        run(ledger_file, "add", "income", "100")
        state = load_state(ledger_file)
        assert state.records[0].category == "Income"
        assert state.records[0].date == TODAY

    def test_status_and_service_now(self, ledger_file, capsys):
        run(ledger_file, "update-vehicle", "--odometer", "14600", "--last-service-km", "10000")
        assert run(ledger_file, "status") == 0
        assert "Status: WARNING" in capsys.readouterr().out

        run(ledger_file, "update-vehicle", "--odometer", "16000")
        assert run(ledger_file, "status", "--check") == 2

        assert run(ledger_file, "service-now") == 0
        assert "Status: OK" in capsys.readouterr().out
        vehicle = load_state(ledger_file).active_vehicle
        assert vehicle.last_service_km == 16000
        assert vehicle.last_service_date == TODAY

    def test_edit_and_delete(self, ledger_file, capsys):
        run(ledger_file, "add", "expense", "10")
        record_id = load_state(ledger_file).records[0].id

        assert run(ledger_file, "edit", record_id, "--amount", "12", "--category", "Tolls") == 0
        record = load_state(ledger_file).records[0]
        assert record.amount == 12
        assert record.category == "Tolls"

        assert run(ledger_file, "delete", record_id) == 1
        assert run(ledger_file, "delete", record_id, "--yes") == 0
        assert load_state(ledger_file).records == []

    def test_edit_rejects_unreadable_date(self, ledger_file, capsys):
        run(ledger_file, "add", "expense", "10", "--date", "2024-03-05")
        record_id = load_state(ledger_file).records[0].id
        capsys.readouterr()

        assert run(ledger_file, "edit", record_id, "--date", "05/03/2024") == 1
        assert "Invalid date" in capsys.readouterr().out
        assert load_state(ledger_file).records[0].date == "2024-03-05"

    def test_unknown_record_is_an_error(self, ledger_file, capsys):
        assert run(ledger_file, "edit", "nope", "--amount", "1") == 1
        assert "Unknown record id" in capsys.readouterr().out

    def test_vehicles_select_and_delete(self, ledger_file, capsys):
        first_id = load_state(ledger_file).active_vehicle.id
        assert run(ledger_file, "add-vehicle", "--name", "Truck", "--fuel-type", "diesel") == 0
        state = load_state(ledger_file)
        assert state.active_vehicle.name == "Truck"
        run(ledger_file, "add", "income", "5")

        assert run(ledger_file, "select", first_id) == 0
        assert load_state(ledger_file).active_vehicle.id == first_id

        truck_id = state.active_vehicle.id
        assert run(ledger_file, "delete-vehicle", truck_id) == 0
        state = load_state(ledger_file)
        assert [v.id for v in state.vehicles] == [first_id]
        assert state.records == []

    def test_trend_has_twelve_rows(self, ledger_file, capsys):
        capsys.readouterr()
        assert run(ledger_file, "trend", "--month", "2024-03") == 0
        out = capsys.readouterr().out
        assert "2023-04" in out
        assert "2024-03" in out
        assert "2023-03" not in out

    def test_export_stdout(self, ledger_file, capsys):
        run(ledger_file, "add", "repair", "250", "--date", "2024-03-01", "--note", "rear pads")
        capsys.readouterr()
        assert run(ledger_file, "export") == 0
        out = capsys.readouterr().out
        assert out.startswith("id,vehicle,type,date,amount,odometer,category,note\n")
        assert ",repair,2024-03-01,250,,,rear pads" in out

    def test_currency_and_month(self, ledger_file, capsys):
        assert run(ledger_file, "currency", "USD") == 0
        assert run(ledger_file, "month", "2023-12") == 0
        settings = load_state(ledger_file).settings
        assert settings.currency == "USD"
        assert settings.month == "2023-12"

    def test_bad_month_is_an_error(self, ledger_file, capsys):
        assert run(ledger_file, "month", "December") == 1
        assert "Invalid month key" in capsys.readouterr().out
