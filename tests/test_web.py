#!/usr/bin/env python3
"""Tests for the Flask web application."""

from datetime import date

import pytest

from carledger import LedgerState, RecordType, Settings, Vehicle, load_state, save_state
from web.app import app, parse_vehicle_form

TODAY = date(2024, 3, 15)


@pytest.fixture
def ledger_file(tmp_path):
    path = tmp_path / "ledger.yaml"
    vehicle = Vehicle(
        "v1",
        name="Pickup",
        plate="ABC123",
        odometer=14600,
        last_service_km=10000,
        last_service_date="2024-03-01",
    )
    state = LedgerState(
        vehicles=[vehicle],
        settings=Settings(active_vehicle_id="v1", currency="USD", month="2024-03"),
    )
    state.add_record(RecordType.INCOME, "2024-03-05", 100, category="Income")
    state.add_record(RecordType.MAINTENANCE, "2024-03-10", 40, category="Oil change")
    save_state(path, state)
    return path


@pytest.fixture
def client(ledger_file):
    app.config.update(TESTING=True, LEDGER_FILE=ledger_file, TODAY=TODAY)
    with app.test_client() as client:
        yield client


class TestParseVehicleForm:
    """Tests for parse_vehicle_form."""

    def test_numbers_converted(self):
        fields = parse_vehicle_form({"odometer": "1500", "service_interval_days": "90", "year": "2019"})
        assert fields == {"odometer": 1500.0, "service_interval_days": 90, "year": 2019}

    def test_blank_numbers_become_zero(self):
        assert parse_vehicle_form({"odometer": ""}) == {"odometer": 0}

    def test_blank_year_is_none(self):
        assert parse_vehicle_form({"year": ""}) == {"year": None}

    def test_text_fields_kept(self):
        assert parse_vehicle_form({"plate": "XYZ", "fuel_type": "hybrid"}) == {
            "plate": "XYZ",
            "fuel_type": "hybrid",
        }


class TestDashboard:
    """Tests for the index page and its tabs."""

    def test_capture_tab(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert "Pickup" in body
        assert "$100.00" in body
        assert "$40.00" in body
        assert "$60.00" in body
        assert "WARNING" in body

    def test_history_tab_lists_month_records(self, client):
        body = client.get("/?tab=history").get_data(as_text=True)
        assert "2024-03-05" in body
        assert "Oil change" in body

    def test_analytics_tab(self, client):
        body = client.get("/?tab=analytics").get_data(as_text=True)
        assert "2023-04" in body
        assert "Oil change" in body

    def test_edit_prefills_form(self, client, ledger_file):
        record_id = load_state(ledger_file).records[1].id
        body = client.get(f"/?edit={record_id}").get_data(as_text=True)
        assert f'value="{record_id}"' in body
        assert "Save changes" in body


class TestRecordRoutes:
    """Tests for adding, editing and deleting records."""

    def test_add_record(self, client, ledger_file):
        response = client.post(
            "/records",
            data={"type": "repair", "date": "2024-03-20", "amount": "250", "category": "Brakes"},
        )
        assert response.status_code == 302
        state = load_state(ledger_file, TODAY)
        assert state.records[-1].type == RecordType.REPAIR
        assert state.records[-1].amount == 250
        assert state.records[-1].vehicle_id == "v1"

    def test_missing_amount_saves_nothing(self, client, ledger_file):
        client.post("/records", data={"type": "income", "date": "2024-03-20", "amount": ""})
        assert len(load_state(ledger_file, TODAY).records) == 2

    def test_unknown_type_saves_nothing(self, client, ledger_file):
        response = client.post("/records", data={"type": "fuel", "date": "2024-03-05", "amount": "10"})
        assert response.status_code == 302
        assert len(load_state(ledger_file, TODAY).records) == 2

    def test_edit_record(self, client, ledger_file):
        record_id = load_state(ledger_file).records[1].id
        client.post(
            "/records",
            data={"editing_id": record_id, "type": "maintenance", "date": "2024-03-11", "amount": "45"},
        )
        record = load_state(ledger_file, TODAY).get_record(record_id)
        assert record.amount == 45
        assert record.date == "2024-03-11"

    def test_delete_record(self, client, ledger_file):
        record_id = load_state(ledger_file).records[0].id
        client.post(f"/records/{record_id}/delete")
        assert load_state(ledger_file, TODAY).get_record(record_id) is None

    def test_delete_unknown_record_flashes(self, client):
        response = client.post("/records/nope/delete", follow_redirects=True)
        assert "not found" in response.get_data(as_text=True)


class TestVehicleRoutes:
    """Tests for vehicle routes."""

    def test_update_vehicle(self, client, ledger_file):
        client.post("/vehicles/active", data={"odometer": "16000", "plate": "NEW1"})
        vehicle = load_state(ledger_file, TODAY).active_vehicle
        assert vehicle.odometer == 16000
        assert vehicle.plate == "NEW1"

    def test_unreadable_service_date_not_saved(self, client, ledger_file):
        for value in ("", "31/12/2023"):
            response = client.post(
                "/vehicles/active",
                data={"last_service_date": value, "odometer": "99999"},
                follow_redirects=True,
            )
            assert response.status_code == 200
            assert "Invalid last service date" in response.get_data(as_text=True)
        vehicle = load_state(ledger_file, TODAY).active_vehicle
        assert vehicle.last_service_date == "2024-03-01"
        assert vehicle.odometer == 14600

    def test_dashboard_survives_corrupt_vehicle_fields(self, client, ledger_file):
        text = ledger_file.read_text()
        ledger_file.write_text(text.replace("lastServiceDate: '2024-03-01'", "lastServiceDate: not-a-date"))
        assert client.get("/").status_code == 200
        assert client.get("/api/analytics").get_json()["service"]["daysRemaining"] == 180

    def test_service_now(self, client, ledger_file):
        client.post("/vehicles/active/service")
        vehicle = load_state(ledger_file, TODAY).active_vehicle
        assert vehicle.last_service_km == 14600
        assert vehicle.last_service_date == "2024-03-15"

    def test_add_and_select_vehicle(self, client, ledger_file):
        client.post("/vehicles", data={})
        state = load_state(ledger_file, TODAY)
        assert len(state.vehicles) == 2
        assert state.active_vehicle.name == "Vehicle 2"

        client.post("/vehicles/select", data={"vehicle_id": "v1"})
        assert load_state(ledger_file, TODAY).active_vehicle.id == "v1"

    def test_delete_vehicle_cascades(self, client, ledger_file):
        client.post("/vehicles/v1/delete")
        state = load_state(ledger_file, TODAY)
        assert state.records == []
        assert state.get_vehicle("v1") is None


class TestSettingsAndExport:
    """Tests for settings, CSV download and the analytics API."""

    def test_update_settings(self, client, ledger_file):
        client.post("/settings", data={"currency": "CRC", "month": "2024-02"})
        settings = load_state(ledger_file, TODAY).settings
        assert settings.currency == "CRC"
        assert settings.month == "2024-02"

    def test_export_csv(self, client):
        response = client.get("/export.csv")
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "vehicle_ABC123.csv" in response.headers["Content-Disposition"]
        lines = response.get_data(as_text=True).splitlines()
        assert lines[0] == "id,vehicle,type,date,amount,odometer,category,note"
        assert len(lines) == 3

    def test_analytics_json(self, client):
        data = client.get("/api/analytics").get_json()
        assert data["month"] == "2024-03"
        assert data["summary"] == {"income": 100, "outflow": 40, "net": 60}
        assert data["breakdown"] == [{"category": "Oil change", "total": 40}]
        assert len(data["series"]) == 12
        assert data["series"][-1]["month"] == "2024-03"
        assert data["service"] == {
            "distanceRemaining": 400,
            "daysRemaining": 166,
            "severity": "warning",
        }

    def test_analytics_bad_month(self, client):
        response = client.get("/api/analytics?month=bad")
        assert response.status_code == 400
