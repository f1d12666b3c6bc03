#!/usr/bin/env python3
"""Tests for the fleet CLI."""

import csv

import pytest

from fleet import (
    format_km,
    format_money,
    format_part_cell,
    is_time_based,
    main,
    make_history_table,
    make_parts_table,
    truncate,
)
from fleetparts import HistoryRecord, PartStatus, Status, Vehicle, default_catalog, load_snapshot

from conftest import HISTORY_HEADER, SCHEDULE_HEADER, history_row


def write_csv(path, rows):
    with open(path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(rows)
    return str(path)


@pytest.fixture
def tables(tmp_path, schedule_rows, history_rows):
    return (
        write_csv(tmp_path / "schedule.csv", schedule_rows),
        write_csv(tmp_path / "history.csv", history_rows),
    )


def run(tables, *args):
    return main([*tables, "--as-of", "2024-02-10", *args])


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_km(self):
        assert format_km(95000) == "95,000 km"
        assert format_km(0) == "0 km"
        assert format_km(None) == "-"

    def test_format_money(self):
        assert format_money(1680) == "1,680.00"
        assert format_money(0) == "-"

    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("") == "-"
        result = truncate("x" * 50)
        assert len(result) == 40
        assert result.endswith("...")

    def test_format_part_cell(self):
        part = PartStatus("2023-12-01", 80000, 95000, 15000, 65, "2міс", Status.WARNING)
        assert format_part_cell(part) == "WARN 15,000"
        assert format_part_cell(part, time_based=True) == "WARN 2mo"
        assert format_part_cell(None) == "-"

    def test_is_time_based(self):
        catalog = default_catalog()
        assert is_time_based(catalog, "battery")
        assert is_time_based(catalog, "soot_burn")
        assert not is_time_based(catalog, "oil_service")
        assert not is_time_based(catalog, "spark_plugs")
        assert not is_time_based(catalog, "unknown")


class TestTables:
    """Tests for table builders."""

    def test_parts_table(self):
        catalog = default_catalog()
        vehicle = Vehicle("AA1", part_names=catalog.names)
        vehicle.parts["oil_service"] = PartStatus(
            "2024-01-10", 95000, 95000, 0, 31, "1міс", Status.GOOD
        )
        rows = make_parts_table(vehicle, catalog)
        assert len(rows) == len(catalog)
        assert rows[0] == [catalog.title("oil_service"), "good", "10.01.2024", "95,000 km", "0 km", "1міс"]
        assert rows[1][1:] == ["-"] * 5

    def test_history_table(self):
        records = [
            HistoryRecord("AA1", "2024-01-10", 95000, "Заміна оливи", part_code="OIL",
                          unit="л", quantity=4, total_with_vat=1680, status="Виконано"),
            HistoryRecord("AA1", "колись", 80000, "", quantity=2),
        ]
        rows = make_history_table(records)
        assert rows[0] == ["10.01.2024", "95,000 km", "Заміна оливи", "OIL", "4 л", "1,680.00", "Виконано"]
        assert rows[1] == ["колись", "80,000 km", "-", "-", "2 шт.", "-", "-"]


class TestMain:
    """Tests for the CLI entry point."""

    def test_status(self, tables, capsys):
        assert run(tables, "status") == 0
        out = capsys.readouterr().out
        assert "Reference date: 2024-02-10" in out
        assert "Vehicles: 3  good: 3  warning: 0  critical: 0" in out
        for license in ("AA0001KA", "AA1234BM", "BC5678AA"):
            assert license in out
        assert out.index("AA0001KA") < out.index("BC5678AA")

    def test_status_filtered(self, tables, capsys):
        assert run(tables, "status", "--city", "Львів") == 0
        out = capsys.readouterr().out
        assert "Showing: 1 (filtered)" in out
        assert "BC5678AA" in out
        assert "AA1234BM" not in out

    def test_status_no_match(self, tables, capsys):
        assert run(tables, "status", "--status", "critical") == 0
        assert "No vehicles found." in capsys.readouterr().out

    def test_status_unknown_part(self, tables, capsys):
        assert run(tables, "status", "--part", "flux_capacitor") == 1
        assert "Unknown part" in capsys.readouterr().out

    def test_vehicle(self, tables, capsys):
        assert run(tables, "vehicle", "AA1234BM") == 0
        out = capsys.readouterr().out
        assert "Vehicle: AA1234BM  Toyota Camry 2015" in out
        assert "Current mileage: 95,000 km (as of 2024-02-10)" in out
        assert "History entries: 3" in out
        assert "Total with VAT: 1,680.00" in out

    def test_vehicle_history_by_part(self, tables, capsys):
        assert run(tables, "vehicle", "AA1234BM", "--part", "brake_pads") == 0
        out = capsys.readouterr().out
        assert "Showing: 1 (filtered)" in out
        assert "05.06.2023" in out

    def test_unknown_vehicle(self, tables, capsys):
        assert run(tables, "vehicle", "ZZ9999") == 1
        assert "Unknown vehicle" in capsys.readouterr().out

    def test_cities(self, tables, capsys):
        assert run(tables, "cities") == 0
        assert capsys.readouterr().out.splitlines() == ["Всі міста", "Київ", "Львів"]

    def test_stats(self, tables, capsys):
        assert run(tables, "stats") == 0
        assert "Vehicles: 3" in capsys.readouterr().out

    def test_parts(self, tables, capsys):
        assert run(tables, "parts") == 0
        out = capsys.readouterr().out
        assert "oil_service" in out
        assert "default: critical > 50,000 km; warning > 30,000 km" in out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "a.csv"), str(tmp_path / "b.csv"), "stats"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_bad_catalog(self, tables, tmp_path, capsys):
        catalog = tmp_path / "parts.yaml"
        catalog.write_text("parts: 5\n", encoding="utf-8")
        assert run(tables, "--catalog", str(catalog), "stats") == 1
        assert "Error" in capsys.readouterr().out

    def test_empty_roster(self, tmp_path, capsys):
        schedule = write_csv(tmp_path / "schedule.csv", [SCHEDULE_HEADER])
        history = write_csv(tmp_path / "history.csv", [["Авто"]])
        assert run((schedule, history), "status") == 0
        assert "No data" in capsys.readouterr().out

    def test_cache(self, tables, tmp_path, capsys):
        cache = tmp_path / "snapshot.yaml"
        assert run(tables, "--cache", str(cache), "stats") == 0
        assert cache.exists()
        first = capsys.readouterr().out

        # Served from the cache even though the tables are gone
        for path in tables:
            write_csv(path, [])
        assert run(tables, "--cache", str(cache), "stats") == 0
        assert capsys.readouterr().out == first

        assert run(tables, "--cache", str(cache), "--refresh", "stats") == 0
        assert "No data" in capsys.readouterr().out

    def test_parts_without_tables(self, tmp_path, capsys):
        assert main([str(tmp_path / "a.csv"), str(tmp_path / "b.csv"), "parts"]) == 0
        assert "oil_service" in capsys.readouterr().out


class TestCache:
    """Cached snapshots are reused only for the same derivation settings."""

    @pytest.fixture
    def small_tables(self, tmp_path):
        return (
            write_csv(tmp_path / "schedule.csv", [SCHEDULE_HEADER, ["A1", "Київ", "Camry", "2015"]]),
            write_csv(tmp_path / "history.csv", [HISTORY_HEADER, history_row("A1", "2024-01-01", "Огляд", "352")]),
        )

    def test_mileage_scale_change_rederives(self, small_tables, tmp_path, capsys):
        cache = str(tmp_path / "snapshot.yaml")
        assert run(small_tables, "--cache", cache, "vehicle", "A1") == 0
        assert "Current mileage: 352 km" in capsys.readouterr().out

        assert run(small_tables, "--cache", cache, "--infer-mileage-scale", "vehicle", "A1") == 0
        assert "Current mileage: 352,000 km" in capsys.readouterr().out

    def test_catalog_change_rederives(self, small_tables, tmp_path):
        cache = tmp_path / "snapshot.yaml"
        catalog = tmp_path / "parts.yaml"
        catalog.write_text("parts:\n  - {name: inspection, keywords: [огляд]}\n", encoding="utf-8")

        assert run(small_tables, "--cache", str(cache), "stats") == 0
        assert load_snapshot(cache).settings["catalog"] == ""

        assert run(small_tables, "--cache", str(cache), "--catalog", str(catalog), "stats") == 0
        snapshot = load_snapshot(cache)
        assert snapshot.settings["catalog"] == str(catalog.resolve())
        assert snapshot.parts_order == ["inspection"]
        assert snapshot.get_vehicle("A1").parts["inspection"] is not None
