#!/usr/bin/env python3
"""Tests for HistoryRecord, PartStatus and Vehicle."""

from fleetparts import HistoryRecord, PartStatus, RecordState, Status, Vehicle


def part(mileage=1000, status=Status.GOOD, date="2024-01-01", days_diff=40):
    return PartStatus(date, mileage, 5000, 5000 - mileage, days_diff, "1міс", status)


class TestHistoryRecord:
    """Tests for HistoryRecord."""

    def test_state(self):
        assert HistoryRecord("A", "2024-01-01", 1, status="Виконано").state == RecordState.FULFILLED
        assert HistoryRecord("A", "2024-01-01", 1, status="Очікує поставки").state == RecordState.PENDING
        assert HistoryRecord("A", "2024-01-01", 1, status="Відмовлено").state == RecordState.REJECTED
        assert HistoryRecord("A", "2024-01-01", 1).state == RecordState.UNKNOWN

    def test_display_unit(self):
        assert HistoryRecord("A", "", 1, unit="л", quantity=4).display_unit == "л"
        assert HistoryRecord("A", "", 1, quantity=2).display_unit == "шт."
        assert HistoryRecord("A", "", 1).display_unit == ""

    def test_matches_text(self):
        record = HistoryRecord(
            "A", "2024-01-10", 95000, "Заміна оливи", part_code="OIL-5W30", status="Виконано"
        )
        assert record.matches_text("ОЛИВ")
        assert record.matches_text("2024-01")
        assert record.matches_text("950")
        assert record.matches_text("oil-5w")
        assert record.matches_text("виконано")
        assert record.matches_text("")
        assert not record.matches_text("гальм")

    def test_dict_round_trip(self):
        record = HistoryRecord(
            "AA1234BM", "2024-01-10", 95000, "Заміна оливи", "Київ",
            "OIL-5W30", "л", 4, 350, 1680, "Виконано",
        )
        dct = record.to_dict()
        assert dct["partCode"] == "OIL-5W30"
        assert dct["totalWithVAT"] == 1680
        assert HistoryRecord.from_dict(dct).to_dict() == dct

    def test_hashable(self):
        record = HistoryRecord("AA1234BM", "2024-01-10", 95000)
        assert record in {record}


class TestPartStatus:
    """Tests for PartStatus."""

    def test_months_diff(self):
        assert part(days_diff=65).months_diff == 2
        assert part(days_diff=None).months_diff is None

    def test_to_dict(self):
        dct = part(mileage=1000, status=Status.WARNING).to_dict()
        assert dct == {
            "date": "2024-01-01",
            "mileage": 1000,
            "currentMileage": 5000,
            "mileageDiff": 4000,
            "daysDiff": 40,
            "timeDiff": "1міс",
            "status": "warning",
        }
        assert PartStatus.from_dict(dct) == part(mileage=1000, status=Status.WARNING)


class TestVehicle:
    """Tests for Vehicle."""

    def vehicle(self):
        vehicle = Vehicle("AA1234BM", "Київ", "Toyota Camry", "2015 р.", ["oil", "pads", "belt"])
        vehicle.parts["oil"] = part(status=Status.WARNING)
        vehicle.parts["pads"] = part(status=Status.CRITICAL)
        vehicle.history = [
            HistoryRecord("AA1234BM", "2023-06-05", 80000, total_with_vat=100),
            HistoryRecord("AA1234BM", "2024-01-10", 95000, total_with_vat=50),
            HistoryRecord("AA1234BM", "вчора", 90000, total_with_vat=300),
        ]
        return vehicle

    def test_every_part_starts_unknown(self):
        vehicle = Vehicle("X", part_names=["oil", "pads"])
        assert vehicle.parts == {"oil": None, "pads": None}
        assert vehicle.current_mileage == 0
        assert vehicle.history == []

    def test_year_number(self):
        assert self.vehicle().year_number == 2015
        assert Vehicle("X", year="").year_number == 0

    def test_status_counts(self):
        counts = self.vehicle().status_counts()
        assert counts == {Status.CRITICAL: 1, Status.WARNING: 1, Status.GOOD: 0}

    def test_worst_status(self):
        assert self.vehicle().worst_status == Status.CRITICAL
        assert Vehicle("X", part_names=["oil"]).worst_status is None

    def test_last_service(self):
        assert self.vehicle().last_service.mileage == 95000
        assert Vehicle("X").last_service is None

    def test_history_sorted_by_date(self):
        dates = [h.date for h in self.vehicle().get_history_sorted()]
        assert dates == ["2024-01-10", "2023-06-05", "вчора"]

    def test_history_sorted_by_price(self):
        totals = [h.total_with_vat for h in self.vehicle().get_history_sorted("price", reverse=False)]
        assert totals == [50, 100, 300]

    def test_history_unknown_sort_keeps_order(self):
        vehicle = self.vehicle()
        assert vehicle.get_history_sorted("color") == vehicle.history

    def test_dict_round_trip(self):
        vehicle = self.vehicle()
        rebuilt = Vehicle.from_dict(vehicle.to_dict())
        assert rebuilt.to_dict() == vehicle.to_dict()
        assert rebuilt.parts["belt"] is None
        assert list(rebuilt.parts) == ["oil", "pads", "belt"]
