"""Shared fixtures: raw roster/history tables in spreadsheet shape."""

import pytest

SCHEDULE_HEADER = ["Номер", "Місто", "Модель", "Рік"]
HISTORY_HEADER = [
    "Авто", "Дата", "Опис", "Пробіг", "Код", "Од.", "К-сть", "Ціна", "Сума з ПДВ", "Статус",
]


def history_row(car, date, description, mileage, part_code="", unit="",
                quantity="", price="", total="", status=""):
    return [car, date, description, mileage, part_code, unit, quantity, price, total, status]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep derivation defaults independent of the caller's environment."""
    monkeypatch.delenv("FLEET_INFER_MILEAGE_SCALE", raising=False)
    monkeypatch.delenv("FLEET_CACHE_TTL_MINUTES", raising=False)


@pytest.fixture
def schedule_rows():
    return [
        SCHEDULE_HEADER,
        ["BC5678AA", "Львів", "Renault Kangoo", "2008"],
        ["AA1234BM", "Київ", "Toyota Camry", "2015"],
        ["AA0001KA", "Київ", "Mercedes-Benz Sprinter 2017", "2017"],
    ]


@pytest.fixture
def history_rows():
    return [
        HISTORY_HEADER,
        history_row("AA1234BM", "2024-01-10", "Заміна оливи та фільтра", "95000",
                    "OIL-5W30", "л", "4", "350", "1680", "Виконано"),
        history_row("AA1234BM", "05.06.2023", "Заміна гальмівних колодок", "80000"),
        history_row("AA1234BM", "2023-01-15", "Заміна оливи", "81000"),
        history_row("BC5678AA", "2023-12-01", "Заміна ГРМ", "150000"),
        history_row("BC5678AA", "2024-01-20", "Діагностика ходової", "160000"),
        history_row("AA0001KA", "2022-03-01", "Заміна ременя ГРМ", "100000"),
        history_row("AA0001KA", "2024-02-01", "Огляд", "200000"),
        history_row("ZZ9999", "2024-01-01", "Заміна оливи", "50000"),
    ]
