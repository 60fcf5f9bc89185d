from __future__ import annotations

import pytest

from greedy_solver import generate_roster
from models import DutyRow
from parsers import parse_duty_rows, parse_overrides, parse_roster_request


def _request(**extra):
    data = {
        "yil": "2024",
        "ay": "5",
        "rows": [{"id": "t", "label": "TRİAJ", "shiftCode": "M", "defaultCount": 1}],
        "overrides": {"t": {"3": "2", "x": 1, "4": None}, "bozuk": 5},
        "personeller": [
            {"id": "1", "name": "Ayşe Kaya"},
            {"id": "2", "name": "Fatma Şahin"},
            {"id": "3", "name": "Zeynep Ak"},
        ],
        "leaves": [{"personId": "1", "date": "2024-05-03"}],
    }
    data.update(extra)
    return data


def test_request_parsed_into_engine_arguments() -> None:
    kwargs = parse_roster_request(_request(forcePins="false", leavePolicy=" Soft ", rol="Doctor"))

    assert (kwargs["yil"], kwargs["month0"]) == (2024, 4)
    assert kwargs["rows"] == [DutyRow(id="t", label="TRİAJ", shift_code="M", default_count=1)]
    assert kwargs["overrides"] == {"t": {3: 2}}
    assert kwargs["leave_sources"] == [[{"personId": "1", "date": "2024-05-03"}]]
    assert kwargs["force_pins"] is False
    assert kwargs["require_eligibility"] is True
    assert kwargs["leave_policy"] == "soft"
    assert kwargs["role"] == "Doctor"


def test_request_defaults() -> None:
    kwargs = parse_roster_request({"yil": 2024, "month0": 11})

    assert (kwargs["yil"], kwargs["month0"]) == (2024, 11)
    assert kwargs["rows"] == []
    assert kwargs["staff_records"] == []
    assert kwargs["leave_sources"] == []
    assert kwargs["role"] == "Nurse"
    assert kwargs["leave_policy"] == "hard"
    assert kwargs["force_pins"] is True


def test_leave_sources_list_and_single_source_are_merged() -> None:
    kwargs = parse_roster_request(_request(leaveSources=[{"1": {"2024-05": {"9": "x"}}}]))

    assert len(kwargs["leave_sources"]) == 2


@pytest.mark.parametrize("extra", [
    {"ay": 13}, {"ay": 0}, {"yil": "abc"}, {"yil": 0}, {"yil": 10000}, {"month0": -1},
])
def test_invalid_year_or_month_rejected(extra) -> None:
    with pytest.raises(ValueError):
        parse_roster_request(_request(**extra))


def test_year_range_matches_engine_contract() -> None:
    assert parse_roster_request(_request(yil=1999))["yil"] == 1999
    assert parse_roster_request(_request(yil="9999", ay="12"))["month0"] == 11


def test_duty_rows_get_ids_and_duplicates_dropped() -> None:
    rows = parse_duty_rows([
        {"ad": "Kırmızı", "vardiya": "N", "defaultCount": "-2", "pattern": [1, 2, 3]},
        {"id": 7, "label": "Sarı", "pattern": [1, 1, 1, 1, 1, "x", 0], "weekendOff": 1},
        {"id": "7", "label": "Tekrar"},
        "bozuk",
    ])

    assert [r.id for r in rows] == ["row-0", "7"]
    assert rows[0].label == "Kırmızı"
    assert rows[0].shift_code == "N"
    assert rows[0].default_count == 0
    assert rows[0].pattern is None
    assert rows[1].pattern == (1, 1, 1, 1, 1, 0, 0)
    assert rows[1].weekend_off is True


def test_parse_overrides_ignores_non_dict_input() -> None:
    assert parse_overrides(None) == {}
    assert parse_overrides({"r": {"1": 3.0}}) == {"r": {1: 3}}


def test_parsed_request_runs_end_to_end() -> None:
    result = generate_roster(**parse_roster_request(_request()))

    assert len(result.named_assignments[3]["t"]) == 2
    assert "Ayşe Kaya" not in result.named_assignments[3]["t"]
    assert result.issues == []
    assert result.to_dict()["namedAssignments"]["1"]["t"]
