from __future__ import annotations

from datetime import UTC, date, datetime

from jmsfleet._constants import MISSING_TABLE_CODES
from jmsfleet.mapping.normalize import (
    coerce_flag,
    coerce_id,
    coerce_number,
    coerce_text,
    collation_key,
    derive_initials,
    safe_float,
    split_roles,
    utc_calendar_date,
)


def test_missing_table_codes_include_postgrest_and_postgres() -> None:
    assert "PGRST205" in MISSING_TABLE_CODES
    assert "42P01" in MISSING_TABLE_CODES


def test_safe_float_rejects_unusable_values() -> None:
    assert safe_float("12.5") == 12.5
    assert safe_float("  ") is None
    assert safe_float("abc") is None
    assert safe_float(True) is None
    assert safe_float(float("nan")) is None
    assert safe_float("inf") is None


def test_coerce_number_defaults_to_zero() -> None:
    assert coerce_number("150") == 150.0
    assert coerce_number(None) == 0.0
    assert coerce_number("R$ 10") == 0.0


def test_coerce_text_renders_whole_floats_as_integers() -> None:
    assert coerce_text(None) == ""
    assert coerce_text(12345678900.0) == "12345678900"
    assert coerce_text(1.5) == "1.5"
    assert coerce_text(False) == "false"


def test_coerce_flag_only_recognised_spellings_leave_the_default() -> None:
    assert coerce_flag("sim") is True
    assert coerce_flag("off") is False
    assert coerce_flag(None, default=True) is True
    assert coerce_flag("garbage", default=True) is True
    assert coerce_flag("false", default=True) is False
    assert coerce_flag(0) is False


def test_coerce_id_turns_digit_strings_into_ints() -> None:
    assert coerce_id("42") == 42
    assert coerce_id(" 7 ") == 7
    assert coerce_id("#LOC-2024-001") == "#LOC-2024-001"
    assert coerce_id("") is None
    assert coerce_id(3.0) == 3


def test_derive_initials_uses_first_two_words() -> None:
    assert derive_initials("ana maria souza") == "AM"
    assert derive_initials("Pedro") == "P"
    assert derive_initials("") == ""


def test_split_roles_accepts_comma_json_and_lists() -> None:
    assert split_roles("Gerente, Financeiro,") == ["Gerente", "Financeiro"]
    assert split_roles('["Gerente", "Instrutor"]') == ["Gerente", "Instrutor"]
    assert split_roles(["Gerente", "Gerente", " "]) == ["Gerente"]
    assert split_roles(None) == []
    assert split_roles(5) == []


def test_utc_calendar_date_plain_dates_do_not_shift() -> None:
    assert utc_calendar_date("2024-03-01") == date(2024, 3, 1)


def test_utc_calendar_date_converts_offsets_to_utc() -> None:
    # 22:30 at -03:00 is already the next day in UTC.
    assert utc_calendar_date("2024-03-31T22:30:00-03:00") == date(2024, 4, 1)
    assert utc_calendar_date("2024-03-31T10:00:00Z") == date(2024, 3, 31)
    assert utc_calendar_date(datetime(2024, 1, 1, 1, 0, tzinfo=UTC)) == date(2024, 1, 1)


def test_utc_calendar_date_invalid_values() -> None:
    assert utc_calendar_date("") is None
    assert utc_calendar_date("31/12/2024") is None
    assert utc_calendar_date(123) is None


def test_collation_key_ignores_accents_and_case() -> None:
    names = ["Zé", "ângela", "Bruno", "Angela"]
    assert sorted(names, key=collation_key) == ["Angela", "ângela", "Bruno", "Zé"]
