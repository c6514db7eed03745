"""Unit tests for SRS time helpers."""

from datetime import datetime, timedelta, timezone

from memorycards.srs.time import add_days_iso, parse_iso_z, utc_datetime_to_iso_z


def test_utc_datetime_to_iso_z_second_precision():
    dt = datetime(2025, 12, 13, 0, 0, 0, 999999, tzinfo=timezone.utc)
    assert utc_datetime_to_iso_z(dt) == "2025-12-13T00:00:00Z"


def test_utc_datetime_to_iso_z_converts_offsets_to_utc():
    dt = datetime(2025, 12, 13, 2, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert utc_datetime_to_iso_z(dt) == "2025-12-13T00:00:00Z"


def test_utc_datetime_to_iso_z_treats_naive_as_utc():
    assert utc_datetime_to_iso_z(datetime(2025, 12, 13, 8, 30)) == "2025-12-13T08:30:00Z"


def test_parse_iso_z_accepts_z_and_fractional_seconds():
    assert parse_iso_z("2025-12-13T00:00:00Z").tzinfo is not None
    assert parse_iso_z("2025-12-13T00:00:00.123456Z").tzinfo is not None


def test_parse_iso_z_round_trips_formatted_value():
    assert utc_datetime_to_iso_z(parse_iso_z("2025-12-13T10:11:12Z")) == "2025-12-13T10:11:12Z"


def test_add_days_iso_rollover():
    now = datetime(2025, 12, 30, 0, 0, 0, tzinfo=timezone.utc)
    assert add_days_iso(now, 4) == "2026-01-03T00:00:00Z"


def test_add_days_iso_fractional_days():
    now = datetime(2025, 12, 31, 23, 55, 0, tzinfo=timezone.utc)
    assert add_days_iso(now, 10 / 1440) == "2026-01-01T00:05:00Z"
    assert add_days_iso(now, 0.5) == "2026-01-01T11:55:00Z"


def test_iso_strings_sort_chronologically():
    base = datetime(2025, 12, 13, tzinfo=timezone.utc)
    stamps = [add_days_iso(base, days) for days in (3, 0.25, 12, 1)]
    assert sorted(stamps) == [add_days_iso(base, days) for days in (0.25, 1, 3, 12)]
