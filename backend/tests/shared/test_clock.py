"""Tests for shared/clock.py."""

from datetime import datetime, timezone

from shared.clock import parse_timestamp, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is not None


def test_parse_iso_string_with_z():
    assert parse_timestamp("2025-06-01T12:00:00Z") == datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_naive_string_assumes_utc():
    assert parse_timestamp("2025-06-01T12:00:00").tzinfo == timezone.utc


def test_parse_datetime_passthrough():
    value = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_timestamp(value) is value
