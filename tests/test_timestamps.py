"""
Tests for timestamp normalization.
"""
from datetime import datetime, timezone

import pytest

from scan2order.timestamps import from_epoch_ms, to_epoch_ms


def test_int_millis_pass_through():
    assert to_epoch_ms(1_749_988_800_000) == 1_749_988_800_000


def test_small_numbers_are_still_millis():
    # Values written by a store running on a test clock near the epoch
    assert to_epoch_ms(1_000_000) == 1_000_000
    assert to_epoch_ms(1_600_000.0) == 1_600_000


def test_seconds_when_asked():
    assert to_epoch_ms(1_749_988_800, unit="s") == 1_749_988_800_000
    assert to_epoch_ms(1_749_988_800.5, unit="s") == 1_749_988_800_500
    assert to_epoch_ms("1749988800", unit="s") == 1_749_988_800_000


def test_unknown_unit_raises():
    with pytest.raises(ValueError):
        to_epoch_ms(1, unit="minutes")


def test_seconds_nanoseconds_record():
    assert to_epoch_ms({"seconds": 1_749_988_800, "nanoseconds": 250_000_000}) == 1_749_988_800_250
    assert to_epoch_ms({"_seconds": 1_749_988_800, "_nanoseconds": 0}) == 1_749_988_800_000


def test_aware_datetime():
    dt = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
    assert to_epoch_ms(dt) == 1_749_988_800_000


def test_naive_datetime_is_utc():
    assert to_epoch_ms(datetime(2025, 6, 15, 12, 0)) == 1_749_988_800_000


def test_iso_string_with_z():
    assert to_epoch_ms("2025-06-15T12:00:00Z") == 1_749_988_800_000


def test_numeric_string():
    assert to_epoch_ms("1749988800000") == 1_749_988_800_000


def test_empty_values_are_none():
    assert to_epoch_ms(None) is None
    assert to_epoch_ms("") is None


@pytest.mark.parametrize("bad", ["yesterday", True, [1, 2], {"seconds": "x"}])
def test_garbage_raises(bad):
    with pytest.raises(ValueError):
        to_epoch_ms(bad)


def test_from_epoch_ms_roundtrip_is_utc():
    dt = from_epoch_ms(1_749_988_800_123)
    assert dt.tzinfo is not None
    assert to_epoch_ms(dt) == 1_749_988_800_123
    assert from_epoch_ms(None) is None
