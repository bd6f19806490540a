from datetime import datetime, timedelta, timezone

from datetime_utils import ensure_utc, parse_iso, round_half_up, to_iso


def test_to_iso_uses_milliseconds_and_z():
    dt = datetime(2024, 5, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)
    assert to_iso(dt) == "2024-05-01T09:30:15.123Z"


def test_to_iso_converts_offsets_to_utc():
    plus_three = timezone(timedelta(hours=3))
    dt = datetime(2024, 5, 1, 12, 0, tzinfo=plus_three)
    assert to_iso(dt) == "2024-05-01T09:00:00.000Z"
    assert to_iso(None) is None


def test_parse_iso_variants():
    expected = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    assert parse_iso("2024-05-01T09:00:00Z") == expected
    assert parse_iso("2024-05-01T09:00:00.000Z") == expected
    assert parse_iso("2024-05-01T12:00:00+03:00") == expected
    assert parse_iso("2024-05-01T09:00:00.5Z").microsecond == 500000
    assert parse_iso("") is None
    assert parse_iso("not a date") is None


def test_parse_iso_naive_is_utc():
    assert parse_iso("2024-05-01T09:00:00").tzinfo == timezone.utc
    assert ensure_utc(datetime(2024, 5, 1)).tzinfo == timezone.utc


def test_round_half_up_matches_browser_rounding():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(-0.5) == 0
