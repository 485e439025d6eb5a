"""日時の解釈と表示用整形のテスト。"""

import datetime

import pytest

from utils.date_utils import format_datetime, parse_iso


@pytest.mark.parametrize("value, microsecond", [
    ("2024-01-01T00:00:00.12345+00:00", 123450),
    ("2024-01-01T00:00:00.1+00:00", 100000),
    ("2024-01-01T00:00:00.1234567+00:00", 123456),
    ("2024-01-01T00:00:00.123456Z", 123456),
])
def test_parse_iso_accepts_any_fraction_length(value, microsecond):
    parsed = parse_iso(value)
    assert parsed.microsecond == microsecond
    assert parsed.utcoffset() == datetime.timedelta(0)


def test_parse_iso_treats_naive_as_utc():
    assert parse_iso("2024-01-01T09:30:00").tzinfo == datetime.timezone.utc


def test_parse_iso_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso("not a date")


def test_format_datetime_with_five_digit_fraction(qapp):
    value = "2024-06-15T12:00:00.12345+00:00"
    text = format_datetime(value)
    assert text != value
    assert text.startswith("2024年6月")


def test_format_datetime_returns_unparseable_input(qapp):
    assert format_datetime("昨日") == "昨日"
