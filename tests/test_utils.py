from autoclips.utils.system import (
    format_timestamp, parse_timestamp, format_ass_timestamp, parse_ass_timestamp, format_clock,
)


def test_format_timestamp():
    assert format_timestamp(0) == "00:00:00,000"
    assert format_timestamp(1) == "00:00:01,000"
    assert format_timestamp(3661.123) == "01:01:01,123"


def test_format_timestamp_survives_float_noise():
    # products like 4.9 * 1000 carry float noise either side of the integer
    assert format_timestamp(4.9) == "00:00:04,900"
    assert format_timestamp(0.29) == "00:00:00,290"


def test_format_timestamp_clamps_negative():
    assert format_timestamp(-2.0) == "00:00:00,000"


def test_parse_timestamp():
    assert parse_timestamp("00:00:00,000") == 0.0
    assert parse_timestamp("00:00:01,000") == 1.0
    assert abs(parse_timestamp("01:01:01,123") - 3661.123) < 1e-6
    assert abs(parse_timestamp("00:00:02.500") - 2.5) < 1e-6


def test_ass_timestamp():
    assert format_ass_timestamp(0) == "0:00:00.00"
    assert format_ass_timestamp(4.9) == "0:00:04.90"
    assert format_ass_timestamp(3725.456) == "1:02:05.45"
    assert abs(parse_ass_timestamp("1:02:05.45") - 3725.45) < 1e-6


def test_format_clock():
    assert format_clock(75) == "01:15"
    assert format_clock(3725) == "01:02:05"
