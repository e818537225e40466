import pytest

from maternity.services.slots import (
    DEFAULT_TOTAL_SLOTS,
    TimeRange,
    calculate_total_slots,
    time_of_day_minutes,
    utilization_rate,
)


@pytest.mark.parametrize(
    "working_hours, expected",
    [
        ("09:00-17:00", 16),
        ("9:00 AM - 5:00 PM", 16),
        ("9:00 AM - 1:00 PM", 8),
        ("12:00 PM - 4:00 PM", 8),
        ("10am-2pm", 8),
        ("9 AM - 5 PM", 16),
        ("08:30-12:45", 8),
        ("Mon-Fri 08:00-14:00", 12),
    ],
)
def test_total_slots_for_recognised_hours(working_hours, expected):
    assert calculate_total_slots(working_hours) == expected


@pytest.mark.parametrize("start, end", [(0, 30), (8 * 60, 17 * 60), (9 * 60 + 15, 11 * 60 + 40), (7 * 60, 7 * 60 + 29)])
def test_twenty_four_hour_span_floors_to_whole_slots(start, end):
    text = f"{start // 60:02d}:{start % 60:02d}-{end // 60:02d}:{end % 60:02d}"
    assert calculate_total_slots(text) == (end - start) // 30


@pytest.mark.parametrize("working_hours", ["by appointment", "", "Mon-Fri", None])
def test_unparseable_hours_default_to_sixteen(working_hours):
    assert calculate_total_slots(working_hours) == DEFAULT_TOTAL_SLOTS == 16


def test_twelve_am_is_not_normalised():
    time_range = TimeRange.parse("12:00 AM - 2:00 PM")
    assert time_range is not None
    assert time_range.start_minutes == 12 * 60
    assert time_range.minutes == 120


def test_reversed_span_is_negative():
    assert calculate_total_slots("17:00-09:00") == -16


def test_time_range_parse_rejects_text_without_hours():
    assert TimeRange.parse("closed") is None


def test_time_of_day_minutes():
    assert time_of_day_minutes("10:00 AM") == 600
    assert time_of_day_minutes("02:30 PM") == 14 * 60 + 30
    assert time_of_day_minutes("12:15 PM") == 12 * 60 + 15
    assert time_of_day_minutes("16:45") == 16 * 60 + 45
    assert time_of_day_minutes("soon") is None


def test_utilization_rate_formatting():
    assert utilization_rate(4, 16) == "25.0"
    assert utilization_rate(1, 3) == "33.3"
    assert utilization_rate(0, 8) == "0.0"
    assert utilization_rate(3, 0) == "0"
    assert utilization_rate(3, -2) == "0"
