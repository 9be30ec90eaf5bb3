"""Tests for the pure attendance clock arithmetic."""

from datetime import datetime, time, timedelta, timezone

import pytest

from staffclock.core.timeutils import (format_duration, format_hours_minutes, parse_clock,
                                       parse_duration, parse_offset, to_local)
from staffclock.services.clock import (ShiftConfig, compute_check_out, compute_early_leaving,
                                       compute_late, compute_overtime, truncate,
                                       worked_seconds)

SHIFT = ShiftConfig()


def t(value: str) -> time:
    return parse_clock(value)


@pytest.mark.parametrize("clock_in", ["00:00:00", "07:30:00", "08:59:59", "09:00:00"])
def test_no_lateness_at_or_before_shift_start(clock_in):
    assert compute_late(t(clock_in), SHIFT.shift_start) == 0


@pytest.mark.parametrize(
    "clock_in, expected",
    [("09:00:01", 1), ("09:15:00", 15 * 60), ("12:34:56", 3 * 3600 + 34 * 60 + 56)],
)
def test_lateness_is_exact_to_the_second(clock_in, expected):
    assert compute_late(t(clock_in), SHIFT.shift_start) == expected


@pytest.mark.parametrize("clock_out", ["17:00:00", "17:00:01", "23:59:59"])
def test_no_early_leaving_at_or_after_shift_end(clock_out):
    assert compute_early_leaving(t(clock_out), SHIFT.shift_end) == 0


def test_early_leaving_before_shift_end():
    assert compute_early_leaving(t("16:40:00"), SHIFT.shift_end) == 20 * 60


def test_worked_seconds_same_day():
    assert worked_seconds(t("09:15:00"), t("17:30:00")) == 8 * 3600 + 15 * 60


def test_worked_seconds_crosses_midnight():
    assert worked_seconds(t("22:00:00"), t("06:00:00")) == 8 * 3600


def test_worked_seconds_equal_clocks_is_zero():
    assert worked_seconds(t("10:00:00"), t("10:00:00")) == 0


def test_overtime_never_negative():
    assert compute_overtime(7 * 3600, 8 * 3600) == 0
    assert compute_overtime(8 * 3600 + 1, 8 * 3600) == 1


def test_scenario_a_late_arrival_with_overtime():
    assert format_duration(compute_late(t("09:15:00"), SHIFT.shift_start)) == "00:15:00"
    times = compute_check_out(t("09:15:00"), t("17:30:00"), 0, SHIFT)
    assert format_duration(times.early_leaving_seconds) == "00:00:00"
    assert format_duration(times.total_work_seconds) == "08:15:00"
    assert format_duration(times.overtime_seconds) == "00:15:00"
    assert times.left_early is False


def test_scenario_b_early_arrival_early_departure():
    assert compute_late(t("08:50:00"), SHIFT.shift_start) == 0
    times = compute_check_out(t("08:50:00"), t("16:40:00"), 0, SHIFT)
    assert format_duration(times.early_leaving_seconds) == "00:20:00"
    assert format_duration(times.total_work_seconds) == "07:50:00"
    assert format_duration(times.overtime_seconds) == "00:00:00"
    assert times.left_early is True


def test_scenario_c_overnight_shift():
    times = compute_check_out(t("22:00:00"), t("06:00:00"), 0, SHIFT)
    assert times.total_work_seconds == 8 * 3600
    assert times.overtime_seconds == 0


def test_rest_is_subtracted_and_floored_at_zero():
    times = compute_check_out(t("09:00:00"), t("18:00:00"), 3600, SHIFT)
    assert times.total_work_seconds == 8 * 3600
    assert times.overtime_seconds == 0

    floored = compute_check_out(t("09:00:00"), t("09:30:00"), 3600, SHIFT)
    assert floored.total_work_seconds == 0
    assert floored.overtime_seconds == 0


def test_custom_standard_shift_length():
    config = ShiftConfig(standard_shift_seconds=6 * 3600)
    times = compute_check_out(t("09:00:00"), t("16:00:00"), 0, config)
    assert times.overtime_seconds == 3600


def test_shift_config_from_strings():
    config = ShiftConfig.from_strings("08:30:00", "16:30", 7 * 3600, "+05:30")
    assert config.shift_start == time(8, 30)
    assert config.shift_end == time(16, 30)
    assert config.standard_shift_seconds == 7 * 3600
    assert config.tz.utcoffset(None) == timedelta(hours=5, minutes=30)


def test_truncate_drops_microseconds():
    assert truncate(time(9, 15, 0, 999999)) == time(9, 15, 0)


# ── timeutils ───────────────────────────────────────────────────────
def test_format_duration_and_hours_minutes():
    assert format_duration(0) == "00:00:00"
    assert format_duration(3661) == "01:01:01"
    assert format_duration(-5) == "00:00:00"
    assert format_hours_minutes(49 * 3600 + 30 * 60 + 59) == "49:30"


def test_parse_duration_limits():
    assert parse_duration("01:30:00") == 5400
    assert parse_duration("24:00:00") == 86400
    with pytest.raises(ValueError):
        parse_duration("24:00:01")
    with pytest.raises(ValueError):
        parse_duration("1:30")


@pytest.mark.parametrize("value", ["24:00:00", "12:60:00", "noon", "9"])
def test_parse_clock_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_clock(value)


def test_parse_offset_and_local_conversion():
    tz = parse_offset("-03:00")
    local = to_local(datetime(2024, 3, 11, 2, 0, tzinfo=timezone.utc), tz)
    assert local.strftime("%Y-%m-%d %H:%M") == "2024-03-10 23:00"
    with pytest.raises(ValueError):
        parse_offset("+5")


def test_to_local_treats_naive_as_utc():
    local = to_local(datetime(2024, 3, 11, 12, 0), parse_offset("+02:00"))
    assert local.hour == 14
