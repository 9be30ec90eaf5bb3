"""
Attendance clock arithmetic — lateness, early leaving, worked time, overtime.

Everything here is a pure function of times of day and a :class:`ShiftConfig`;
persistence lives in :mod:`staffclock.services.attendance`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time, timezone

from staffclock.core.timeutils import SECONDS_PER_DAY, parse_clock, parse_offset, seconds_of_day

DEFAULT_STANDARD_SHIFT_SECONDS = 8 * 3600


@dataclass(frozen=True)
class ShiftConfig:
    """Shift window an operation is evaluated against."""

    shift_start: time = time(9, 0, 0)
    shift_end: time = time(17, 0, 0)
    standard_shift_seconds: int = DEFAULT_STANDARD_SHIFT_SECONDS
    tz: timezone = timezone.utc

    @classmethod
    def from_strings(
        cls,
        shift_start: str,
        shift_end: str,
        standard_shift_seconds: int = DEFAULT_STANDARD_SHIFT_SECONDS,
        timezone_offset: str = "+00:00",
    ) -> "ShiftConfig":
        return cls(
            shift_start=parse_clock(shift_start),
            shift_end=parse_clock(shift_end),
            standard_shift_seconds=standard_shift_seconds,
            tz=parse_offset(timezone_offset),
        )


@dataclass(frozen=True)
class CheckOutTimes:
    total_work_seconds: int
    early_leaving_seconds: int
    overtime_seconds: int

    @property
    def left_early(self) -> bool:
        return self.early_leaving_seconds != 0


def truncate(value: time) -> time:
    """Drop sub-second precision and tzinfo; records are kept to the second."""
    return value.replace(microsecond=0, tzinfo=None)


def compute_late(clock_in: time, shift_start: time) -> int:
    """Seconds the check-in happened after shift start, 0 when on time."""
    return max(0, seconds_of_day(clock_in) - seconds_of_day(shift_start))


def compute_early_leaving(clock_out: time, shift_end: time) -> int:
    """Seconds the check-out happened before shift end, 0 when at/after it."""
    return max(0, seconds_of_day(shift_end) - seconds_of_day(clock_out))


def worked_seconds(clock_in: time, clock_out: time) -> int:
    """Raw span between two clock readings; an earlier clock-out crossed midnight."""
    start = seconds_of_day(clock_in)
    end = seconds_of_day(clock_out)
    if end < start:
        end += SECONDS_PER_DAY
    return end - start


def compute_overtime(net_seconds: int, standard_shift_seconds: int) -> int:
    return max(0, net_seconds - standard_shift_seconds)


def compute_check_out(
    clock_in: time,
    clock_out: time,
    rest_seconds: int,
    config: ShiftConfig,
) -> CheckOutTimes:
    net = max(0, worked_seconds(clock_in, clock_out) - max(0, rest_seconds))
    return CheckOutTimes(
        total_work_seconds=net,
        early_leaving_seconds=compute_early_leaving(clock_out, config.shift_end),
        overtime_seconds=compute_overtime(net, config.standard_shift_seconds),
    )
