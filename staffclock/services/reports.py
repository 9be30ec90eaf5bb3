"""
Aggregation over stored attendance records.

Reports sum the persisted ``total_work_seconds`` rather than re-deriving it
from the clocks, so admin adjustments are reflected exactly.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable

from staffclock.core.timeutils import format_clock, format_duration, format_hours_minutes
from staffclock.models.attendance import AttendanceRecord, AttendanceStatus


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last ``YYYY-MM-DD`` of a month (string dates sort correctly)."""
    _, days_in_month = calendar.monthrange(year, month)
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{days_in_month:02d}"


def total_work_seconds(records: Iterable[AttendanceRecord]) -> int:
    return sum(r.total_work_seconds or 0 for r in records)


def average_work_seconds(records: list[AttendanceRecord]) -> int:
    if not records:
        return 0
    return round(total_work_seconds(records) / len(records))


def summarize(records: list[AttendanceRecord]) -> dict:
    """Day counts by status / flag plus total and average worked hours."""
    by_status: dict[str, int] = defaultdict(int)
    for r in records:
        by_status[r.status] += 1
    return {
        "total_days": len(records),
        "present_days": by_status[AttendanceStatus.PRESENT.value],
        "absent_days": by_status[AttendanceStatus.ABSENT.value],
        "leave_days": by_status[AttendanceStatus.LEAVE.value],
        "holiday_days": by_status[AttendanceStatus.HOLIDAY.value],
        "late_days": sum(1 for r in records if r.late_seconds > 0),
        "half_days": sum(1 for r in records if r.half_day),
        "early_leaving_days": sum(1 for r in records if r.early_leaving_seconds > 0),
        "total_work_hours": format_hours_minutes(total_work_seconds(records)),
        "average_work_hours": format_hours_minutes(average_work_seconds(records)),
    }


def daily_row(record: AttendanceRecord) -> dict:
    return {
        "date": record.date,
        "status": record.status,
        "clock_in": format_clock(record.clock_in),
        "clock_out": format_clock(record.clock_out),
        "total_work": format_duration(record.total_work_seconds),
        "late": format_duration(record.late_seconds),
        "early_leaving": format_duration(record.early_leaving_seconds),
        "half_day": record.half_day,
    }


def group_by_employee(records: Iterable[AttendanceRecord]) -> dict[int, list[AttendanceRecord]]:
    grouped: dict[int, list[AttendanceRecord]] = defaultdict(list)
    for r in records:
        grouped[r.employee_id].append(r)
    return dict(grouped)


def overall_summary(per_employee: list[dict]) -> dict:
    return {
        "total_employees": len(per_employee),
        "total_present_days": sum(e["summary"]["present_days"] for e in per_employee),
        "total_absent_days": sum(e["summary"]["absent_days"] for e in per_employee),
        "total_late_days": sum(e["summary"]["late_days"] for e in per_employee),
    }
