"""Pydantic schemas for attendance records, clock operations and settings."""

from __future__ import annotations

from datetime import datetime, time
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from staffclock.core.timeutils import (SECONDS_PER_DAY, format_clock, format_duration,
                                       parse_clock, parse_duration, parse_offset)
from staffclock.models.attendance import AttendanceRecord, AttendanceStatus

T = TypeVar("T")


def _check_date(v: str | None) -> str | None:
    if v is None:
        return v
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError("Date must be YYYY-MM-DD") from exc
    return v


# ── Envelope ────────────────────────────────────────────────────────
class Envelope(BaseModel, Generic[T]):
    status: bool = True
    message: str
    data: T


# ── Records ─────────────────────────────────────────────────────────
class AttendanceRead(BaseModel):
    id: int
    employee_id: int
    employee_name: str | None = None
    date: str
    status: str
    clock_in: str | None
    clock_out: str | None
    late: str
    early_leaving: str
    overtime: str
    total_rest: str
    total_work: str
    half_day: bool
    notes: str | None = None
    adjusted_by: int | None = None
    adjusted_at: datetime | None = None

    @classmethod
    def from_record(
        cls, record: AttendanceRecord, employee_name: str | None = None
    ) -> "AttendanceRead":
        return cls(
            id=record.id,
            employee_id=record.employee_id,
            employee_name=employee_name,
            date=record.date,
            status=record.status,
            clock_in=format_clock(record.clock_in),
            clock_out=format_clock(record.clock_out),
            late=format_duration(record.late_seconds),
            early_leaving=format_duration(record.early_leaving_seconds),
            overtime=format_duration(record.overtime_seconds),
            total_rest=format_duration(record.total_rest_seconds),
            total_work=format_duration(record.total_work_seconds),
            half_day=bool(record.half_day),
            notes=record.notes,
            adjusted_by=record.adjusted_by,
            adjusted_at=record.adjusted_at,
        )


class AttendancePage(BaseModel):
    items: list[AttendanceRead]
    total: int
    skip: int
    limit: int


# ── Check-in / check-out ───────────────────────────────────────────
class CheckInRequest(BaseModel):
    status: AttendanceStatus | None = None


class CheckInData(BaseModel):
    attendance: AttendanceRead
    check_in_time: str
    late: str


class CheckOutData(BaseModel):
    attendance: AttendanceRead
    check_out_time: str
    total_work: str
    early_leaving: str
    overtime: str
    left_early: bool


# ── Admin adjustment ───────────────────────────────────────────────
class AttendanceAdjust(BaseModel):
    attendance_id: int | None = None
    employee_id: int | None = None
    date: str | None = None
    status: AttendanceStatus
    clock_in: time | None = None
    clock_out: time | None = None
    total_rest: str | None = None
    half_day: bool | None = None
    reason: str = Field(min_length=1, max_length=500)

    @field_validator("date")
    @classmethod
    def _date(cls, v: str | None) -> str | None:
        return _check_date(v)

    @field_validator("total_rest")
    @classmethod
    def _rest(cls, v: str | None) -> str | None:
        if v is not None:
            parse_duration(v)
        return v

    @field_validator("clock_in", "clock_out")
    @classmethod
    def _whole_seconds(cls, v: time | None) -> time | None:
        return v.replace(microsecond=0, tzinfo=None) if v is not None else v

    @model_validator(mode="after")
    def _target(self) -> "AttendanceAdjust":
        if self.attendance_id is None and (self.employee_id is None or self.date is None):
            raise ValueError("Provide attendance_id, or employee_id together with date")
        return self

    def changes(self) -> dict[str, Any]:
        """Record attributes to overwrite; fields not sent keep their value."""
        sent = self.model_dump(
            exclude_unset=True, exclude={"attendance_id", "employee_id", "date"}
        )
        changes: dict[str, Any] = {}
        for field, value in sent.items():
            if field == "reason":
                changes["notes"] = value
            elif field == "total_rest":
                changes["total_rest_seconds"] = parse_duration(value) if value else 0
            elif field == "half_day":
                changes["half_day"] = bool(value)
            else:
                changes[field] = value
        changes["status"] = self.status
        return changes


class AdjustData(BaseModel):
    attendance: AttendanceRead


# ── Summaries / reports ────────────────────────────────────────────
class AttendanceSummary(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    leave_days: int
    holiday_days: int
    late_days: int
    half_days: int
    early_leaving_days: int
    total_work_hours: str
    average_work_hours: str


class DailyRow(BaseModel):
    date: str
    status: str
    clock_in: str | None
    clock_out: str | None
    total_work: str
    late: str
    early_leaving: str
    half_day: bool


class Period(BaseModel):
    month: int
    year: int
    month_name: str


class SummaryData(BaseModel):
    summary: AttendanceSummary
    period: Period
    daily_breakdown: list[DailyRow]


class QuickStats(BaseModel):
    can_check_in: bool
    can_check_out: bool


class MyAttendanceData(BaseModel):
    attendances: AttendancePage
    today_attendance: AttendanceRead | None
    monthly_summary: AttendanceSummary
    quick_stats: QuickStats


class ReportEmployee(BaseModel):
    employee_id: int
    name: str
    department: str | None
    summary: AttendanceSummary
    daily_records: list[DailyRow]


class OverallSummary(BaseModel):
    total_employees: int
    total_present_days: int
    total_absent_days: int
    total_late_days: int


class ReportData(BaseModel):
    report: list[ReportEmployee]
    period: Period
    overall_summary: OverallSummary


# ── Attendance Settings ────────────────────────────────────────────
class AttendanceSettingsRead(BaseModel):
    shift_start: str
    shift_end: str
    standard_shift_seconds: int
    timezone_offset: str

    model_config = {"from_attributes": True}


class AttendanceSettingsUpdate(BaseModel):
    shift_start: str | None = None
    shift_end: str | None = None
    standard_shift_seconds: int | None = None
    timezone_offset: str | None = None

    @field_validator("shift_start", "shift_end")
    @classmethod
    def _clock(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return format_clock(parse_clock(v))

    @field_validator("standard_shift_seconds")
    @classmethod
    def _standard(cls, v: int | None) -> int | None:
        if v is not None and not 0 < v <= SECONDS_PER_DAY:
            raise ValueError("standard_shift_seconds must be between 1 and 86400")
        return v

    @field_validator("timezone_offset")
    @classmethod
    def _offset(cls, v: str | None) -> str | None:
        if v is None:
            return v
        parse_offset(v)
        return v.strip()


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool
    version: str
