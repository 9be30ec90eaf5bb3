"""
Attendance endpoints — check-in / check-out for the caller, record listing
and monthly summaries.

Check-in and check-out act on the employee profile linked to the bearer
token; every other endpoint here only reads.
"""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.api.v1.deps import (get_clock, get_current_active_user,
                                    get_current_employee, get_db)
from staffclock.core.exceptions import ValidationError
from staffclock.core.timeutils import format_clock, format_duration
from staffclock.models.attendance import AttendanceRecord, AttendanceStatus
from staffclock.models.employee import Employee
from staffclock.models.user import User
from staffclock.schemas.attendance import (AttendancePage, AttendanceRead,
                                           CheckInData, CheckInRequest,
                                           CheckOutData, Envelope,
                                           MyAttendanceData, Period, SummaryData)
from staffclock.services import attendance as attendance_service
from staffclock.services import reports

router = APIRouter(prefix="/attendance", tags=["attendance"])


def month_period(year: int, month: int) -> Period:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return Period(month=month, year=year, month_name=calendar.month_name[month])


async def default_period(
    db: AsyncSession, now: datetime, year: int | None, month: int | None
) -> Period:
    """Requested month, with gaps filled from today in the organisation offset."""
    if year is None or month is None:
        today = await attendance_service.organisation_day(db, now)
        if year is None:
            year = int(today[:4])
        if month is None:
            month = int(today[5:7])
    return month_period(year, month)


def _apply_filters(
    query: Select,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    employee_id: int | None = None,
    status: AttendanceStatus | None = None,
    department: str | None = None,
    month: int | None = None,
    year: int | None = None,
) -> Select:
    if start_date and end_date:
        query = query.where(AttendanceRecord.date.between(start_date, end_date))
    if employee_id is not None:
        query = query.where(AttendanceRecord.employee_id == employee_id)
    if status is not None:
        query = query.where(AttendanceRecord.status == status.value)
    if department:
        query = query.where(Employee.department == department)
    # date is stored as YYYY-MM-DD text, so month/year filter on the prefix
    if year is not None and month is not None:
        query = query.where(AttendanceRecord.date.like(f"{year:04d}-{month:02d}-%"))
    elif year is not None:
        query = query.where(AttendanceRecord.date.like(f"{year:04d}-%"))
    elif month is not None:
        query = query.where(AttendanceRecord.date.like(f"%-{month:02d}-%"))
    return query


async def _page(db: AsyncSession, query: Select, skip: int, limit: int) -> AttendancePage:
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return AttendancePage(
        items=[AttendanceRead.from_record(rec, name) for rec, name in result.all()],
        total=total or 0,
        skip=skip,
        limit=limit,
    )


def _with_names() -> Select:
    return select(AttendanceRecord, Employee.name).join(
        Employee, AttendanceRecord.employee_id == Employee.id
    )


# ── Listing ─────────────────────────────────────────────────────────
@router.get("", response_model=Envelope[AttendancePage])
async def list_attendance(
    start_date: str | None = None,
    end_date: str | None = None,
    employee_id: int | None = None,
    status: AttendanceStatus | None = None,
    department: str | None = None,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Envelope[AttendancePage]:
    query = _apply_filters(
        _with_names(),
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        status=status,
        department=department,
        month=month,
        year=year,
    )
    page = await _page(db, query, skip, limit)
    return Envelope(message="Attendances retrieved successfully", data=page)


# ── Check-in / check-out ───────────────────────────────────────────
@router.post("/check-in", response_model=Envelope[CheckInData])
async def check_in(
    body: CheckInRequest | None = None,
    employee: Employee = Depends(get_current_employee),
    user: User = Depends(get_current_active_user),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
) -> Envelope[CheckInData]:
    """Record today's check-in and the lateness against the shift start."""
    config = await attendance_service.shift_config_for(db, employee)
    result = await attendance_service.check_in(
        db,
        employee,
        clock(),
        config,
        status=body.status if body else None,
        created_by=user.id,
    )
    return Envelope(
        message="Checked in successfully",
        data=CheckInData(
            attendance=AttendanceRead.from_record(result.record, employee.name),
            check_in_time=format_clock(result.check_in_time),
            late=format_duration(result.late_seconds),
        ),
    )


@router.post("/check-out", response_model=Envelope[CheckOutData])
async def check_out(
    employee: Employee = Depends(get_current_employee),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
) -> Envelope[CheckOutData]:
    """Record today's check-out; derives worked time, early leaving and overtime."""
    config = await attendance_service.shift_config_for(db, employee)
    result = await attendance_service.check_out(db, employee, clock(), config)
    times = result.times
    return Envelope(
        message="Checked out successfully",
        data=CheckOutData(
            attendance=AttendanceRead.from_record(result.record, employee.name),
            check_out_time=format_clock(result.check_out_time),
            total_work=format_duration(times.total_work_seconds),
            early_leaving=format_duration(times.early_leaving_seconds),
            overtime=format_duration(times.overtime_seconds),
            left_early=times.left_early,
        ),
    )


# ── Summaries ───────────────────────────────────────────────────────
@router.get("/summary", response_model=Envelope[SummaryData])
async def attendance_summary(
    employee_id: int | None = None,
    month: int | None = None,
    year: int | None = None,
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Envelope[SummaryData]:
    """Monthly day counts and worked hours, optionally for one employee."""
    period = await default_period(db, clock(), year, month)
    start, end = reports.month_bounds(period.year, period.month)

    query = select(AttendanceRecord).where(AttendanceRecord.date.between(start, end))
    if employee_id is not None:
        query = query.where(AttendanceRecord.employee_id == employee_id)
    result = await db.execute(query.order_by(AttendanceRecord.date))
    records = list(result.scalars().all())

    return Envelope(
        message="Attendance summary retrieved successfully",
        data=SummaryData(
            summary=reports.summarize(records),
            period=period,
            daily_breakdown=[reports.daily_row(r) for r in records],
        ),
    )


@router.get("/my-attendance", response_model=Envelope[MyAttendanceData])
async def my_attendance(
    start_date: str | None = None,
    end_date: str | None = None,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=30, ge=1, le=500),
    employee: Employee = Depends(get_current_employee),
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
) -> Envelope[MyAttendanceData]:
    """The caller's records, today's record and this month's summary."""
    query = _apply_filters(
        _with_names(),
        start_date=start_date,
        end_date=end_date,
        employee_id=employee.id,
        month=month,
        year=year,
    )
    page = await _page(db, query, skip, limit)

    config = await attendance_service.shift_config_for(db, employee)
    today, _ = attendance_service.local_day(clock(), config)
    today_record = await attendance_service.get_record(db, employee.id, today)

    this_year, this_month = int(today[:4]), int(today[5:7])
    start, end = reports.month_bounds(this_year, this_month)
    month_result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee.id,
            AttendanceRecord.date.between(start, end),
        )
    )
    monthly = list(month_result.scalars().all())

    checked_in = today_record is not None and today_record.clock_in is not None
    checked_out = today_record is not None and today_record.clock_out is not None
    return Envelope(
        message="My attendance retrieved successfully",
        data=MyAttendanceData(
            attendances=page,
            today_attendance=(
                AttendanceRead.from_record(today_record, employee.name)
                if today_record is not None
                else None
            ),
            monthly_summary=reports.summarize(monthly),
            quick_stats={
                "can_check_in": not checked_in,
                "can_check_out": checked_in and not checked_out,
            },
        ),
    )
