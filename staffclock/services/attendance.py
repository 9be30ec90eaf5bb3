"""
Daily attendance record lifecycle: check-in, check-out, admin adjustment.

Each operation is a single conditional write keyed by the
(employee_id, date) unique constraint, so duplicate taps cannot produce two
rows or two check-ins:

* check-in first tries ``UPDATE ... WHERE clock_in IS NULL`` (claims a row an
  admin created ahead of time) and otherwise inserts; a concurrent insert
  surfaces as ``IntegrityError`` and is reported as already checked in.
* check-out updates ``WHERE clock_out IS NULL`` and treats zero affected rows
  as already checked out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.core.config import settings
from staffclock.core.exceptions import ConflictError, NotFoundError, ValidationError
from staffclock.core.timeutils import parse_offset, to_local
from staffclock.models.attendance import AttendanceRecord, AttendanceStatus
from staffclock.models.attendance_settings import AttendanceSettings
from staffclock.models.employee import Employee
from staffclock.services.clock import (CheckOutTimes, ShiftConfig, compute_check_out,
                                       compute_late, truncate)

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    record: AttendanceRecord
    check_in_time: time
    late_seconds: int


@dataclass
class CheckOutResult:
    record: AttendanceRecord
    check_out_time: time
    times: CheckOutTimes


# ── Configuration ───────────────────────────────────────────────────
async def get_or_create_settings(db: AsyncSession) -> AttendanceSettings:
    """Fetch the singleton settings row, creating it with defaults if absent."""
    result = await db.execute(select(AttendanceSettings).limit(1))
    row = result.scalar_one_or_none()
    if row is None:
        # No rollback here: callers hold objects loaded from this session.
        insert_ = pg_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
        seeded = await db.execute(
            insert_(AttendanceSettings)
            .values(
                id=1,
                shift_start=settings.DEFAULT_SHIFT_START,
                shift_end=settings.DEFAULT_SHIFT_END,
                standard_shift_seconds=settings.DEFAULT_STANDARD_SHIFT_SECONDS,
                timezone_offset=settings.DEFAULT_TIMEZONE_OFFSET,
            )
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await db.commit()
        if seeded.rowcount:
            logger.info("Created default attendance settings")
        result = await db.execute(select(AttendanceSettings).where(AttendanceSettings.id == 1))
        row = result.scalar_one()
    return row


async def shift_config_for(db: AsyncSession, employee: Employee) -> ShiftConfig:
    """Organisation shift window, in the employee's own offset when one is set."""
    employee_offset = employee.timezone_offset
    row = await get_or_create_settings(db)
    return ShiftConfig.from_strings(
        row.shift_start,
        row.shift_end,
        row.standard_shift_seconds,
        employee_offset or row.timezone_offset,
    )


async def organisation_day(db: AsyncSession, now: datetime) -> str:
    """Local calendar day of ``now`` in the organisation offset."""
    row = await get_or_create_settings(db)
    day, _ = local_day(now, ShiftConfig(tz=parse_offset(row.timezone_offset)))
    return day


def local_day(now: datetime, config: ShiftConfig) -> tuple[str, time]:
    """Split an instant into the local ``YYYY-MM-DD`` date and time of day."""
    local = to_local(now, config.tz)
    return local.strftime("%Y-%m-%d"), truncate(local.time())


async def get_record(
    db: AsyncSession, employee_id: int, day: str, *, refresh: bool = False
) -> AttendanceRecord | None:
    query = select(AttendanceRecord).where(
        AttendanceRecord.employee_id == employee_id,
        AttendanceRecord.date == day,
    )
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


# ── Check-in ────────────────────────────────────────────────────────
async def check_in(
    db: AsyncSession,
    employee: Employee,
    now: datetime,
    config: ShiftConfig,
    status: AttendanceStatus | None = None,
    created_by: int | None = None,
) -> CheckInResult:
    employee_id = employee.id
    day, clock_in = local_day(now, config)
    late = compute_late(clock_in, config.shift_start)
    status_value = (status or AttendanceStatus.PRESENT).value

    claimed = await db.execute(
        update(AttendanceRecord)
        .where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date == day,
            AttendanceRecord.clock_in.is_(None),
        )
        .values(clock_in=clock_in, late_seconds=late, status=status_value)
        .execution_options(synchronize_session=False)
    )

    if claimed.rowcount == 0:
        if await get_record(db, employee_id, day) is not None:
            await db.rollback()
            logger.info("Rejected check-in for employee %d on %s: already checked in", employee_id, day)
            raise ConflictError("Already checked in today", reason="already_checked_in")

        db.add(
            AttendanceRecord(
                employee_id=employee_id,
                date=day,
                status=status_value,
                clock_in=clock_in,
                clock_out=None,
                late_seconds=late,
                early_leaving_seconds=0,
                overtime_seconds=0,
                total_rest_seconds=0,
                total_work_seconds=0,
                created_by=created_by,
            )
        )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Concurrent check-in for employee %d on %s lost the race", employee_id, day)
        raise ConflictError("Already checked in today", reason="already_checked_in")

    record = await get_record(db, employee_id, day, refresh=True)
    logger.info(
        "Employee %d checked in at %s on %s (late %ds)", employee_id, clock_in, day, late
    )
    return CheckInResult(record=record, check_in_time=clock_in, late_seconds=late)


# ── Check-out ───────────────────────────────────────────────────────
async def check_out(
    db: AsyncSession,
    employee: Employee,
    now: datetime,
    config: ShiftConfig,
) -> CheckOutResult:
    employee_id = employee.id
    day, clock_out = local_day(now, config)

    record = await get_record(db, employee_id, day)
    if record is None:
        raise NotFoundError("No attendance record found for today", reason="attendance_not_found")
    if record.clock_in is None:
        logger.info("Rejected check-out for employee %d on %s: not checked in", employee_id, day)
        raise ConflictError("Please check in first", reason="not_checked_in")
    if record.clock_out is not None:
        logger.info("Rejected check-out for employee %d on %s: already out", employee_id, day)
        raise ConflictError("Already checked out today", reason="already_checked_out")

    times = compute_check_out(record.clock_in, clock_out, record.total_rest_seconds, config)

    written = await db.execute(
        update(AttendanceRecord)
        .where(
            AttendanceRecord.id == record.id,
            AttendanceRecord.clock_in == record.clock_in,
            AttendanceRecord.clock_out.is_(None),
        )
        .values(
            clock_out=clock_out,
            early_leaving_seconds=times.early_leaving_seconds,
            overtime_seconds=times.overtime_seconds,
            total_work_seconds=times.total_work_seconds,
        )
        .execution_options(synchronize_session=False)
    )
    if written.rowcount == 0:
        await db.rollback()
        raise ConflictError("Already checked out today", reason="already_checked_out")
    await db.commit()

    record = await get_record(db, employee_id, day, refresh=True)
    logger.info(
        "Employee %d checked out at %s on %s (worked %ds, overtime %ds)",
        employee_id,
        clock_out,
        day,
        times.total_work_seconds,
        times.overtime_seconds,
    )
    return CheckOutResult(record=record, check_out_time=clock_out, times=times)


# ── Admin adjustment ────────────────────────────────────────────────
def recompute(record: AttendanceRecord, config: ShiftConfig) -> None:
    """Re-derive late / early leaving / work / overtime from the stored clocks."""
    if record.clock_in is None:
        if record.clock_out is not None:
            raise ValidationError("clock_out cannot be set without clock_in")
        record.late_seconds = 0
    else:
        record.late_seconds = compute_late(record.clock_in, config.shift_start)

    if record.clock_in is not None and record.clock_out is not None:
        times = compute_check_out(
            record.clock_in, record.clock_out, record.total_rest_seconds, config
        )
        record.early_leaving_seconds = times.early_leaving_seconds
        record.total_work_seconds = times.total_work_seconds
        record.overtime_seconds = times.overtime_seconds
    else:
        record.early_leaving_seconds = 0
        record.total_work_seconds = 0
        record.overtime_seconds = 0


async def adjust(
    db: AsyncSession,
    changes: dict[str, Any],
    adjusted_by: int,
    now: datetime,
    *,
    attendance_id: int | None = None,
    employee_id: int | None = None,
    day: str | None = None,
) -> AttendanceRecord:
    """Overwrite a record out of band, creating it for (employee, day) if needed.

    ``changes`` maps record attributes (``status``, ``clock_in``,
    ``clock_out``, ``total_rest_seconds``, ``half_day``, ``notes``) to their
    new values; keys that are absent keep their stored value.
    """
    if attendance_id is not None:
        record = await db.get(AttendanceRecord, attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found", reason="attendance_not_found")
        employee = await db.get(Employee, record.employee_id)
        config = await shift_config_for(db, employee)
    else:
        if employee_id is None or day is None:
            raise ValidationError("Either attendance_id or employee_id and date is required")
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found", reason="employee_not_found")
        config = await shift_config_for(db, employee)
        record = await get_record(db, employee_id, day)
        if record is None:
            record = AttendanceRecord(
                employee_id=employee_id,
                date=day,
                status=AttendanceStatus.PRESENT.value,
                late_seconds=0,
                early_leaving_seconds=0,
                overtime_seconds=0,
                total_rest_seconds=0,
                total_work_seconds=0,
                half_day=False,
                created_by=adjusted_by,
            )
            db.add(record)

    for field, value in changes.items():
        if isinstance(value, AttendanceStatus):
            value = value.value
        setattr(record, field, value)

    try:
        recompute(record, config)
    except ValidationError:
        await db.rollback()
        raise
    record.adjusted_by = adjusted_by
    record.adjusted_at = now

    await db.commit()
    await db.refresh(record)
    logger.info(
        "Attendance %d (employee %d, %s) adjusted by user %d: %s",
        record.id,
        record.employee_id,
        record.date,
        adjusted_by,
        sorted(changes),
    )
    return record
