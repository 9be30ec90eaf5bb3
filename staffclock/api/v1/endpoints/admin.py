"""
Admin-only attendance endpoints — manual adjustment and the monthly report.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.api.v1.deps import get_clock, get_db, require_admin
from staffclock.api.v1.endpoints.attendance import default_period
from staffclock.models.attendance import AttendanceRecord
from staffclock.models.employee import Employee
from staffclock.models.user import User
from staffclock.schemas.attendance import (AdjustData, AttendanceAdjust,
                                           AttendanceRead, Envelope, ReportData)
from staffclock.services import attendance as attendance_service
from staffclock.services import reports

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/attendance/adjust", response_model=Envelope[AdjustData])
async def adjust_attendance(
    body: AttendanceAdjust,
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[AdjustData]:
    """Override a day's record; creates it when addressed by employee and date."""
    record = await attendance_service.adjust(
        db,
        body.changes(),
        admin.id,
        clock(),
        attendance_id=body.attendance_id,
        employee_id=body.employee_id,
        day=body.date,
    )
    employee = await db.get(Employee, record.employee_id)
    return Envelope(
        message="Attendance adjusted successfully",
        data=AdjustData(
            attendance=AttendanceRead.from_record(record, employee.name if employee else None)
        ),
    )


@router.get("/reports/attendance", response_model=Envelope[ReportData])
async def attendance_report(
    month: int | None = None,
    year: int | None = None,
    department: str | None = None,
    clock: Callable[[], datetime] = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Envelope[ReportData]:
    """Per-employee monthly summary with daily records (single query)."""
    period = await default_period(db, clock(), year, month)
    start, end = reports.month_bounds(period.year, period.month)

    query = (
        select(AttendanceRecord, Employee)
        .join(Employee, AttendanceRecord.employee_id == Employee.id)
        .where(AttendanceRecord.date.between(start, end))
        .order_by(AttendanceRecord.employee_id, AttendanceRecord.date)
    )
    if department:
        query = query.where(Employee.department == department)
    rows = (await db.execute(query)).all()

    employees: dict[int, Employee] = {emp.id: emp for _, emp in rows}
    per_employee = []
    for emp_id, records in reports.group_by_employee(rec for rec, _ in rows).items():
        emp = employees[emp_id]
        per_employee.append(
            {
                "employee_id": emp_id,
                "name": emp.name,
                "department": emp.department,
                "summary": reports.summarize(records),
                "daily_records": [reports.daily_row(r) for r in records],
            }
        )

    return Envelope(
        message="Attendance report generated successfully",
        data=ReportData(
            report=per_employee,
            period=period,
            overall_summary=reports.overall_summary(per_employee),
        ),
    )
