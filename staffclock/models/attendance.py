"""
AttendanceRecord — one row per employee per local calendar day.

``clock_in`` / ``clock_out`` are NULL until recorded, so a check-in at
exactly midnight is distinguishable from "not checked in".  Every duration
column holds whole seconds.
"""

from __future__ import annotations

import enum
from datetime import datetime, time, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Time, UniqueConstraint)
from sqlalchemy.orm import relationship

from staffclock.db.base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_emp_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id"), nullable=False, index=True
    )
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default=AttendanceStatus.PRESENT.value
    )
    clock_in: time | None = Column(Time, nullable=True)  # type: ignore[assignment]
    clock_out: time | None = Column(Time, nullable=True)  # type: ignore[assignment]
    late_seconds: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    early_leaving_seconds: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    overtime_seconds: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    total_rest_seconds: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    total_work_seconds: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    half_day: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    adjusted_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    adjusted_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    employee = relationship("Employee", back_populates="attendance_records")
