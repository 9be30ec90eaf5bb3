"""
Attendance Settings model — singleton table for the organisation shift window.

Only one row should ever exist. Admins update it via the settings API and
the check-in / check-out logic reads it on every call.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from staffclock.db.base import Base


class AttendanceSettings(Base):
    __tablename__ = "attendance_settings"

    id: int = Column(Integer, primary_key=True, default=1)  # type: ignore[assignment]
    shift_start: str = Column(String(8), nullable=False, default="09:00:00")  # type: ignore[assignment]
    shift_end: str = Column(String(8), nullable=False, default="17:00:00")  # type: ignore[assignment]
    standard_shift_seconds: int = Column(Integer, nullable=False, default=8 * 3600)  # type: ignore[assignment]
    timezone_offset: str = Column(String(6), nullable=False, default="+00:00")  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
