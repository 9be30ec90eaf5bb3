"""
Attendance settings endpoints — the organisation shift window.

Singleton pattern: only one row in attendance_settings. GET retrieves it,
PUT updates it. If no row exists, one is created with the configured
defaults on first access.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.api.v1.deps import get_db, require_admin
from staffclock.core.exceptions import ValidationError
from staffclock.models.attendance_settings import AttendanceSettings
from staffclock.models.user import User
from staffclock.schemas.attendance import AttendanceSettingsRead, AttendanceSettingsUpdate
from staffclock.services.attendance import get_or_create_settings

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


@router.get("/settings", response_model=AttendanceSettingsRead)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AttendanceSettings:
    """Get the current shift window and organisation offset."""
    return await get_or_create_settings(db)


@router.put("/settings", response_model=AttendanceSettingsRead)
async def update_settings(
    body: AttendanceSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AttendanceSettings:
    """Update shift start / end, standard shift length or UTC offset."""
    row = await get_or_create_settings(db)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    shift_start = changes.get("shift_start", row.shift_start)
    shift_end = changes.get("shift_end", row.shift_end)
    if shift_start == shift_end:
        raise ValidationError("shift_end must differ from shift_start")

    for field, value in changes.items():
        setattr(row, field, value)

    await db.commit()
    await db.refresh(row)
    logger.info("Attendance settings updated: %s", changes)
    return row
