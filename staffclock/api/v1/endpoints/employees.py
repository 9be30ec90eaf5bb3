"""
Employee profile endpoints.

- GET operations require any authenticated user.
- POST / PUT / DELETE operations require admin role.
- ``user_id`` links a profile to a login so that user can check in / out.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffclock.api.v1.deps import get_current_active_user, get_db, require_admin
from staffclock.core.exceptions import ConflictError, NotFoundError
from staffclock.models.employee import Employee
from staffclock.models.user import User
from staffclock.schemas.employee import (DeleteResponse, EmployeeCreate, EmployeeRead,
                                         EmployeeUpdate)

router = APIRouter(tags=["employees"])
logger = logging.getLogger(__name__)


async def _get_employee(db: AsyncSession, employee_id: int) -> Employee:
    emp = await db.get(Employee, employee_id)
    if emp is None:
        raise NotFoundError("Employee not found", reason="employee_not_found")
    return emp


async def _check_user_link(db: AsyncSession, user_id: int, employee_id: int | None = None) -> None:
    """The linked user must exist and must not own another profile."""
    if await db.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found", reason="user_not_found")
    result = await db.execute(select(Employee.id).where(Employee.user_id == user_id))
    owner = result.scalar_one_or_none()
    if owner is not None and owner != employee_id:
        raise ConflictError(
            f"User {user_id} is already linked to employee {owner}", reason="user_already_linked"
        )


@router.get("/employees", response_model=list[EmployeeRead])
async def list_employees(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    search: str | None = None,
    department: str | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Employee]:
    query = (
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.name)
        .offset(skip)
        .limit(limit)
    )
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe_search = search.replace("%", r"\%").replace("_", r"\_")
        query = query.where(Employee.name.ilike(f"%{safe_search}%", escape="\\"))
    if department:
        query = query.where(Employee.department == department)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/employees", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Employee:
    if body.user_id is not None:
        await _check_user_link(db, body.user_id)

    employee = Employee(**body.model_dump())
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    logger.info("Created employee %s (id %d, user %s)", employee.name, employee.id, employee.user_id)
    return employee


@router.get("/employees/{employee_id}", response_model=EmployeeRead)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> Employee:
    emp = await _get_employee(db, employee_id)
    if not emp.is_active:
        raise NotFoundError("Employee not found", reason="employee_not_found")
    return emp


@router.put("/employees/{employee_id}", response_model=EmployeeRead)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Employee:
    emp = await _get_employee(db, employee_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("user_id") is not None:
        await _check_user_link(db, changes["user_id"], employee_id)

    for field, value in changes.items():
        setattr(emp, field, value)

    await db.commit()
    await db.refresh(emp)
    logger.info("Updated employee %d: %s", employee_id, sorted(changes))
    return emp


@router.delete("/employees/{employee_id}", response_model=DeleteResponse)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Soft-delete (deactivate) an employee. Attendance history is preserved."""
    emp = await _get_employee(db, employee_id)
    emp.is_active = False
    await db.commit()
    logger.info("Deactivated employee %d (%s)", employee_id, emp.name)
    return DeleteResponse(success=True, message=f"Employee '{emp.name}' deactivated")
