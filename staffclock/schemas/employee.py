"""Pydantic schemas for employee profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from staffclock.core.timeutils import parse_offset


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    if len(v) > 200:
        raise ValueError("Name must not exceed 200 characters")
    return v


def _check_offset(v: str | None) -> str | None:
    if v is None:
        return v
    parse_offset(v)
    return v.strip()


class EmployeeCreate(BaseModel):
    name: str
    user_id: int | None = None
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    position: str | None = None
    timezone_offset: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("timezone_offset")
    @classmethod
    def _offset(cls, v: str | None) -> str | None:
        return _check_offset(v)


class EmployeeUpdate(BaseModel):
    name: str | None = None
    user_id: int | None = None
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    position: str | None = None
    timezone_offset: str | None = None

    # Only runs when name is sent; an explicit null is rejected.
    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Name must not be null")
        return _check_name(v)

    @field_validator("timezone_offset")
    @classmethod
    def _offset(cls, v: str | None) -> str | None:
        return _check_offset(v)


class EmployeeRead(BaseModel):
    id: int
    user_id: int | None
    name: str
    email: str | None
    phone: str | None
    department: str | None
    position: str | None
    timezone_offset: str | None
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool
    message: str
