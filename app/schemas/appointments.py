"""Appointment schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "pending"
    PROCESS = "process"
    COMPLETED = "completed"
    CANCELED = "canceled"


def _wall_clock(value: datetime | None) -> datetime | None:
    """Keep the wall-clock value as given, dropping any UTC offset."""
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


class AppointmentCreate(BaseModel):
    """
    Schema for booking a new appointment.

    Reference fields are optional at the schema level so that a missing field
    is reported by the scheduling service as a 400 listing every absent field.
    """

    scheduled_date: datetime | None = None
    clinic_id: UUID | None = None
    employee_id: UUID | None = None
    service_id: UUID | None = None
    notes: str | None = Field(None, max_length=1000)

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v: datetime | None) -> datetime | None:
        """Store the booked wall-clock time as given."""
        return _wall_clock(v)


class AppointmentUpdate(BaseModel):
    """
    Schema for a partial appointment update.

    Only fields explicitly sent are considered. The write-once references are
    declared so that a patch carrying them is rejected instead of dropped.
    """

    scheduled_date: datetime | None = None
    status: AppointmentStatus | None = None
    notes: str | None = Field(None, max_length=1000)

    clinic_id: Any = None
    customer_id: Any = None
    employee_id: Any = None
    service_id: Any = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v: datetime | None) -> datetime | None:
        """Store the booked wall-clock time as given."""
        return _wall_clock(v)

    def requested_fields(self) -> dict[str, Any]:
        """Fields present in the request body, with their values."""
        return self.model_dump(exclude_unset=True)


class AppointmentResponse(BaseModel):
    """Schema for the stored appointment record."""

    id: UUID
    scheduled_date: datetime
    status: AppointmentStatus
    notes: str | None = None
    clinic_id: UUID
    customer_id: UUID
    employee_id: UUID
    service_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AppointmentDetailResponse(AppointmentResponse):
    """Appointment joined with clinic, service, customer and employee display fields."""

    clinic_name: str | None = None
    service_name: str | None = None
    service_price: Decimal | None = None
    service_estimated_time: int | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    employee_name: str | None = None
    employee_email: str | None = None


class AppointmentListResponse(BaseModel):
    """Schema for the (unpaginated) appointment list response."""

    total: int
    items: list[AppointmentDetailResponse]
