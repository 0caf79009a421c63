"""Read-side projection: appointments joined with their display fields."""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.models.clinics import clinics
from app.models.customers import customers
from app.models.employees import employees
from app.models.services import services
from app.schemas.appointments import AppointmentDetailResponse


def _detail_query() -> Select:
    return (
        select(
            appointments,
            clinics.c.name.label("clinic_name"),
            services.c.name.label("service_name"),
            services.c.price.label("service_price"),
            services.c.estimated_time.label("service_estimated_time"),
            customers.c.name.label("customer_name"),
            customers.c.email.label("customer_email"),
            customers.c.phone.label("customer_phone"),
            employees.c.name.label("employee_name"),
            employees.c.email.label("employee_email"),
        )
        .select_from(appointments)
        .outerjoin(clinics, appointments.c.clinic_id == clinics.c.id)
        .outerjoin(services, appointments.c.service_id == services.c.id)
        .outerjoin(customers, appointments.c.customer_id == customers.c.id)
        .outerjoin(employees, appointments.c.employee_id == employees.c.id)
    )


async def fetch_appointment_detail(
    db: AsyncSession,
    appointment_id: UUID,
) -> AppointmentDetailResponse | None:
    """Load one appointment with its joined display fields."""
    stmt = _detail_query().where(appointments.c.id == appointment_id)
    result = await db.execute(stmt)
    row = result.mappings().first()
    return AppointmentDetailResponse.model_validate(dict(row)) if row else None


async def fetch_appointment_details(
    db: AsyncSession,
    *conditions: Any,
) -> list[AppointmentDetailResponse]:
    """Load every matching appointment, latest scheduled first."""
    stmt = _detail_query().where(*conditions).order_by(appointments.c.scheduled_date.desc())
    result = await db.execute(stmt)
    return [AppointmentDetailResponse.model_validate(dict(row)) for row in result.mappings().all()]
