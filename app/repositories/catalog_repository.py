"""Lookups of the clinic catalogue referenced by bookings."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employees import employees
from app.models.services import services


class CatalogRepository:
    """Read-only access to services and employees of a clinic."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get_active_service(self, service_id: UUID, clinic_id: UUID) -> dict | None:
        """Service offered by the clinic and currently bookable."""
        stmt = select(services).where(
            services.c.id == service_id,
            services.c.clinic_id == clinic_id,
            services.c.is_active.is_(True),
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_clinic_employee(self, employee_id: UUID, clinic_id: UUID) -> dict | None:
        """Employee assigned to the clinic."""
        stmt = select(employees).where(
            employees.c.id == employee_id,
            employees.c.clinic_id == clinic_id,
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None
