"""Persistence gateway for appointment rows."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.schemas.appointments import AppointmentStatus
from app.services.appointment_state import TERMINAL_STATUSES

# The only columns an UPDATE may ever touch; references are write-once
MUTABLE_FIELDS = frozenset({"scheduled_date", "status", "notes"})


class AppointmentRepository:
    """Reads and writes the appointments table within the caller's session."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get_by_id(self, appointment_id: UUID) -> dict | None:
        """Point lookup of the raw appointment row."""
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def find_active_in_slot(
        self,
        employee_id: UUID,
        scheduled_date: datetime,
        exclude_appointment_id: UUID | None = None,
    ) -> UUID | None:
        """
        Return the id of an active appointment holding the exact slot, if any.

        Args:
            employee_id: Provider whose agenda is checked
            scheduled_date: Exact timestamp of the slot
            exclude_appointment_id: Appointment to ignore (itself, when rescheduling)

        Returns:
            Id of the occupying appointment or None
        """
        conditions = [
            appointments.c.employee_id == employee_id,
            appointments.c.scheduled_date == scheduled_date,
            appointments.c.status.notin_([s.value for s in TERMINAL_STATUSES]),
        ]
        if exclude_appointment_id is not None:
            conditions.append(appointments.c.id != exclude_appointment_id)

        stmt = select(appointments.c.id).where(*conditions).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def insert(
        self,
        *,
        customer_id: UUID,
        clinic_id: UUID,
        employee_id: UUID,
        service_id: UUID,
        scheduled_date: datetime,
        notes: str | None,
    ) -> dict:
        """Insert a new pending appointment. Does not commit."""
        now = datetime.now(UTC)
        stmt = (
            insert(appointments)
            .values(
                id=uuid4(),
                scheduled_date=scheduled_date,
                status=AppointmentStatus.PENDING.value,
                notes=notes,
                clinic_id=clinic_id,
                customer_id=customer_id,
                employee_id=employee_id,
                service_id=service_id,
                created_at=now,
                updated_at=now,
            )
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        return dict(result.mappings().one())

    async def update_fields(
        self,
        appointment_id: UUID,
        values: dict[str, Any],
        expected_status: str,
    ) -> dict | None:
        """
        Apply a partial update and refresh ``updated_at``. Does not commit.

        The statement only matches while the row still has ``expected_status``,
        so a status change made by someone else in between is not overwritten.

        Returns:
            The updated row, or None when the row moved to another status
        """
        illegal = set(values) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Write-once columns cannot be updated: {sorted(illegal)}")

        stmt = (
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.status == expected_status,
            )
            .values(**values, updated_at=datetime.now(UTC))
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None
