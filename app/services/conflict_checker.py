"""Active-slot conflict detection.

A slot is the exact ``(employee_id, scheduled_date)`` pair. Service duration
is not taken into account: two appointments only collide on the same
timestamp.
"""

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from app.repositories.appointment_repository import AppointmentRepository

logger = structlog.get_logger()

ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"


class ConflictChecker:
    """Probes a provider's agenda for an occupied slot."""

    def __init__(self, repository: AppointmentRepository):
        """Initialize checker with the appointment repository of the request."""
        self.repository = repository

    async def has_conflict(
        self,
        employee_id: UUID,
        scheduled_date: datetime,
        exclude_appointment_id: UUID | None = None,
    ) -> bool:
        """
        Check whether an active appointment already holds the slot.

        Must run in the same transaction as the write it protects.

        Args:
            employee_id: Provider
            scheduled_date: Exact timestamp
            exclude_appointment_id: Appointment being rescheduled, if any

        Returns:
            True if the slot is taken
        """
        holder = await self.repository.find_active_in_slot(
            employee_id,
            scheduled_date,
            exclude_appointment_id,
        )
        if holder is not None:
            logger.info(
                "appointment_slot_conflict",
                employee_id=str(employee_id),
                scheduled_date=scheduled_date.isoformat(),
                holder_id=str(holder),
            )
            return True
        return False


def is_slot_violation(exc: IntegrityError) -> bool:
    """Whether a failed write tripped the active-slot unique index."""
    message = str(exc.orig)
    # PostgreSQL names the index; SQLite names the indexed columns
    return ACTIVE_SLOT_INDEX in message or (
        "appointments.employee_id" in message and "appointments.scheduled_date" in message
    )
