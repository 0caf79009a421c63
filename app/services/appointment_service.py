"""Appointment scheduling service."""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
)
from app.core.redis_client import CacheManager
from app.models.appointments import appointments
from app.repositories.appointment_repository import AppointmentRepository
from app.repositories.appointment_views import (
    fetch_appointment_detail,
    fetch_appointment_details,
)
from app.repositories.catalog_repository import CatalogRepository
from app.schemas.actors import Actor
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetailResponse,
    AppointmentListResponse,
    AppointmentStatus,
    AppointmentUpdate,
)
from app.services.appointment_policy import (
    can_create,
    can_read,
    check_update_allowed,
    require_clinic,
)
from app.services.appointment_state import holds_slot, validate_transition
from app.services.conflict_checker import ConflictChecker, is_slot_violation

logger = structlog.get_logger()

# Every cached view derived from appointments lives under this prefix
APPOINTMENT_CACHE_NAMESPACE = "appointments"

REQUIRED_CREATE_FIELDS = ("scheduled_date", "clinic_id", "employee_id", "service_id")

SLOT_TAKEN = "The selected time slot is not available"


class AppointmentService:
    """Creates, reads and updates appointments on behalf of an actor."""

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize service with database session and optional cache manager."""
        self.db = db
        self.cache = cache_manager
        self.repository = AppointmentRepository(db)
        self.catalog = CatalogRepository(db)
        self.conflicts = ConflictChecker(self.repository)

    @staticmethod
    def _get_list_cache_key(
        generation: int,
        scope: str,
        scope_id: UUID,
        status: AppointmentStatus | None,
    ) -> str:
        """Generate cache key for an actor's appointment list."""
        status_key = status.value if status else "all"
        return f"{APPOINTMENT_CACHE_NAMESPACE}:list:v{generation}:{scope}:{scope_id}:{status_key}"

    def _invalidate_cache(self) -> None:
        """Drop every appointment-derived cache entry after a committed write."""
        if self.cache:
            removed = self.cache.invalidate(APPOINTMENT_CACHE_NAMESPACE)
            logger.debug("appointment_cache_invalidated", keys_removed=removed)

    async def _load_detail(self, appointment_id: UUID) -> AppointmentDetailResponse:
        detail = await fetch_appointment_detail(self.db, appointment_id)
        if detail is None:
            raise NotFoundException("Appointment not found")
        return detail

    async def create_appointment(
        self,
        actor: Actor,
        data: AppointmentCreate,
    ) -> AppointmentDetailResponse:
        """
        Book a new appointment for the calling customer.

        Args:
            actor: Authenticated caller, must be a customer
            data: Booking request

        Returns:
            Created appointment with its display fields

        Raises:
            ForbiddenException: If the actor is not a customer
            BadRequestException: Missing fields, or service/employee not valid for the clinic
            ConflictException: If the provider already has an active appointment at that time
        """
        if not can_create(actor):
            raise ForbiddenException("Only customers can book appointments")

        missing = [field for field in REQUIRED_CREATE_FIELDS if getattr(data, field) is None]
        if missing:
            raise BadRequestException(f"Missing required fields: {', '.join(missing)}")

        service = await self.catalog.get_active_service(data.service_id, data.clinic_id)
        if not service:
            raise BadRequestException("Service is not valid or inactive")

        employee = await self.catalog.get_clinic_employee(data.employee_id, data.clinic_id)
        if not employee:
            raise BadRequestException("Employee is not valid for this clinic")

        if await self.conflicts.has_conflict(data.employee_id, data.scheduled_date):
            raise ConflictException(SLOT_TAKEN)

        try:
            row = await self.repository.insert(
                customer_id=actor.actor_id,
                clinic_id=data.clinic_id,
                employee_id=data.employee_id,
                service_id=data.service_id,
                scheduled_date=data.scheduled_date,
                notes=data.notes,
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_slot_violation(e):
                # Another booking for the same slot committed after our slot check
                logger.info(
                    "appointment_slot_race_lost",
                    employee_id=str(data.employee_id),
                    scheduled_date=data.scheduled_date.isoformat(),
                )
                raise ConflictException(SLOT_TAKEN) from e
            raise

        logger.info(
            "appointment_created",
            appointment_id=str(row["id"]),
            customer_id=str(actor.actor_id),
            clinic_id=str(data.clinic_id),
            employee_id=str(data.employee_id),
        )
        self._invalidate_cache()

        return await self._load_detail(row["id"])

    async def get_appointment(
        self,
        actor: Actor,
        appointment_id: UUID,
    ) -> AppointmentDetailResponse:
        """
        Get appointment by ID.

        Raises:
            ConfigurationException: Employee without clinic, before any lookup
            NotFoundException: If appointment not found
            ForbiddenException: If the actor may not see it
        """
        if actor.is_employee:
            require_clinic(actor)

        detail = await self._load_detail(appointment_id)

        if not can_read(actor, detail.model_dump()):
            logger.warning(
                "appointment_access_denied",
                appointment_id=str(appointment_id),
                actor_id=str(actor.actor_id),
                role=actor.role.value,
            )
            raise ForbiddenException("You do not have access to this appointment")

        return detail

    async def list_appointments(
        self,
        actor: Actor,
        status: AppointmentStatus | None = None,
    ) -> AppointmentListResponse:
        """
        List every appointment visible to the actor, latest scheduled first.

        Customers see their own bookings, employees the whole clinic agenda.
        The full result set is returned; there is no pagination.
        """
        if actor.is_customer:
            scope, scope_id = "customer", actor.actor_id
            conditions: list[Any] = [appointments.c.customer_id == scope_id]
        else:
            scope, scope_id = "clinic", require_clinic(actor)
            conditions = [appointments.c.clinic_id == scope_id]

        if status:
            conditions.append(appointments.c.status == status.value)

        # Read before the query: a write committing meanwhile bumps the
        # generation, so what we store below is never looked up again
        generation = None
        if self.cache:
            generation = self.cache.namespace_version(APPOINTMENT_CACHE_NAMESPACE)
        cache_key = None
        if self.cache and generation is not None:
            cache_key = self._get_list_cache_key(generation, scope, scope_id, status)
            cached = self.cache.get_json(cache_key)
            if cached is not None:
                items = [AppointmentDetailResponse.model_validate(item) for item in cached]
                return AppointmentListResponse(total=len(items), items=items)

        items = await fetch_appointment_details(self.db, *conditions)

        if self.cache and cache_key is not None:
            self.cache.set_json(
                cache_key,
                [item.model_dump(mode="json") for item in items],
                ttl=settings.appointment_list_cache_ttl,
            )

        return AppointmentListResponse(total=len(items), items=items)

    async def update_appointment(
        self,
        actor: Actor,
        appointment_id: UUID,
        data: AppointmentUpdate,
    ) -> AppointmentDetailResponse:
        """
        Apply a partial update.

        The patch is accepted or rejected as a whole; on rejection nothing is
        written, not even ``updated_at``.

        Raises:
            ConfigurationException: Employee without clinic, before any lookup
            NotFoundException: If appointment not found
            ForbiddenException: Appointment outside the actor's scope
            AppointmentNotEditableException: Nothing editable in the current state
            InvalidStatusTransitionException: Illegal status change
            BadRequestException: Empty patch or non-editable fields requested
            ConflictException: New slot taken, or status changed concurrently
        """
        if actor.is_employee:
            require_clinic(actor)

        appointment = await self.repository.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundException("Appointment not found")

        patch = data.requested_fields()
        check_update_allowed(actor, appointment, patch.keys())
        if not patch:
            raise BadRequestException("No fields to update")

        values: dict[str, Any] = {}
        if "scheduled_date" in patch:
            if patch["scheduled_date"] is None:
                raise BadRequestException("scheduled_date cannot be empty")
            values["scheduled_date"] = patch["scheduled_date"]
        if "status" in patch:
            if patch["status"] is None:
                raise BadRequestException("status cannot be empty")
            values["status"] = validate_transition(appointment["status"], patch["status"]).value
        if "notes" in patch:
            values["notes"] = patch["notes"]

        new_date = values.get("scheduled_date", appointment["scheduled_date"])
        new_status = values.get("status", appointment["status"])
        if holds_slot(new_status) and new_date != appointment["scheduled_date"]:
            if await self.conflicts.has_conflict(
                appointment["employee_id"], new_date, exclude_appointment_id=appointment_id
            ):
                raise ConflictException(SLOT_TAKEN)

        try:
            row = await self.repository.update_fields(
                appointment_id,
                values,
                expected_status=appointment["status"],
            )
            if row is None:
                await self.db.rollback()
                raise ConflictException(
                    "Appointment was changed by another request, reload it and try again"
                )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_slot_violation(e):
                raise ConflictException(SLOT_TAKEN) from e
            raise

        logger.info(
            "appointment_updated",
            appointment_id=str(appointment_id),
            actor_id=str(actor.actor_id),
            role=actor.role.value,
            fields=sorted(values),
        )
        self._invalidate_cache()

        return await self._load_detail(appointment_id)
