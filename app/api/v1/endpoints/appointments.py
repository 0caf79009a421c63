"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import CacheManagerDep, CurrentActor, DatabaseSession
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetailResponse,
    AppointmentListResponse,
    AppointmentStatus,
    AppointmentUpdate,
)
from app.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentDetailResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> AppointmentDetailResponse:
    """
    Book an appointment for the authenticated customer.

    - **scheduled_date**: Slot start, taken as wall-clock time
    - **clinic_id**, **employee_id**, **service_id**: Where, with whom, what
    - **notes**: Optional message for the clinic

    Returns 409 when the employee already has an active appointment at that time.
    """
    service = AppointmentService(db, cache_manager)
    return await service.create_appointment(actor, data)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
) -> AppointmentListResponse:
    """
    List appointments visible to the caller.

    Customers get their own bookings; employees get every appointment of
    their clinic. Ordered by scheduled date, latest first.
    """
    service = AppointmentService(db, cache_manager)
    return await service.list_appointments(actor, status_filter)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentDetailResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    actor: CurrentActor,
    db: DatabaseSession,
) -> AppointmentDetailResponse:
    """
    Get a specific appointment by ID.

    Args:
        appointment_id: Appointment ID
        actor: Authenticated caller
        db: Database session

    Returns:
        Appointment details
    """
    service = AppointmentService(db)
    return await service.get_appointment(actor, appointment_id)


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentDetailResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
@router.put(
    "/{appointment_id}",
    response_model=AppointmentDetailResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
    include_in_schema=False,
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    actor: CurrentActor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> AppointmentDetailResponse:
    """
    Partially update an appointment.

    Customers may change **scheduled_date** and **notes** of their own pending
    bookings. Employees may change **status**, **notes** and **scheduled_date**
    of their clinic's appointments until they are completed or canceled.
    """
    service = AppointmentService(db, cache_manager)
    return await service.update_appointment(actor, appointment_id, data)
