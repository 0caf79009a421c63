"""Tests for double-booking protection under concurrent requests."""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictException
from app.models.appointments import appointments
from app.models.customers import customers
from app.schemas.actors import Actor, ActorRole
from app.schemas.appointments import AppointmentCreate
from app.services.appointment_service import AppointmentService
from app.services.conflict_checker import ConflictChecker

SLOT = datetime(2026, 3, 1, 10, 0)


@pytest.fixture
def booking(world) -> AppointmentCreate:
    return AppointmentCreate(
        scheduled_date=SLOT,
        clinic_id=world["clinic_a"],
        employee_id=world["employee_a"],
        service_id=world["service_a"],
    )


async def make_customers(db_session, count: int) -> list[Actor]:
    ids = [uuid4() for _ in range(count)]
    await db_session.execute(
        customers.insert(),
        [{"id": cid, "name": f"Paciente {i}", "email": f"p{i}@example.com"} for i, cid in enumerate(ids)],
    )
    await db_session.commit()
    return [Actor(actor_id=cid, role=ActorRole.CUSTOMER) for cid in ids]


async def active_in_slot(db_session, employee_id) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(appointments)
        .where(
            appointments.c.employee_id == employee_id,
            appointments.c.scheduled_date == SLOT,
            appointments.c.status.notin_(["canceled", "completed"]),
        )
    )
    return result.scalar_one()


async def book(session_factory, actor: Actor, booking: AppointmentCreate):
    """Run one booking in its own session, as a separate request would."""
    async with session_factory() as session:
        service = AppointmentService(session)
        try:
            return await service.create_appointment(actor, booking.model_copy())
        except ConflictException as e:
            return e


@pytest.mark.asyncio
async def test_concurrent_bookings_of_one_slot(session_factory, db_session, world, booking):
    actors = await make_customers(db_session, 5)

    results = await asyncio.gather(*(book(session_factory, actor, booking) for actor in actors))

    successes = [r for r in results if not isinstance(r, ConflictException)]
    conflicts = [r for r in results if isinstance(r, ConflictException)]
    assert len(successes) == 1
    assert len(conflicts) == 4
    assert all(c.status_code == 409 for c in conflicts)
    assert await active_in_slot(db_session, world["employee_a"]) == 1


@pytest.mark.asyncio
async def test_slot_index_catches_race_past_the_slot_check(
    session_factory, db_session, world, booking, monkeypatch
):
    # Both requests pass the slot check, as when they interleave before either commits
    monkeypatch.setattr(ConflictChecker, "has_conflict", AsyncMock(return_value=False))
    first, second = await make_customers(db_session, 2)

    created = await book(session_factory, first, booking)
    raced = await book(session_factory, second, booking)

    assert not isinstance(created, ConflictException)
    assert isinstance(raced, ConflictException)
    assert await active_in_slot(db_session, world["employee_a"]) == 1


@pytest.mark.asyncio
async def test_concurrent_bookings_of_different_slots(session_factory, db_session, world, booking):
    actors = await make_customers(db_session, 3)
    bookings = [
        booking.model_copy(update={"scheduled_date": datetime(2026, 3, 1, 10 + i, 0)})
        for i in range(3)
    ]

    results = await asyncio.gather(
        *(book(session_factory, actor, b) for actor, b in zip(actors, bookings, strict=True))
    )

    assert not any(isinstance(r, ConflictException) for r in results)
