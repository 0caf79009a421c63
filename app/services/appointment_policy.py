"""Authorization policy for appointments.

Pure functions of the actor and the stored appointment row. Scope (may this
actor touch the appointment at all) is decided separately from the field set
(what may change, given the lifecycle state), so both can be tested on their
own.
"""

from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from app.core.exceptions import (
    AppointmentNotEditableException,
    BadRequestException,
    ConfigurationException,
    ForbiddenException,
)
from app.schemas.actors import Actor
from app.schemas.appointments import AppointmentStatus
from app.services.appointment_state import is_terminal

CUSTOMER_EDITABLE_FIELDS = frozenset({"scheduled_date", "notes"})
EMPLOYEE_EDITABLE_FIELDS = frozenset({"status", "notes", "scheduled_date"})
WRITE_ONCE_FIELDS = frozenset({"clinic_id", "customer_id", "employee_id", "service_id"})

CUSTOMER_PENDING_ONLY = "Only pending appointments may be modified by their owner"


def require_clinic(actor: Actor) -> UUID:
    """
    Return the clinic an employee is assigned to.

    Raises:
        ConfigurationException: If the employee account has no clinic
    """
    if actor.clinic_id is None:
        raise ConfigurationException("Employee account has no clinic assigned")
    return actor.clinic_id


def can_create(actor: Actor) -> bool:
    """Only customers originate bookings; staff manage existing ones."""
    return actor.is_customer


def in_scope(actor: Actor, appointment: Mapping[str, Any]) -> bool:
    """Customer owns the appointment, or employee works at its clinic."""
    if actor.is_customer:
        return appointment["customer_id"] == actor.actor_id
    return appointment["clinic_id"] == require_clinic(actor)


def can_read(actor: Actor, appointment: Mapping[str, Any]) -> bool:
    """
    Whether the actor may see the appointment.

    Raises:
        ConfigurationException: For an employee without a clinic (fails closed)
    """
    return in_scope(actor, appointment)


def fields_editable_by(actor: Actor, appointment: Mapping[str, Any]) -> frozenset[str]:
    """Fields the actor may change on the appointment in its current state."""
    if not in_scope(actor, appointment):
        return frozenset()

    status = AppointmentStatus(appointment["status"])
    if actor.is_customer:
        if status == AppointmentStatus.PENDING:
            return CUSTOMER_EDITABLE_FIELDS
        return frozenset()

    if is_terminal(status):
        return frozenset()
    return EMPLOYEE_EDITABLE_FIELDS


def check_update_allowed(
    actor: Actor,
    appointment: Mapping[str, Any],
    requested_fields: Iterable[str],
) -> frozenset[str]:
    """
    Gate a partial update as a whole.

    Args:
        actor: Caller
        appointment: Stored appointment row
        requested_fields: Names of the fields present in the patch

    Returns:
        The requested fields, all of which are editable

    Raises:
        ConfigurationException: Employee without clinic
        ForbiddenException: Appointment outside the actor's scope
        AppointmentNotEditableException: Nothing is editable in the current state
        BadRequestException: The patch names a field the actor may not change
    """
    requested = frozenset(requested_fields)

    if not in_scope(actor, appointment):
        raise ForbiddenException("You do not have permission to modify this appointment")

    editable = fields_editable_by(actor, appointment)
    if not editable:
        if actor.is_customer:
            raise AppointmentNotEditableException(CUSTOMER_PENDING_ONLY)
        raise AppointmentNotEditableException(
            f"Appointment is {appointment['status']} and can no longer be modified"
        )

    write_once = requested & WRITE_ONCE_FIELDS
    if write_once:
        raise BadRequestException(
            f"Fields cannot be modified after creation: {', '.join(sorted(write_once))}"
        )

    rejected = requested - editable
    if rejected:
        role = "Customers" if actor.is_customer else "Employees"
        raise BadRequestException(
            f"{role} cannot modify: {', '.join(sorted(rejected))}"
        )

    return requested
