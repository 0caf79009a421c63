"""Tests for the appointment authorization policy."""

from datetime import datetime
from uuid import uuid4

import pytest

from app.core.exceptions import (
    AppointmentNotEditableException,
    BadRequestException,
    ConfigurationException,
    ForbiddenException,
)
from app.schemas.actors import Actor, ActorRole
from app.services.appointment_policy import (
    CUSTOMER_EDITABLE_FIELDS,
    EMPLOYEE_EDITABLE_FIELDS,
    can_create,
    can_read,
    check_update_allowed,
    fields_editable_by,
    require_clinic,
)

CLINIC = uuid4()
OTHER_CLINIC = uuid4()
OWNER = uuid4()


def make_appointment(status: str = "pending") -> dict:
    return {
        "id": uuid4(),
        "scheduled_date": datetime(2026, 3, 1, 10, 0),
        "status": status,
        "notes": None,
        "clinic_id": CLINIC,
        "customer_id": OWNER,
        "employee_id": uuid4(),
        "service_id": uuid4(),
    }


owner = Actor(actor_id=OWNER, role=ActorRole.CUSTOMER)
stranger = Actor(actor_id=uuid4(), role=ActorRole.CUSTOMER)
staff = Actor(actor_id=uuid4(), role=ActorRole.EMPLOYEE, clinic_id=CLINIC)
foreign_staff = Actor(actor_id=uuid4(), role=ActorRole.EMPLOYEE, clinic_id=OTHER_CLINIC)
unassigned_staff = Actor(actor_id=uuid4(), role=ActorRole.EMPLOYEE)


def test_only_customers_can_create():
    assert can_create(owner) is True
    assert can_create(staff) is False


def test_require_clinic():
    assert require_clinic(staff) == CLINIC
    with pytest.raises(ConfigurationException):
        require_clinic(unassigned_staff)


def test_can_read_matrix():
    appointment = make_appointment()
    assert can_read(owner, appointment) is True
    assert can_read(stranger, appointment) is False
    assert can_read(staff, appointment) is True
    assert can_read(foreign_staff, appointment) is False


def test_can_read_fails_closed_for_unassigned_employee():
    with pytest.raises(ConfigurationException):
        can_read(unassigned_staff, make_appointment())


@pytest.mark.parametrize(
    ("actor", "status", "expected"),
    [
        (owner, "pending", CUSTOMER_EDITABLE_FIELDS),
        (owner, "process", frozenset()),
        (owner, "completed", frozenset()),
        (owner, "canceled", frozenset()),
        (stranger, "pending", frozenset()),
        (staff, "pending", EMPLOYEE_EDITABLE_FIELDS),
        (staff, "process", EMPLOYEE_EDITABLE_FIELDS),
        (staff, "completed", frozenset()),
        (staff, "canceled", frozenset()),
        (foreign_staff, "pending", frozenset()),
    ],
)
def test_fields_editable_by(actor, status, expected):
    assert fields_editable_by(actor, make_appointment(status)) == expected


def test_customer_never_gets_status():
    assert "status" not in fields_editable_by(owner, make_appointment("pending"))


def test_owner_pending_update_allowed():
    allowed = check_update_allowed(owner, make_appointment(), ["notes", "scheduled_date"])
    assert allowed == {"notes", "scheduled_date"}


def test_owner_update_after_pending_is_not_editable():
    with pytest.raises(AppointmentNotEditableException) as exc_info:
        check_update_allowed(owner, make_appointment("process"), ["notes"])
    assert "Only pending appointments" in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_stranger_update_is_forbidden():
    with pytest.raises(ForbiddenException):
        check_update_allowed(stranger, make_appointment(), ["notes"])


def test_foreign_employee_update_is_forbidden():
    with pytest.raises(ForbiddenException):
        check_update_allowed(foreign_staff, make_appointment(), ["status"])


def test_customer_status_change_rejected():
    with pytest.raises(BadRequestException) as exc_info:
        check_update_allowed(owner, make_appointment(), ["notes", "status"])
    assert "status" in exc_info.value.message


@pytest.mark.parametrize("field", ["clinic_id", "customer_id", "employee_id", "service_id"])
def test_write_once_fields_rejected(field):
    with pytest.raises(BadRequestException) as exc_info:
        check_update_allowed(staff, make_appointment(), ["notes", field])
    assert field in exc_info.value.message


def test_employee_terminal_appointment_not_editable():
    with pytest.raises(AppointmentNotEditableException) as exc_info:
        check_update_allowed(staff, make_appointment("completed"), ["notes"])
    assert "completed" in exc_info.value.message


def test_unassigned_employee_update_is_configuration_error():
    with pytest.raises(ConfigurationException):
        check_update_allowed(unassigned_staff, make_appointment(), ["notes"])
