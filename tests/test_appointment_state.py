"""Tests for the appointment lifecycle rules."""

import pytest

from app.core.exceptions import InvalidStatusTransitionException
from app.schemas.appointments import AppointmentStatus
from app.services.appointment_state import holds_slot, is_terminal, validate_transition


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("pending", "process"),
        ("pending", "canceled"),
        ("process", "completed"),
        ("process", "canceled"),
        ("pending", "pending"),
        ("process", "process"),
    ],
)
def test_forward_transitions_allowed(current, target):
    assert validate_transition(current, target) == AppointmentStatus(target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("pending", "completed"),
        ("process", "pending"),
        ("completed", "pending"),
        ("completed", "completed"),
        ("canceled", "pending"),
        ("canceled", "process"),
    ],
)
def test_illegal_transitions_rejected(current, target):
    with pytest.raises(InvalidStatusTransitionException) as exc_info:
        validate_transition(current, target)
    assert exc_info.value.status_code == 400
    assert exc_info.value.current == current


def test_unknown_status_value_rejected():
    with pytest.raises(ValueError):
        validate_transition("pending", "archived")


def test_terminal_statuses():
    assert is_terminal("completed")
    assert is_terminal(AppointmentStatus.CANCELED)
    assert not is_terminal("pending")
    assert not is_terminal("process")


def test_only_active_statuses_hold_a_slot():
    assert holds_slot("pending")
    assert holds_slot("process")
    assert not holds_slot("completed")
    assert not holds_slot("canceled")
