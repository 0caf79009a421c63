"""Appointment lifecycle rules.

pending -> process -> completed, and pending/process -> canceled.
``completed`` and ``canceled`` are terminal.
"""

from app.core.exceptions import InvalidStatusTransitionException
from app.schemas.appointments import AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.PROCESS, AppointmentStatus.CANCELED}),
    AppointmentStatus.PROCESS: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def is_terminal(status: AppointmentStatus | str) -> bool:
    """Whether no further change is allowed from this status."""
    return AppointmentStatus(status) in TERMINAL_STATUSES


def holds_slot(status: AppointmentStatus | str) -> bool:
    """Whether an appointment in this status occupies its provider's slot."""
    return not is_terminal(status)


def validate_transition(
    current: AppointmentStatus | str,
    target: AppointmentStatus | str,
) -> AppointmentStatus:
    """
    Check that ``target`` is reachable from ``current``.

    Re-asserting the current status of a non-terminal appointment is a no-op
    and accepted.

    Returns:
        The target status

    Raises:
        InvalidStatusTransitionException: For backward moves or moves out of a
            terminal status
    """
    current = AppointmentStatus(current)
    target = AppointmentStatus(target)

    if current in TERMINAL_STATUSES:
        raise InvalidStatusTransitionException(current.value, target.value)
    if target != current and target not in TRANSITIONS[current]:
        raise InvalidStatusTransitionException(current.value, target.value)
    return target
