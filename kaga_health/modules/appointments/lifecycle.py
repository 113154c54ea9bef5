# kaga_health/modules/appointments/lifecycle.py
"""
Appointment status graph.

    Pending   -> Confirmed | Cancelled
    Confirmed -> Cancelled | Completed
    Cancelled, Completed: terminal
"""
from __future__ import annotations

from kaga_health.core.errors import InvalidTransitionError
from kaga_health.modules.appointments.models import ApptStatus

ALLOWED_TRANSITIONS: dict[ApptStatus, frozenset[ApptStatus]] = {
    ApptStatus.PENDING: frozenset({ApptStatus.CONFIRMED, ApptStatus.CANCELLED}),
    ApptStatus.CONFIRMED: frozenset({ApptStatus.CANCELLED, ApptStatus.COMPLETED}),
    ApptStatus.CANCELLED: frozenset(),
    ApptStatus.COMPLETED: frozenset(),
}

TERMINAL: frozenset[ApptStatus] = frozenset(
    s for s, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def _as_status(value: ApptStatus | str) -> ApptStatus:
    return value if isinstance(value, ApptStatus) else ApptStatus(value)


def is_terminal(status: ApptStatus | str) -> bool:
    return _as_status(status) in TERMINAL


def is_active(status: ApptStatus | str) -> bool:
    """Active appointments hold their slot."""
    return _as_status(status) is not ApptStatus.CANCELLED


def can_transition(current: ApptStatus | str, target: ApptStatus | str) -> bool:
    return _as_status(target) in ALLOWED_TRANSITIONS[_as_status(current)]


def ensure_transition(current: ApptStatus | str, target: ApptStatus | str) -> None:
    """
    Raise InvalidTransitionError unless current -> target is an edge of the graph.
    Re-applying the current status is not a transition; callers treat it as a no-op.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError("invalid_status_transition")
