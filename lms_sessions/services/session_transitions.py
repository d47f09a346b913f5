"""
Session status state machine.

    active ──► suspicious ──► revoked
      │                          ▲
      └────────► revoked ◄── inactive

`revoked` is terminal.  Marking an already-suspicious session is a
no-op rather than an error.  Logout moves a live (active or
suspicious) session to `inactive`; no admin action ever returns a
session to `active`.
"""

from lms_sessions.models.session import SessionStatus


class InvalidSessionTransition(Exception):
    """Raised when a status change would break the lifecycle rules."""

    def __init__(self, current: SessionStatus, target: SessionStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change session status from {current.value} to {target.value}")


_ALLOWED: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.ACTIVE: frozenset({SessionStatus.SUSPICIOUS, SessionStatus.REVOKED, SessionStatus.INACTIVE}),
    SessionStatus.INACTIVE: frozenset({SessionStatus.REVOKED}),
    SessionStatus.SUSPICIOUS: frozenset({SessionStatus.SUSPICIOUS, SessionStatus.REVOKED, SessionStatus.INACTIVE}),
    SessionStatus.REVOKED: frozenset(),
}


def is_allowed(current: SessionStatus, target: SessionStatus) -> bool:
    return target in _ALLOWED[current]


def check_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """
    Validate a status change.

    Returns True when the row actually needs updating, False for the
    idempotent suspicious → suspicious case.
    """
    if not is_allowed(current, target):
        raise InvalidSessionTransition(current, target)
    return current != target


def can_mark_suspicious(status: SessionStatus) -> bool:
    """Admin "Mark" action is offered only for sessions not yet flagged or revoked."""
    return status not in (SessionStatus.SUSPICIOUS, SessionStatus.REVOKED)


def can_revoke(status: SessionStatus) -> bool:
    return status != SessionStatus.REVOKED
