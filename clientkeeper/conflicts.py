# clientkeeper/conflicts.py
"""
Conflict annotation for appointment writes.

Every create and update runs `annotate_conflicts` before the record is stored.
A conflict is advisory: the appointment is flagged with a note, never rejected.

Which existing appointments count as candidates is an explicit policy
(`ConflictScope`). The default, GLOBAL, compares against every active
appointment in the shop; DOG and CUSTOMER narrow the comparison.

The read-annotate-write sequence is serialized per scope key with an
in-process lock. Separate worker processes sharing one database are not
serialized against each other, so two simultaneous bookings handled by
different processes can still both be stored unflagged.
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Dict, List, Optional

from sqlmodel import Session

from clientkeeper import config, store
from clientkeeper.core import appointment_interval, overlaps
from clientkeeper.lifecycle import is_active
from clientkeeper.models import Appointment

logger = logging.getLogger(__name__)


class ConflictScope(str, Enum):
    GLOBAL = "global"
    DOG = "dog"
    CUSTOMER = "customer"


CONFLICT_NOTES = {
    ConflictScope.GLOBAL: "Time slot overlaps with another appointment",
    ConflictScope.DOG: "Time slot overlaps with another appointment for this dog",
    ConflictScope.CUSTOMER: "Time slot overlaps with another appointment for this customer",
}


def configured_scope() -> ConflictScope:
    try:
        return ConflictScope(config.CONFLICT_SCOPE)
    except ValueError:
        logger.warning(f"Unknown CONFLICT_SCOPE '{config.CONFLICT_SCOPE}', using global")
        return ConflictScope.GLOBAL


def scope_filters(scope: ConflictScope, customer_id: Optional[int], dog_id: Optional[int]) -> Dict[str, Optional[int]]:
    """Store filters that restrict candidates to the scope's resource."""
    if scope == ConflictScope.DOG:
        return {"dog_id": dog_id}
    if scope == ConflictScope.CUSTOMER:
        return {"customer_id": customer_id}
    return {}


def scope_key(scope: ConflictScope, appt: Appointment) -> str:
    if scope == ConflictScope.DOG:
        return f"dog:{appt.dog_id}"
    if scope == ConflictScope.CUSTOMER:
        return f"customer:{appt.customer_id}"
    return "global"


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


# only keys with a holder or a waiter are kept
_locks: Dict[str, _KeyLock] = {}
_locks_guard = threading.Lock()


@contextmanager
def booking_lock(key: str):
    """Serialize writes touching the same scope key within this process."""
    with _locks_guard:
        entry = _locks.get(key)
        if entry is None:
            entry = _locks[key] = _KeyLock()
        entry.users += 1
    try:
        with entry.lock:
            yield
    finally:
        with _locks_guard:
            entry.users -= 1
            if entry.users == 0:
                del _locks[key]


def find_conflicts(
    appt: Appointment,
    candidates: List[Appointment],
) -> List[Appointment]:
    """Return the active candidates whose interval overlaps `appt`, skipping `appt` itself."""
    start, end = appointment_interval(appt.starts_at, appt.duration_minutes)
    found = []
    for other in candidates:
        if appt.id is not None and other.id == appt.id:
            continue
        if not is_active(other.status):
            continue
        other_start, other_end = appointment_interval(other.starts_at, other.duration_minutes)
        if overlaps(start, end, other_start, other_end):
            found.append(other)
    return found


def annotate_conflicts(
    session: Session,
    appt: Appointment,
    scope: Optional[ConflictScope] = None,
) -> List[Appointment]:
    """
    Set conflict_flag / conflict_note on `appt` from the store's current state.

    Call it on a new appointment before it is added to the session, otherwise
    autoflush would make the appointment a candidate against itself.
    """
    scope = scope or configured_scope()
    candidates = store.active_appointments(
        session,
        exclude_id=appt.id,
        **scope_filters(scope, appt.customer_id, appt.dog_id),
    )
    conflicts = find_conflicts(appt, candidates)

    if conflicts:
        appt.conflict_flag = True
        appt.conflict_note = CONFLICT_NOTES[scope]
        logger.info(
            f"Appointment {appt.id or '(new)'} at {appt.starts_at.isoformat()} overlaps "
            f"{[c.id for c in conflicts]} (scope={scope.value})"
        )
    else:
        appt.conflict_flag = False
        appt.conflict_note = None

    return conflicts


def save_with_conflicts(
    session: Session,
    appt: Appointment,
    scope: Optional[ConflictScope] = None,
) -> Appointment:
    """Annotate and persist `appt` under the scope's booking lock."""
    scope = scope or configured_scope()
    with booking_lock(scope_key(scope, appt)):
        annotate_conflicts(session, appt, scope)
        return store.save(session, appt)
