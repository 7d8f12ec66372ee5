# clientkeeper/lifecycle.py
"""
Appointment status and payment status.

No transition table is enforced: any status may be written over any other.
Completed and cancelled appointments stay in the store but are left out of
conflict checks and availability. Payment status never depends on status.
"""

import logging
from typing import Iterable, Optional

from clientkeeper.models import Appointment
from clientkeeper.schemas import AppointmentStatus, PaymentStatus

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset({AppointmentStatus.pending, AppointmentStatus.confirmed})
TERMINAL_STATUSES = frozenset({AppointmentStatus.completed, AppointmentStatus.cancelled})

# fields whose change does not move the appointment in time or between dogs
NON_SCHEDULING_FIELDS = frozenset({
    "status",
    "notes",
    "cost",
    "payment_status",
    "transaction_id",
    "is_recurring",
    "recurrence_rule",
})


def is_active(status: AppointmentStatus) -> bool:
    return AppointmentStatus(status) not in TERMINAL_STATUSES


def cancel(appt: Appointment) -> bool:
    """Set status to cancelled whatever it was. Returns True if it changed."""
    changed = appt.status != AppointmentStatus.cancelled
    appt.status = AppointmentStatus.cancelled
    return changed


def set_status(appt: Appointment, status: AppointmentStatus) -> None:
    previous = AppointmentStatus(appt.status)
    appt.status = AppointmentStatus(status)
    if previous != appt.status:
        logger.info(f"Appointment {appt.id} status {previous.value} -> {appt.status.value}")


def set_payment_status(
    appt: Appointment,
    payment_status: PaymentStatus,
    transaction_id: Optional[str] = None,
) -> None:
    appt.payment_status = PaymentStatus(payment_status)
    if transaction_id is not None:
        appt.transaction_id = transaction_id


def requires_conflict_check(changed: Iterable[str]) -> set:
    """Changed fields that can move the appointment's interval or scope; empty if none."""
    return set(changed) - NON_SCHEDULING_FIELDS
