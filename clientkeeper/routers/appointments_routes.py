# clientkeeper/routers/appointments_routes.py

import logging
from datetime import date
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from clientkeeper import lifecycle, store
from clientkeeper.auth import get_current_user
from clientkeeper.availability import available_slots
from clientkeeper.conflicts import configured_scope, save_with_conflicts, scope_filters
from clientkeeper.db import get_session
from clientkeeper.deps import require_role, resolve_booking_refs
from clientkeeper.models import Appointment
from clientkeeper.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
    AvailabilityResponse,
    RecurrenceRule,
    shop_now,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def _rule_json(rule: Optional[RecurrenceRule]) -> Optional[dict]:
    return rule.model_dump(mode="json") if rule is not None else None


def _get_or_404(session: Session, appt_id: int) -> Appointment:
    target = store.get_appointment(session, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return target


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    customer_id: Optional[int] = Query(default=None, alias="customerId"),
    dog_id: Optional[int] = Query(default=None, alias="dogId"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    status: Optional[AppointmentStatus] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if start is not None and end is not None and start > end:
        raise HTTPException(status_code=400, detail="start must be on or before end")

    return store.list_appointments(
        session,
        customer_id=customer_id,
        dog_id=dog_id,
        start=start,
        end=end,
        status=status,
    )


@router.get("/availability", response_model=AvailabilityResponse)
def appointment_availability(
    date: date,
    customer_id: Optional[int] = Query(default=None, alias="customerId"),
    dog_id: Optional[int] = Query(default=None, alias="dogId"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Active appointments reaching into the day, narrowed like conflict checks
    filters = scope_filters(configured_scope(), customer_id, dog_id)
    appts_for_day = store.active_appointments_for_day(session, date, **filters)

    # 2) Generate slots against the shop clock, naive like the stored appointments
    slots = available_slots(date, appts_for_day, now=shop_now())

    return {
        "date": date,
        "slots": [
            {"start": s.start, "label": s.label, "next_available": s.next_available}
            for s in slots
        ],
        "next_available": slots[0].start if slots else None,
    }


@router.get("/{appt_id}", response_model=AppointmentPublic)
def get_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _get_or_404(session, appt_id)


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Validate customer, dog and ownership
    resolve_booking_refs(session, appt.customer_id, appt.dog_id)

    # 2) Build the record; id and timestamps are assigned by the store
    db_appt = Appointment(
        **appt.model_dump(exclude={"recurrence_rule"}),
        recurrence_rule=_rule_json(appt.recurrence_rule),
    )

    # 3) Flag overlaps and persist (a conflict never blocks the booking)
    db_appt = save_with_conflicts(session, db_appt)

    logger.info(
        f"Booked appointment {db_appt.id} for dog {db_appt.dog_id} at "
        f"{db_appt.starts_at.isoformat()} ({db_appt.duration_minutes} min, conflict={db_appt.conflict_flag})"
    )
    return db_appt


@router.put("/{appt_id}", response_model=AppointmentPublic)
def update_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    target = _get_or_404(session, appt_id)
    updates = changes.model_dump(exclude_unset=True)

    # 1) Re-check references when the booking moves to another customer or dog
    if "customer_id" in updates or "dog_id" in updates:
        resolve_booking_refs(
            session,
            updates.get("customer_id", target.customer_id),
            updates.get("dog_id", target.dog_id),
        )

    # 2) Apply fields; status and payment go through the lifecycle helpers
    if "status" in updates:
        lifecycle.set_status(target, updates.pop("status"))
    if "payment_status" in updates:
        lifecycle.set_payment_status(target, updates.pop("payment_status"))
    if "recurrence_rule" in updates:
        updates["recurrence_rule"] = _rule_json(changes.recurrence_rule)
    for field, value in updates.items():
        setattr(target, field, value)

    moved = lifecycle.requires_conflict_check(changes.model_fields_set)
    if moved:
        logger.info(f"Appointment {appt_id} rescheduled ({', '.join(sorted(moved))})")

    # 3) Conflict state is recomputed on every update
    return save_with_conflicts(session, target)


@router.patch("/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    target = _get_or_404(session, appt_id)

    # Cancelling twice is fine; the second call changes nothing
    if lifecycle.cancel(target):
        logger.info(f"Appointment {appt_id} cancelled by {current_user['email']}")

    return store.save(session, target)


@router.delete("/{appt_id}", status_code=204)
def delete_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # Hard delete is administrative cleanup; everyone else cancels
    require_role(current_user, "admin")
    target = _get_or_404(session, appt_id)

    store.delete(session, target)
    logger.info(f"Appointment {appt_id} deleted by {current_user['email']}")
