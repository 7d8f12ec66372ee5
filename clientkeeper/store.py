# clientkeeper/store.py
"""
Schedule store: the record queries the scheduling engine needs.

Everything goes through a request-scoped SQLModel session. Nothing here knows
about conflicts; callers decide what to do with the rows.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from clientkeeper.data import shop_settings
from clientkeeper.lifecycle import ACTIVE_STATUSES
from clientkeeper.models import Appointment, Customer, Dog, utcnow
from clientkeeper.schemas import AppointmentStatus


def get_appointment(session: Session, appt_id: int) -> Optional[Appointment]:
    return session.get(Appointment, appt_id)


def get_customer(session: Session, customer_id: int) -> Optional[Customer]:
    return session.get(Customer, customer_id)


def get_dog(session: Session, dog_id: int) -> Optional[Dog]:
    return session.get(Dog, dog_id)


def list_appointments(
    session: Session,
    customer_id: Optional[int] = None,
    dog_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    status: Optional[AppointmentStatus] = None,
) -> List[Appointment]:
    stmt = select(Appointment)

    if customer_id is not None:
        stmt = stmt.where(Appointment.customer_id == customer_id)
    if dog_id is not None:
        stmt = stmt.where(Appointment.dog_id == dog_id)
    if start is not None:
        stmt = stmt.where(Appointment.starts_at >= datetime.combine(start, time.min))
    if end is not None:
        # end date is inclusive of its whole day
        stmt = stmt.where(Appointment.starts_at < datetime.combine(end + timedelta(days=1), time.min))
    if status is not None:
        stmt = stmt.where(Appointment.status == status)

    stmt = stmt.order_by(Appointment.starts_at)
    return list(session.exec(stmt).all())


def active_appointments(
    session: Session,
    exclude_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    dog_id: Optional[int] = None,
) -> List[Appointment]:
    stmt = select(Appointment).where(Appointment.status.in_(list(ACTIVE_STATUSES)))

    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    if customer_id is not None:
        stmt = stmt.where(Appointment.customer_id == customer_id)
    if dog_id is not None:
        stmt = stmt.where(Appointment.dog_id == dog_id)

    return list(session.exec(stmt.order_by(Appointment.starts_at)).all())


def active_appointments_for_day(
    session: Session,
    day: date,
    customer_id: Optional[int] = None,
    dog_id: Optional[int] = None,
) -> List[Appointment]:
    """Active appointments that may reach into `day`, including late starts the day before."""
    day_start_dt = datetime.combine(day, time.min)
    day_end_dt = day_start_dt + timedelta(days=1)
    earliest = day_start_dt - timedelta(minutes=shop_settings["max_duration_minutes"])

    stmt = (
        select(Appointment)
        .where(Appointment.status.in_(list(ACTIVE_STATUSES)))
        .where(Appointment.starts_at >= earliest)
        .where(Appointment.starts_at < day_end_dt)
    )
    if customer_id is not None:
        stmt = stmt.where(Appointment.customer_id == customer_id)
    if dog_id is not None:
        stmt = stmt.where(Appointment.dog_id == dog_id)

    return list(session.exec(stmt.order_by(Appointment.starts_at)).all())


def list_customers(session: Session) -> List[Customer]:
    return list(session.exec(select(Customer).order_by(Customer.name)).all())


def list_dogs(session: Session, owner_id: Optional[int] = None) -> List[Dog]:
    stmt = select(Dog)
    if owner_id is not None:
        stmt = stmt.where(Dog.owner_id == owner_id)
    return list(session.exec(stmt.order_by(Dog.name)).all())


def save(session: Session, record):
    """Insert or update one record and return it refreshed."""
    if record.id is not None:
        record.updated_at = utcnow()
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def delete(session: Session, record) -> None:
    session.delete(record)
    session.commit()
