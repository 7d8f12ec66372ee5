"""Tests for conflict annotation on appointment writes."""

import threading
from datetime import datetime

import pytest

from clientkeeper import config, conflicts
from clientkeeper.conflicts import (
    CONFLICT_NOTES,
    ConflictScope,
    annotate_conflicts,
    booking_lock,
    configured_scope,
    find_conflicts,
    save_with_conflicts,
)
from clientkeeper.models import Appointment
from clientkeeper.schemas import AppointmentStatus


def at(hour, minute=0):
    return datetime(2025, 6, 1, hour, minute)


def book(session, dog, start, minutes=60, status=AppointmentStatus.confirmed, scope=None):
    appt = Appointment(
        customer_id=dog.owner_id,
        dog_id=dog.id,
        starts_at=start,
        duration_minutes=minutes,
        status=status,
    )
    return save_with_conflicts(session, appt, scope)


def test_overlap_with_active_appointment_is_flagged(session, dog, other_dog):
    book(session, other_dog, at(10, 30), 30)
    new = book(session, dog, at(10), 60)

    assert new.id is not None
    assert new.conflict_flag is True
    assert new.conflict_note == CONFLICT_NOTES[ConflictScope.GLOBAL]


@pytest.mark.parametrize("status", [AppointmentStatus.cancelled, AppointmentStatus.completed])
def test_inactive_appointments_are_ignored(session, dog, other_dog, status):
    book(session, other_dog, at(10, 30), 30, status=status)
    new = book(session, dog, at(10), 60)

    assert new.conflict_flag is False
    assert new.conflict_note is None


def test_pending_appointments_count(session, dog, other_dog):
    book(session, other_dog, at(10, 30), 30, status=AppointmentStatus.pending)
    assert book(session, dog, at(10), 60).conflict_flag is True


def test_touching_appointments_are_not_flagged(session, dog, other_dog):
    book(session, other_dog, at(11), 30)
    assert book(session, dog, at(10), 60).conflict_flag is False


def test_conflict_does_not_block_the_write(session, dog):
    first = book(session, dog, at(10))
    second = book(session, dog, at(10))

    assert first.id != second.id
    assert session.get(Appointment, second.id).conflict_flag is True


def test_resaving_does_not_conflict_with_itself(session, dog):
    appt = book(session, dog, at(10))
    appt.notes = "Nails only"
    appt = save_with_conflicts(session, appt)

    assert appt.conflict_flag is False


def test_annotation_reflects_last_write_only(session, dog, other_dog):
    first = book(session, dog, at(10))
    second = book(session, other_dog, at(10, 30), 30)

    # the earlier booking keeps its old annotation until it is written again
    session.refresh(first)
    assert first.conflict_flag is False
    assert second.conflict_flag is True

    first = save_with_conflicts(session, first)
    assert first.conflict_flag is True


def test_moving_away_clears_the_flag(session, dog, other_dog):
    book(session, other_dog, at(10))
    appt = book(session, dog, at(10, 30))
    assert appt.conflict_flag is True

    appt.starts_at = at(14)
    appt = save_with_conflicts(session, appt)

    assert appt.conflict_flag is False
    assert appt.conflict_note is None


def test_dog_scope_ignores_other_dogs(session, dog, other_dog):
    book(session, other_dog, at(10))
    new = book(session, dog, at(10, 30), scope=ConflictScope.DOG)

    assert new.conflict_flag is False


def test_dog_scope_flags_same_dog(session, dog):
    book(session, dog, at(10))
    new = book(session, dog, at(10, 30), scope=ConflictScope.DOG)

    assert new.conflict_flag is True
    assert new.conflict_note == CONFLICT_NOTES[ConflictScope.DOG]


def test_customer_scope(session, dog, second_dog, other_dog):
    book(session, dog, at(10))

    same_customer = book(session, second_dog, at(10, 15), scope=ConflictScope.CUSTOMER)
    other_customer = book(session, other_dog, at(10, 15), scope=ConflictScope.CUSTOMER)

    assert same_customer.conflict_flag is True
    assert same_customer.conflict_note == CONFLICT_NOTES[ConflictScope.CUSTOMER]
    assert other_customer.conflict_flag is False


def test_scope_comes_from_config(monkeypatch, session, dog, other_dog):
    monkeypatch.setattr(config, "CONFLICT_SCOPE", "dog")
    assert configured_scope() == ConflictScope.DOG

    book(session, other_dog, at(10))
    assert book(session, dog, at(10)).conflict_flag is False


def test_unknown_scope_falls_back_to_global(monkeypatch):
    monkeypatch.setattr(config, "CONFLICT_SCOPE", "groomer")
    assert configured_scope() == ConflictScope.GLOBAL


def test_annotate_returns_overlapping_records(session, dog, other_dog):
    a = book(session, other_dog, at(10))
    book(session, other_dog, at(15))

    new = Appointment(customer_id=dog.owner_id, dog_id=dog.id, starts_at=at(10, 30), duration_minutes=60)
    conflicts = annotate_conflicts(session, new, ConflictScope.GLOBAL)

    assert [c.id for c in conflicts] == [a.id]
    assert new.id is None
    assert new.conflict_flag is True


def test_find_conflicts_skips_self_and_inactive():
    base = Appointment(id=1, customer_id=1, dog_id=1, starts_at=at(10), duration_minutes=60,
                       status=AppointmentStatus.confirmed)
    same = Appointment(id=1, customer_id=1, dog_id=1, starts_at=at(10), duration_minutes=60,
                       status=AppointmentStatus.confirmed)
    cancelled = Appointment(id=2, customer_id=1, dog_id=1, starts_at=at(10), duration_minutes=60,
                            status=AppointmentStatus.cancelled)
    clash = Appointment(id=3, customer_id=2, dog_id=2, starts_at=at(10, 45), duration_minutes=30,
                        status=AppointmentStatus.confirmed)

    assert find_conflicts(base, [same, cancelled, clash]) == [clash]


def test_booking_lock_serializes_same_key():
    entered = threading.Event()

    def contender():
        with booking_lock("dog:7"):
            entered.set()

    with booking_lock("dog:7"):
        worker = threading.Thread(target=contender)
        worker.start()
        assert not entered.wait(0.2)

    assert entered.wait(2)
    worker.join(2)


def test_booking_lock_keys_are_independent():
    entered = threading.Event()

    def contender():
        with booking_lock("dog:8"):
            entered.set()

    with booking_lock("dog:9"):
        worker = threading.Thread(target=contender)
        worker.start()
        assert entered.wait(2)

    worker.join(2)


def test_booking_lock_is_released_from_the_map(session, dog, other_dog):
    for customer_id in range(50):
        with booking_lock(f"customer:{customer_id}"):
            assert f"customer:{customer_id}" in conflicts._locks

    book(session, dog, at(10), scope=ConflictScope.DOG)
    book(session, other_dog, at(11), scope=ConflictScope.DOG)

    assert conflicts._locks == {}


def test_booking_lock_survives_while_someone_waits():
    released = threading.Event()

    def contender():
        with booking_lock("dog:11"):
            released.set()

    with booking_lock("dog:11"):
        worker = threading.Thread(target=contender)
        worker.start()
        assert not released.wait(0.2)
        assert conflicts._locks["dog:11"].users == 2

    worker.join(2)
    assert released.is_set()
    assert "dog:11" not in conflicts._locks


def test_booking_lock_is_released_when_the_write_fails():
    with pytest.raises(RuntimeError):
        with booking_lock("dog:12"):
            raise RuntimeError("commit failed")

    assert "dog:12" not in conflicts._locks
