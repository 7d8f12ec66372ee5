# clientkeeper/models.py

from typing import Optional
from datetime import datetime, timezone

from sqlalchemy.types import JSON, DateTime
from sqlmodel import SQLModel, Field, Column

from clientkeeper.schemas import AppointmentStatus, PaymentStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    phone: str = Field(index=True)
    email: Optional[str] = Field(default=None, index=True)
    address: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class Dog(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="customer.id", index=True)
    name: str = Field(index=True)
    breed: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    customer_id: int = Field(foreign_key="customer.id", index=True)
    dog_id: int = Field(foreign_key="dog.id", index=True)
    # naive wall-clock time in the shop timezone
    starts_at: datetime = Field(sa_column=Column(DateTime, index=True, nullable=False))
    duration_minutes: int = 60
    cost: float = 0
    notes: Optional[str] = None
    status: AppointmentStatus = Field(default=AppointmentStatus.confirmed, index=True)

    # stored only, never expanded into occurrences
    is_recurring: bool = False
    recurrence_rule: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # derived on every write
    conflict_flag: bool = False
    conflict_note: Optional[str] = None

    payment_status: PaymentStatus = Field(default=PaymentStatus.unpaid, index=True)
    transaction_id: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: Optional[str] = None
    password_hash: str
    role: str  # admin or customer
