# clientkeeper/schemas.py

from datetime import datetime, date
from enum import Enum
from typing import Annotated, List, Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from clientkeeper.config import SHOP_TIMEZONE
from clientkeeper.data import shop_settings


class UserRole(str, Enum):
    admin = "admin"
    customer = "customer"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    paid = "paid"
    refunded = "refunded"
    partial = "partial"


class RecurrenceFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


Weekday = Literal["MO", "TU", "WE", "TH", "FR", "SA", "SU"]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_shop_time(value: datetime) -> datetime:
    """Aware timestamps become naive wall-clock time in the shop's timezone."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(SHOP_TIMEZONE)).replace(tzinfo=None)


def shop_now() -> datetime:
    """Current naive wall-clock time in the shop's timezone, whatever the host clock says."""
    return datetime.now(ZoneInfo(SHOP_TIMEZONE)).replace(tzinfo=None)


ShopDateTime = Annotated[datetime, AfterValidator(to_shop_time)]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserPublic(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: UserRole


class UserCreate(BaseModel):
    email: str
    name: Optional[str] = None
    password: str = Field(min_length=8, max_length=72)
    role: UserRole = UserRole.customer


class CustomerCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None
    address: Optional[str] = None


class CustomerPublic(CustomerCreate):
    id: int
    created_at: datetime
    updated_at: datetime


class DogCreate(CamelModel):
    owner_id: int
    name: str = Field(min_length=1)
    breed: Optional[str] = None
    notes: Optional[str] = None


class DogPublic(DogCreate):
    id: int
    created_at: datetime
    updated_at: datetime


class RecurrenceRule(CamelModel):
    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1)
    by_day: Optional[List[Weekday]] = None
    end_date: Optional[date] = None


class AppointmentCreate(CamelModel):
    customer_id: int
    dog_id: int
    starts_at: ShopDateTime = Field(alias="dateTime")
    duration_minutes: int = Field(
        default=shop_settings["default_duration_minutes"],
        ge=shop_settings["min_duration_minutes"],
        le=shop_settings["max_duration_minutes"],
    )
    cost: float = Field(default=0, ge=0)
    notes: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.confirmed
    payment_status: PaymentStatus = PaymentStatus.unpaid
    transaction_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_rule: Optional[RecurrenceRule] = None


class AppointmentUpdate(CamelModel):
    """Every field optional; conflict fields are derived and not accepted."""

    customer_id: Optional[int] = None
    dog_id: Optional[int] = None
    starts_at: Optional[ShopDateTime] = Field(default=None, alias="dateTime")
    duration_minutes: Optional[int] = Field(
        default=None,
        ge=shop_settings["min_duration_minutes"],
        le=shop_settings["max_duration_minutes"],
    )
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[RecurrenceRule] = None

    @model_validator(mode="after")
    def required_fields_not_null(self):
        # explicit nulls for required columns would break the record
        for name in (
            "customer_id",
            "dog_id",
            "starts_at",
            "duration_minutes",
            "cost",
            "status",
            "payment_status",
            "is_recurring",
        ):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class AppointmentPublic(CamelModel):
    id: int
    customer_id: int
    dog_id: int
    starts_at: datetime = Field(alias="dateTime")
    duration_minutes: int
    cost: float
    notes: Optional[str] = None
    status: AppointmentStatus
    is_recurring: bool
    recurrence_rule: Optional[RecurrenceRule] = None
    conflict_flag: bool
    conflict_note: Optional[str] = None
    payment_status: PaymentStatus
    transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TimeSlotPublic(CamelModel):
    start: datetime
    label: str
    next_available: bool = False


class AvailabilityResponse(CamelModel):
    date: date
    slots: List[TimeSlotPublic]
    next_available: Optional[datetime] = None
