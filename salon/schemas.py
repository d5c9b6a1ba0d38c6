# salon/schemas.py

import logging
import math
import re
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .core import parse_time, validate_date
from .data import COMMON_OWNER, shop_settings

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


def legacy_amount(v):
    """Money value from a stored record; older clients saved free text like '1500 руб'."""
    if v is None or v == "":
        return 0
    if isinstance(v, float) and math.isnan(v):
        return 0
    if isinstance(v, str):
        match = _NUMBER.search(v)
        if match is None:
            logger.warning(f"Unreadable amount {v!r} stored as 0")
            return 0
        return float(match.group().replace(",", "."))
    return v


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class FinanceType(str, Enum):
    income = "income"
    expense = "expense"


class ProviderRole(str, Enum):
    cosmetologist = "cosmetologist"
    admin = "admin"


class SlotStatus(str, Enum):
    available = "available"
    busy_self = "busy_self"
    busy_other = "busy_other"
    not_enough_time = "not_enough_time"


class Record(BaseModel):
    """Base for everything stored in a snapshot: camelCase keys, snake_case attributes."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    def to_snapshot(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------- Appointments ----------

class AppointmentDetails(Record):
    """Descriptive payload shared by drafts and stored appointments."""

    date: str
    time: str
    duration_minutes: int = Field(
        default=60,
        gt=0,
        validation_alias=AliasChoices("durationMinutes", "duration_minutes", "duration"),
        serialization_alias="durationMinutes",
    )
    service_id: Optional[str] = Field(default=None, alias="serviceId")
    service_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("serviceName", "service_name", "service"),
        serialization_alias="serviceName",
    )
    price: float = Field(default=0, ge=0)
    client_id: Optional[str] = Field(default=None, alias="clientId")
    client_name: Optional[str] = Field(default=None, alias="clientName")
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return validate_date(v)

    @field_validator("time")
    @classmethod
    def check_time(cls, v):
        parse_time(v)
        return v

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def default_duration(cls, v):
        if v is None or v == "":
            return shop_settings["default_duration_minutes"]
        return v

    @field_validator("price", mode="before")
    @classmethod
    def blank_price(cls, v):
        # the mobile app stored prices as raw text input
        return legacy_amount(v)


class ProviderAppointmentCreate(AppointmentDetails):
    provider_name: Optional[str] = Field(default=None, alias="providerName")


class AppointmentCreate(ProviderAppointmentCreate):
    provider_id: str = Field(
        validation_alias=AliasChoices("providerId", "provider_id", "cosmetologistId"),
        serialization_alias="providerId",
    )


class Appointment(AppointmentCreate):
    id: str
    provider_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("providerName", "provider_name", "cosmetologistName"),
        serialization_alias="providerName",
    )
    status: AppointmentStatus = AppointmentStatus.scheduled
    finance_recorded: bool = Field(default=False, alias="financeRecorded")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.cancelled


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class TransitionsPublic(BaseModel):
    id: str
    status: AppointmentStatus
    allowed: List[AppointmentStatus]


# ---------- Availability ----------

class SlotAvailability(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time: str
    status: SlotStatus
    conflicting_id: Optional[str] = Field(default=None, alias="conflictingId")


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider_id: str = Field(alias="providerId")
    date: str
    duration_minutes: int = Field(alias="durationMinutes")
    slots: List[SlotAvailability]
    available_starts: List[str] = Field(alias="availableStarts")


# ---------- Finances ----------

class FinanceRecordCreate(Record):
    type: FinanceType
    category: str
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    date: Optional[str] = None
    owner: str = COMMON_OWNER

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        if v is None:
            return v
        return validate_date(v)


class FinanceRecord(Record):
    id: str
    type: FinanceType
    category: str
    amount: float = Field(ge=0)
    description: str = ""
    date: str
    owner: str = COMMON_OWNER
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    created_at: datetime = Field(alias="createdAt")
    appointment_id: Optional[str] = Field(default=None, alias="appointmentId")

    @field_validator("amount", mode="before")
    @classmethod
    def stored_amount(cls, v):
        return legacy_amount(v)


class FinanceTotals(BaseModel):
    income: float
    expenses: float
    profit: float


# ---------- Providers & auth ----------

class Provider(Record):
    id: str
    username: str
    name: str
    role: ProviderRole = ProviderRole.cosmetologist
    password_hash: str = Field(alias="passwordHash")


class ProviderPublic(BaseModel):
    id: str
    username: str
    name: str
    role: ProviderRole


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
