from datetime import date, datetime, time
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from app.models.reservation import ReservationStatus
from app.services.time_rules import is_clock_string


def _check_clock_string(v):
    if isinstance(v, str) and not is_clock_string(v):
        raise ValueError('Startzeit muss im Format HH:MM:SS angegeben werden')
    return v


class ReservationCreate(BaseModel):
    restaurant_id: int = Field(gt=0)
    table_id: Optional[int] = Field(default=None, gt=0)
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=20)
    party_size: int = Field(gt=0)
    reservation_date: date
    start_time: time
    duration: int = Field(gt=0)
    notes: Optional[str] = None

    @field_validator('start_time', mode='before')
    @classmethod
    def start_time_format(cls, v):
        return _check_clock_string(v)

    @field_validator('reservation_date')
    @classmethod
    def reservation_date_not_in_past(cls, v):
        if v < date.today():
            raise ValueError('Reservierungsdatum darf nicht in der Vergangenheit liegen')
        return v


class ReservationUpdate(BaseModel):
    """
    Teil-Update. Welche Felder gesendet wurden, steht in model_fields_set:
    nur dann wird der bestehende Wert ersetzt.
    """
    reservation_date: Optional[date] = None
    start_time: Optional[time] = None
    duration: Optional[int] = Field(default=None, gt=0)
    status: Optional[ReservationStatus] = None
    notes: Optional[str] = None

    @field_validator('start_time', mode='before')
    @classmethod
    def start_time_format(cls, v):
        return _check_clock_string(v)


class ReservationResponse(BaseModel):
    id: int
    restaurant_id: int
    table_id: int
    customer_name: str
    customer_phone: str
    party_size: int
    reservation_date: datetime
    duration: int
    end_time: datetime
    status: ReservationStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TableInfo(BaseModel):
    id: int
    table_number: str
    capacity: int
    model_config = {"from_attributes": True}


class DailyReservationResponse(BaseModel):
    """Eine Reservierung in der Tagesübersicht, mit Tisch"""
    id: int
    customer_name: str
    customer_phone: str
    party_size: int
    reservation_date: datetime
    duration: int
    end_time: datetime
    status: ReservationStatus
    notes: Optional[str]
    table: TableInfo

    model_config = {"from_attributes": True}


class ReservationOverviewResponse(BaseModel):
    reservations: list[DailyReservationResponse]
    count: int


class AvailabilityResponse(BaseModel):
    available: bool
    table_id: Optional[int] = None
    message: str


class SlotResponse(BaseModel):
    time: datetime
    available: bool
    table_id: Optional[int] = None


class OperatingHours(BaseModel):
    opening: time
    closing: time


class AvailableSlotsResponse(BaseModel):
    date: date
    party_size: int
    default_duration: int
    operating_hours: OperatingHours
    slots: list[SlotResponse]
