from datetime import datetime, time
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional

from app.models.waitlist import WaitlistStatus
from app.services.time_rules import is_clock_string


class RestaurantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    opening_time: time
    closing_time: time
    peak_hour_start: Optional[time] = None
    peak_hour_end: Optional[time] = None
    peak_hour_max_duration: Optional[int] = Field(default=None, gt=0)

    @field_validator('opening_time', 'closing_time', 'peak_hour_start', 'peak_hour_end', mode='before')
    @classmethod
    def clock_format(cls, v):
        if isinstance(v, str) and not is_clock_string(v):
            raise ValueError('Uhrzeit muss im Format HH:MM:SS angegeben werden')
        return v

    @model_validator(mode='after')
    def check_time_windows(self):
        # Schließzeit < Öffnungszeit ist erlaubt (Betrieb über Mitternacht)
        if self.opening_time == self.closing_time:
            raise ValueError('Öffnungszeit und Schließzeit dürfen nicht gleich sein')
        if (self.peak_hour_start is None) != (self.peak_hour_end is None):
            raise ValueError('Peak-Beginn und Peak-Ende müssen zusammen angegeben werden')
        if self.peak_hour_start is not None and self.peak_hour_start >= self.peak_hour_end:
            raise ValueError('Peak-Beginn muss vor dem Peak-Ende liegen')
        return self


class RestaurantResponse(BaseModel):
    id: int
    name: str
    opening_time: time
    closing_time: time
    peak_hour_start: Optional[time]
    peak_hour_end: Optional[time]
    peak_hour_max_duration: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}


class TableCreate(BaseModel):
    table_number: str = Field(min_length=1, max_length=50)
    capacity: int = Field(gt=0)


class TableUpdate(BaseModel):
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    id: int
    restaurant_id: int
    table_number: str
    capacity: int
    is_active: bool

    model_config = {"from_attributes": True}


class RestaurantDetailResponse(RestaurantResponse):
    """Restaurant inkl. aller aktiven Tische"""
    tables: list[TableResponse]


class WaitlistResponse(BaseModel):
    id: int
    restaurant_id: int
    customer_name: str
    customer_phone: str
    party_size: int
    requested_date: datetime
    status: WaitlistStatus
    notified: bool
    created_at: datetime

    model_config = {"from_attributes": True}
