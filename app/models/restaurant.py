from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Time, DateTime
from sqlalchemy.orm import relationship

from app.database import Base


class Restaurant(Base):
    """
    Restaurant mit Öffnungszeiten und optionalem Peak-Fenster.
    Schließzeit < Öffnungszeit bedeutet: Betrieb über Mitternacht.
    """
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    opening_time = Column(Time, nullable=False)
    closing_time = Column(Time, nullable=False)
    peak_hour_start = Column(Time, nullable=True)
    peak_hour_end = Column(Time, nullable=True)
    peak_hour_max_duration = Column(Integer, nullable=True)  # Minuten
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    tables = relationship("DiningTable", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)
    reservations = relationship("Reservation", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)
    waitlist_entries = relationship("WaitlistEntry", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)
