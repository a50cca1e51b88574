import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, Index, DDL, event
from sqlalchemy.orm import relationship

from app.database import Base


class ReservationStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Nur diese Status belegen einen Tisch
ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


class Reservation(Base):
    """
    Eine Tischreservierung.
    end_time ist immer reservation_date + duration (denormalisiert für Range-Queries).
    """
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    party_size = Column(Integer, nullable=False)
    reservation_date = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # Minuten
    end_time = Column(DateTime, nullable=False)
    status = Column(Enum(ReservationStatus), nullable=False, default=ReservationStatus.PENDING)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    restaurant = relationship("Restaurant", back_populates="reservations")
    table = relationship("DiningTable")

    __table_args__ = (
        Index('ix_reservations_table_window', 'table_id', 'reservation_date', 'end_time'),
    )


# Zweite Verteidigungslinie gegen Doppelbuchungen bei parallelen Requests.
# Gleiche [)-Semantik wie has_conflict: Ende A == Start B ist kein Konflikt.
event.listen(
    Reservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        "ALTER TABLE reservations ADD CONSTRAINT no_table_overlap "
        "EXCLUDE USING gist ("
        "table_id WITH =, "
        "tsrange(reservation_date, end_time, '[)') WITH &&"
        ") WHERE (status IN ('PENDING', 'CONFIRMED'))"
    ).execute_if(dialect="postgresql"),
)
