import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class WaitlistStatus(enum.Enum):
    WAITING = "waiting"
    SEATED = "seated"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class WaitlistEntry(Base):
    """
    Unerfüllte Reservierungsanfrage.
    Wird angelegt, wenn kein Tisch frei ist. Kein automatisches Nachrücken.
    """
    __tablename__ = "waitlist"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    party_size = Column(Integer, nullable=False)
    requested_date = Column(DateTime, nullable=False)
    status = Column(Enum(WaitlistStatus), nullable=False, default=WaitlistStatus.WAITING)
    notified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    restaurant = relationship("Restaurant", back_populates="waitlist_entries")
