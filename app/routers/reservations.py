import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.reservation import (
     ReservationCreate,
     ReservationUpdate,
     ReservationResponse,
     ReservationOverviewResponse,
     AvailabilityResponse,
     AvailableSlotsResponse
)
from app.services import availability_service
from app.services.availability_service import DEFAULT_DURATION_MINUTES
from app.services.errors import NoResourceAvailable
from app.services.notification_service import ReservationNotifier, get_notifier
from app.services.reservation_service import ReservationService
from app.utils.rate_limit import limiter

logger = logging.getLogger("app.routers.reservations")

router = APIRouter(prefix="/reservations", tags=["reservations"])


def get_reservation_service(
    db: Session = Depends(get_db),
    notifier: ReservationNotifier = Depends(get_notifier)
) -> ReservationService:
    return ReservationService(db, notifier)


@router.post("/", response_model=ReservationResponse)
@limiter.limit(settings.reservation_rate_limit)
def create_reservation(
    request: Request,
    reservation_data: ReservationCreate,
    service: ReservationService = Depends(get_reservation_service)
):
    """
    Legt eine Reservierung an. Ohne table_id wird der kleinste passende
    freie Tisch vergeben. Ist keiner frei, landet die Anfrage auf der
    Warteliste und es kommt 409 mit der Wartelisten-Nummer zurück.
    """
    result = service.create_reservation(reservation_data)
    if result.waitlisted:
        raise NoResourceAvailable(reservation_data.party_size, result.waitlist_entry.id)
    return result.reservation


@router.get("/check-availability", response_model=AvailabilityResponse)
def check_availability(
    restaurant: int = Query(gt=0),
    requested_at: datetime = Query(alias="date"),
    party_size: int = Query(gt=0),
    duration: int = Query(default=DEFAULT_DURATION_MINUTES, gt=0),
    db: Session = Depends(get_db)
):
    return availability_service.check_availability(db, restaurant, requested_at, party_size, duration)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def get_available_slots(
    restaurant: int = Query(gt=0),
    day: date = Query(alias="date"),
    party_size: int = Query(gt=0),
    db: Session = Depends(get_db)
):
    return availability_service.get_available_slots(db, restaurant, day, party_size)


@router.get("/", response_model=ReservationOverviewResponse)
def get_reservations(
    restaurant: int = Query(gt=0),
    day: date = Query(alias="date"),
    service: ReservationService = Depends(get_reservation_service)
):
    """Alle Reservierungen eines Tages, nach Startzeit sortiert"""
    reservations = service.get_reservations_by_date(restaurant, day)
    return {"reservations": reservations, "count": len(reservations)}


@router.patch("/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    reservation_id: int,
    reservation_update: ReservationUpdate,
    service: ReservationService = Depends(get_reservation_service)
):
    return service.update_reservation(reservation_id, reservation_update)


@router.delete("/{reservation_id}", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service)
):
    return service.cancel_reservation(reservation_id)
