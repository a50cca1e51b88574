import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.models import ACTIVE_STATUSES, DiningTable, Reservation, ReservationStatus, WaitlistEntry, WaitlistStatus
from app.schemas.reservation import ReservationCreate, ReservationUpdate
from app.services.availability_service import find_suitable_table, has_conflict
from app.services.errors import (
    AlreadyCancelled,
    InsufficientCapacity,
    InvalidStateTransition,
    OutsideOperatingHours,
    PeakHourDurationExceeded,
    ReservationNotFound,
    ResourceNotFound,
    ResourceUnavailable,
)
from app.services.notification_service import ConfirmationEvent, ReservationNotifier
from app.services.restaurant_service import get_restaurant
from app.services.time_rules import is_peak, within_operating_window

logger = logging.getLogger("app.services.reservation_service")

# Felder, bei deren Änderung die Belegung neu geprüft wird
TIME_FIELDS = {"reservation_date", "start_time", "duration"}


@dataclass
class BookingResult:
    """
    Ergebnis einer Buchung: entweder eine bestätigte Reservierung
    oder ein neuer Wartelisten-Eintrag, wenn kein Tisch frei war.
    """
    reservation: Optional[Reservation] = None
    waitlist_entry: Optional[WaitlistEntry] = None

    @property
    def waitlisted(self) -> bool:
        return self.waitlist_entry is not None


class ReservationService:
    """
    Vergabe von Tischen an Reservierungen.

    Wird pro Request mit der DB-Session und dem Notifier gebaut. Jede
    Operation liest, entscheidet und schreibt mit genau einem Commit.
    """

    def __init__(self, db: Session, notifier: ReservationNotifier):
        self.db = db
        self.notifier = notifier

    def create_reservation(self, data: ReservationCreate) -> BookingResult:
        """
        Ablauf:
        1. Restaurant laden
        2. Start/Ende berechnen
        3. Öffnungszeiten prüfen
        4. Peak-Zeit: maximale Dauer prüfen
        5. Tisch: explizit angefragt prüfen, sonst kleinsten freien suchen
        6. Kein Tisch frei -> Warteliste
        7. Speichern als CONFIRMED, Bestätigung senden
        """
        restaurant = get_restaurant(self.db, data.restaurant_id)

        start = datetime.combine(data.reservation_date, data.start_time)
        end = start + timedelta(minutes=data.duration)

        if not within_operating_window(start, restaurant.opening_time, restaurant.closing_time, data.duration):
            logger.info(f"Abgelehnt (Öffnungszeiten): Restaurant {restaurant.id}, {start}, {data.duration} Min")
            raise OutsideOperatingHours(
                f"Reservierung muss innerhalb der Öffnungszeiten liegen "
                f"({restaurant.opening_time} - {restaurant.closing_time})"
            )

        max_duration = restaurant.peak_hour_max_duration
        if is_peak(start, restaurant.peak_hour_start, restaurant.peak_hour_end) and max_duration and data.duration > max_duration:
            logger.info(f"Abgelehnt (Peak-Dauer): Restaurant {restaurant.id}, {start}, {data.duration} Min")
            raise PeakHourDurationExceeded(
                f"Während der Stoßzeit ({restaurant.peak_hour_start} - {restaurant.peak_hour_end}) "
                f"beträgt die maximale Reservierungsdauer {max_duration} Minuten"
            )

        if data.table_id is not None:
            table_id = self._validate_requested_table(restaurant.id, data.table_id, data.party_size, start, end)
        else:
            table_id = find_suitable_table(self.db, restaurant.id, data.party_size, start, end)
            if table_id is None:
                return BookingResult(waitlist_entry=self._add_to_waitlist(data, start))

        reservation = Reservation(
            restaurant_id=restaurant.id,
            table_id=table_id,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            party_size=data.party_size,
            reservation_date=start,
            duration=data.duration,
            end_time=end,
            status=ReservationStatus.CONFIRMED,
            notes=data.notes
        )
        self.db.add(reservation)
        self._commit()
        self.db.refresh(reservation)

        logger.info(
            f"Reservierung {reservation.id} bestätigt: Tisch {table_id}, "
            f"{data.party_size} Personen, {start} - {end}"
        )
        self._send_confirmation(reservation, restaurant.name)

        return BookingResult(reservation=reservation)

    def update_reservation(self, reservation_id: int, patch: ReservationUpdate) -> Reservation:
        reservation = self._get_reservation(reservation_id)

        if reservation.status == ReservationStatus.CANCELLED:
            raise InvalidStateTransition("Stornierte Reservierung kann nicht geändert werden")

        changes = patch.model_dump(exclude_unset=True)

        new_status = changes.get("status")
        reactivated = (
            reservation.status not in ACTIVE_STATUSES
            and new_status in ACTIVE_STATUSES
        )

        if TIME_FIELDS & changes.keys() or reactivated:
            new_date: date = changes.get("reservation_date") or reservation.reservation_date.date()
            new_time: time = changes.get("start_time") or reservation.reservation_date.time()
            new_duration: int = changes.get("duration") or reservation.duration

            new_start = datetime.combine(new_date, new_time)
            new_end = new_start + timedelta(minutes=new_duration)

            # gleicher Tisch, eigene Reservierung ausgenommen
            if has_conflict(self.db, reservation.table_id, new_start, new_end, exclude_reservation_id=reservation.id):
                logger.info(f"Änderung von Reservierung {reservation.id} abgelehnt: Tisch {reservation.table_id} belegt")
                raise ResourceUnavailable("Tisch ist im neuen Zeitraum nicht verfügbar")

            reservation.reservation_date = new_start
            reservation.duration = new_duration
            reservation.end_time = new_end

        if new_status is not None:
            reservation.status = new_status
        if "notes" in changes:
            reservation.notes = changes["notes"]

        reservation.updated_at = datetime.now(timezone.utc)
        self._commit()
        self.db.refresh(reservation)
        return reservation

    def cancel_reservation(self, reservation_id: int) -> Reservation:
        reservation = self._get_reservation(reservation_id)

        if reservation.status == ReservationStatus.CANCELLED:
            raise AlreadyCancelled()

        reservation.status = ReservationStatus.CANCELLED
        reservation.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(reservation)
        logger.info(f"Reservierung {reservation.id} storniert, Tisch {reservation.table_id} wieder frei")
        return reservation

    def get_reservations_by_date(self, restaurant_id: int, day: date) -> list[Reservation]:
        get_restaurant(self.db, restaurant_id)

        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)

        return self.db.query(Reservation).options(
            joinedload(Reservation.table)
        ).filter(
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date >= day_start,
            Reservation.reservation_date < day_end
        ).order_by(
            Reservation.reservation_date
        ).all()

    # ============ HILFSFUNKTIONEN ============

    def _get_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.db.query(Reservation).filter(Reservation.id == reservation_id).first()
        if not reservation:
            raise ReservationNotFound()
        return reservation

    def _validate_requested_table(
        self,
        restaurant_id: int,
        table_id: int,
        party_size: int,
        start: datetime,
        end: datetime
    ) -> int:
        table = self.db.query(DiningTable).filter(
            DiningTable.id == table_id,
            DiningTable.restaurant_id == restaurant_id
        ).first()
        if not table:
            raise ResourceNotFound()
        if table.capacity < party_size:
            raise InsufficientCapacity(
                f"Tischkapazität ({table.capacity}) reicht nicht für {party_size} Personen"
            )
        if has_conflict(self.db, table.id, start, end):
            logger.info(f"Tisch {table.id} belegt für {start} - {end}")
            raise ResourceUnavailable()
        return table.id

    def _add_to_waitlist(self, data: ReservationCreate, requested_date: datetime) -> WaitlistEntry:
        entry = WaitlistEntry(
            restaurant_id=data.restaurant_id,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            party_size=data.party_size,
            requested_date=requested_date,
            status=WaitlistStatus.WAITING
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        logger.info(
            f"Kein Tisch frei für {data.party_size} Personen am {requested_date}, "
            f"Wartelisten-Eintrag {entry.id} angelegt"
        )
        return entry

    def _commit(self):
        # Paralleler Request war schneller: DB-Constraint greift
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Doppelbuchung beim Speichern verhindert: {e.orig}")
            raise ResourceUnavailable()

    def _send_confirmation(self, reservation: Reservation, restaurant_name: str):
        event = ConfirmationEvent(
            customer_name=reservation.customer_name,
            customer_phone=reservation.customer_phone,
            restaurant_name=restaurant_name,
            reservation_date=reservation.reservation_date
        )
        # Fehler beim Benachrichtigen dürfen die Buchung nicht kippen
        try:
            self.notifier.reservation_confirmed(event)
        except Exception:
            logger.exception(f"Bestätigung für Reservierung {reservation.id} fehlgeschlagen")
