import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from app.models import DiningTable, Reservation, ACTIVE_STATUSES
from app.services.restaurant_service import get_restaurant
from app.services.time_rules import MINUTES_PER_DAY, intervals_overlap, to_minute_offset

logger = logging.getLogger("app.services.availability_service")

# Raster für die Slot-Übersicht, nicht pro Restaurant konfigurierbar
SLOT_INTERVAL_MINUTES = 30
DEFAULT_DURATION_MINUTES = 120


def _eligible_tables(db: Session, restaurant_id: int, party_size: int) -> list[DiningTable]:
    """
    Aktive Tische mit ausreichender Kapazität, kleinste zuerst (Best-Fit).
    Bei gleicher Kapazität entscheidet die ID.
    """
    return db.query(DiningTable).filter(
        DiningTable.restaurant_id == restaurant_id,
        DiningTable.is_active == True,
        DiningTable.capacity >= party_size
    ).order_by(
        DiningTable.capacity,
        DiningTable.id
    ).all()


def _active_intervals(
    db: Session,
    table_ids: list[int],
    start: datetime,
    end: datetime,
    exclude_reservation_id: int | None = None
) -> dict[int, list[tuple[datetime, datetime]]]:
    """
    Holt alle aktiven Reservierungen der Tische, die [start, end) schneiden,
    in einer einzigen Query. Ergebnis: table_id -> [(start, end), ...]
    """
    if not table_ids:
        return {}

    query = db.query(
        Reservation.table_id,
        Reservation.reservation_date,
        Reservation.end_time
    ).filter(
        Reservation.table_id.in_(table_ids),
        Reservation.status.in_(ACTIVE_STATUSES),
        Reservation.reservation_date < end,
        Reservation.end_time > start
    )
    # Beim Umbuchen darf die Reservierung nicht mit sich selbst kollidieren
    if exclude_reservation_id is not None:
        query = query.filter(Reservation.id != exclude_reservation_id)

    intervals = {}
    for table_id, booked_start, booked_end in query.all():
        intervals.setdefault(table_id, []).append((booked_start, booked_end))
    return intervals


def _first_free_table(
    candidates: list[DiningTable],
    intervals: dict[int, list[tuple[datetime, datetime]]],
    start: datetime,
    end: datetime
) -> int | None:
    for table in candidates:
        booked = intervals.get(table.id, [])
        if not any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in booked):
            return table.id
    return None


def has_conflict(
    db: Session,
    table_id: int,
    start: datetime,
    end: datetime,
    exclude_reservation_id: int | None = None
) -> bool:
    """True wenn eine aktive Reservierung den Tisch in [start, end) belegt."""
    intervals = _active_intervals(db, [table_id], start, end, exclude_reservation_id)
    return bool(intervals.get(table_id))


def find_suitable_table(
    db: Session,
    restaurant_id: int,
    party_size: int,
    start: datetime,
    end: datetime
) -> int | None:
    """
    Kleinster freier Tisch, der die Gruppe aufnehmen kann.
    Bereits vergebene Tische werden nie umgelegt.
    """
    candidates = _eligible_tables(db, restaurant_id, party_size)
    if not candidates:
        return None
    intervals = _active_intervals(db, [t.id for t in candidates], start, end)
    return _first_free_table(candidates, intervals, start, end)


def check_availability(
    db: Session,
    restaurant_id: int,
    requested_at: datetime,
    party_size: int,
    duration: int = DEFAULT_DURATION_MINUTES
) -> dict:
    get_restaurant(db, restaurant_id)

    # Reservierungen sind ohne Zeitzone gespeichert: Zeitstempel mit Offset als UTC vergleichen
    if requested_at.tzinfo is not None:
        requested_at = requested_at.astimezone(timezone.utc).replace(tzinfo=None)

    end = requested_at + timedelta(minutes=duration)
    table_id = find_suitable_table(db, restaurant_id, party_size, requested_at, end)

    if table_id is not None:
        message = "Tisch zur gewünschten Zeit verfügbar"
    else:
        message = f"Kein Tisch für {party_size} Personen zur gewünschten Zeit frei"

    return {
        "available": table_id is not None,
        "table_id": table_id,
        "message": message
    }


def get_available_slots(db: Session, restaurant_id: int, day: date, party_size: int) -> dict:
    """
    Slot-Übersicht eines Tages im 30-Minuten-Raster.

    Ein Slot wird nur gelistet, wenn die Standarddauer von 120 Minuten komplett
    vor der Schließzeit endet. Pro Slot wird geprüft, ob mindestens ein
    passender Tisch frei ist. Nur lesend, es wird nichts reserviert.
    """
    restaurant = get_restaurant(db, restaurant_id)

    opening = to_minute_offset(restaurant.opening_time)
    closing = to_minute_offset(restaurant.closing_time)
    # Betrieb über Mitternacht: das Raster läuft bis in den Folgetag
    if closing < opening:
        closing += MINUTES_PER_DAY

    day_start = datetime.combine(day, time.min)
    grid = []
    for minute in range(opening, closing, SLOT_INTERVAL_MINUTES):
        if minute + DEFAULT_DURATION_MINUTES > closing:
            continue
        slot_start = day_start + timedelta(minutes=minute)
        grid.append((slot_start, slot_start + timedelta(minutes=DEFAULT_DURATION_MINUTES)))

    candidates = _eligible_tables(db, restaurant_id, party_size)
    intervals = {}
    if grid and candidates:
        intervals = _active_intervals(db, [t.id for t in candidates], grid[0][0], grid[-1][1])

    slots = []
    for slot_start, slot_end in grid:
        table_id = _first_free_table(candidates, intervals, slot_start, slot_end)
        slots.append({
            "time": slot_start,
            "available": table_id is not None,
            "table_id": table_id
        })

    logger.debug(f"Slots für Restaurant {restaurant_id} am {day}: {sum(s['available'] for s in slots)}/{len(slots)} frei")

    return {
        "date": day,
        "party_size": party_size,
        "default_duration": DEFAULT_DURATION_MINUTES,
        "operating_hours": {
            "opening": restaurant.opening_time,
            "closing": restaurant.closing_time
        },
        "slots": slots
    }
