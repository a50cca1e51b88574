import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Restaurant, DiningTable, WaitlistEntry
from app.schemas.restaurant import RestaurantCreate, TableCreate, TableUpdate
from app.services.errors import VenueNotFound, ResourceNotFound, DuplicateTableNumber

logger = logging.getLogger("app.services.restaurant_service")


def get_restaurant(db: Session, restaurant_id: int) -> Restaurant:
    restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
    if not restaurant:
        raise VenueNotFound()
    return restaurant


def list_restaurants(db: Session) -> list[Restaurant]:
    return db.query(Restaurant).order_by(Restaurant.id).all()


def create_restaurant(db: Session, data: RestaurantCreate) -> Restaurant:
    restaurant = Restaurant(**data.model_dump())
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    logger.info(f"Restaurant angelegt: {restaurant.name} (ID {restaurant.id})")
    return restaurant


def add_table(db: Session, restaurant_id: int, data: TableCreate) -> DiningTable:
    """
    Registriert einen Tisch. Tischnummern sind pro Restaurant eindeutig.
    """
    get_restaurant(db, restaurant_id)

    existing = db.query(DiningTable).filter(
        DiningTable.restaurant_id == restaurant_id,
        DiningTable.table_number == data.table_number
    ).first()
    if existing:
        raise DuplicateTableNumber(f"Tischnummer {data.table_number} existiert in diesem Restaurant bereits")

    table = DiningTable(restaurant_id=restaurant_id, **data.model_dump())
    db.add(table)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateTableNumber(f"Tischnummer {data.table_number} existiert in diesem Restaurant bereits")
    db.refresh(table)
    logger.info(f"Tisch {table.table_number} ({table.capacity} Plätze) für Restaurant {restaurant_id} angelegt")
    return table


def list_tables(db: Session, restaurant_id: int, only_active: bool = False) -> list[DiningTable]:
    get_restaurant(db, restaurant_id)
    query = db.query(DiningTable).filter(DiningTable.restaurant_id == restaurant_id)
    if only_active:
        query = query.filter(DiningTable.is_active == True)
    return query.order_by(DiningTable.id).all()


def update_table(db: Session, restaurant_id: int, table_id: int, data: TableUpdate) -> DiningTable:
    # Tische werden nie gelöscht, nur deaktiviert
    table = db.query(DiningTable).filter(
        DiningTable.id == table_id,
        DiningTable.restaurant_id == restaurant_id
    ).first()
    if not table:
        raise ResourceNotFound()

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(table, field, value)
    table.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(table)
    return table


def list_waitlist(db: Session, restaurant_id: int) -> list[WaitlistEntry]:
    get_restaurant(db, restaurant_id)
    return db.query(WaitlistEntry).filter(
        WaitlistEntry.restaurant_id == restaurant_id
    ).order_by(
        WaitlistEntry.requested_date,
        WaitlistEntry.id
    ).all()
