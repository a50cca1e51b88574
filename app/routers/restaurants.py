from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.restaurant import (
    RestaurantCreate,
    RestaurantResponse,
    RestaurantDetailResponse,
    TableCreate,
    TableUpdate,
    TableResponse,
    WaitlistResponse
)
from app.services import restaurant_service

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("/", response_model=list[RestaurantResponse])
def get_all_restaurants(db: Session = Depends(get_db)):
    return restaurant_service.list_restaurants(db)


@router.get("/{restaurant_id}", response_model=RestaurantDetailResponse)
def get_restaurant(restaurant_id: int, db: Session = Depends(get_db)):
    restaurant = restaurant_service.get_restaurant(db, restaurant_id)
    active_tables = restaurant_service.list_tables(db, restaurant_id, only_active=True)
    return RestaurantDetailResponse(
        **RestaurantResponse.model_validate(restaurant).model_dump(),
        tables=[TableResponse.model_validate(t) for t in active_tables]
    )


@router.post("/", response_model=RestaurantResponse)
def create_restaurant(restaurant: RestaurantCreate, db: Session = Depends(get_db)):
    return restaurant_service.create_restaurant(db, restaurant)


@router.get("/{restaurant_id}/tables", response_model=list[TableResponse])
def get_tables(restaurant_id: int, db: Session = Depends(get_db)):
    return restaurant_service.list_tables(db, restaurant_id)


@router.post("/{restaurant_id}/tables", response_model=TableResponse)
def add_table(restaurant_id: int, table: TableCreate, db: Session = Depends(get_db)):
    return restaurant_service.add_table(db, restaurant_id, table)


# Tische werden nicht gelöscht, nur deaktiviert
@router.patch("/{restaurant_id}/tables/{table_id}", response_model=TableResponse)
def update_table(restaurant_id: int, table_id: int, table_update: TableUpdate, db: Session = Depends(get_db)):
    return restaurant_service.update_table(db, restaurant_id, table_id, table_update)


@router.get("/{restaurant_id}/waitlist", response_model=list[WaitlistResponse])
def get_waitlist(restaurant_id: int, db: Session = Depends(get_db)):
    return restaurant_service.list_waitlist(db, restaurant_id)
