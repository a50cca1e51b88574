from app.models.restaurant import Restaurant
from app.models.dining_table import DiningTable
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.models.waitlist import WaitlistEntry, WaitlistStatus
