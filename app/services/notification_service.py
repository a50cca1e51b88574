"""
Buchungsbestätigungen.

Der Standard-Notifier schreibt nur einen Logeintrag, ein echter Versand
(SMS, Mail) ist nicht Teil dieses Service.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger("app.services.notification_service")


@dataclass(frozen=True)
class ConfirmationEvent:
    customer_name: str
    customer_phone: str
    restaurant_name: str
    reservation_date: datetime


class ReservationNotifier:

    def reservation_confirmed(self, event: ConfirmationEvent) -> None:
        logger.info(
            f"Reservierung bestätigt: {event.customer_name} ({event.customer_phone}) "
            f"bei {event.restaurant_name} am {event.reservation_date.isoformat()}"
        )


def get_notifier() -> ReservationNotifier:
    return ReservationNotifier()
