"""
Fehler der Reservierungslogik.

Alle Fehler sind HTTPExceptions: die Services werfen sie direkt, FastAPI
liefert Statuscode und Meldung unverändert an den Aufrufer aus.
`category` ordnet jeden Fehler einer Klasse zu (not_found, validation,
conflict, unavailable). Keiner dieser Fehler wird intern wiederholt.
"""
from fastapi import HTTPException


class ReservationError(HTTPException):
    status_code = 500
    category = "internal"

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)

    def __str__(self) -> str:
        return self.detail


# ============ NOT FOUND ============

class NotFoundError(ReservationError):
    status_code = 404
    category = "not_found"


class VenueNotFound(NotFoundError):
    def __init__(self, detail: str = "Restaurant nicht gefunden"):
        super().__init__(detail)


class ResourceNotFound(NotFoundError):
    def __init__(self, detail: str = "Tisch nicht gefunden"):
        super().__init__(detail)


class ReservationNotFound(NotFoundError):
    def __init__(self, detail: str = "Reservierung nicht gefunden"):
        super().__init__(detail)


# ============ VALIDATION ============

class ValidationFailure(ReservationError):
    status_code = 400
    category = "validation"


class InvalidTimeFormat(ValidationFailure):
    pass


class OutsideOperatingHours(ValidationFailure):
    pass


class PeakHourDurationExceeded(ValidationFailure):
    pass


class InsufficientCapacity(ValidationFailure):
    pass


# ============ CONFLICT ============

class ConflictError(ReservationError):
    status_code = 409
    category = "conflict"


class ResourceUnavailable(ConflictError):
    def __init__(self, detail: str = "Tisch ist im gewünschten Zeitraum nicht verfügbar"):
        super().__init__(detail)


class DuplicateTableNumber(ConflictError):
    pass


class AlreadyCancelled(ConflictError):
    status_code = 400

    def __init__(self, detail: str = "Reservierung ist bereits storniert"):
        super().__init__(detail)


class InvalidStateTransition(ConflictError):
    status_code = 400


# ============ UNAVAILABLE ============

class NoResourceAvailable(ConflictError):
    """Kein Tisch frei, Anfrage steht auf der Warteliste."""
    category = "unavailable"

    def __init__(self, party_size: int, waitlist_id: int):
        self.waitlist_id = waitlist_id
        super().__init__(
            f"Kein Tisch für {party_size} Personen zur gewünschten Zeit frei. "
            f"Sie wurden auf die Warteliste gesetzt (Wartelisten-Nr.: {waitlist_id})"
        )
