"""
Reine Zeitfunktionen: Uhrzeiten in Minuten seit Mitternacht,
Öffnungszeiten (inkl. Betrieb über Mitternacht) und Peak-Fenster.
"""
import re
from datetime import datetime, time

from app.services.errors import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60

_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d):([0-5]\d)$")


def is_clock_string(value: str) -> bool:
    return bool(_CLOCK_PATTERN.match(value))


def to_minute_offset(value: str | time | datetime) -> int:
    """
    Minuten seit Mitternacht, Ergebnis in [0, 1440).
    Strings müssen im Format HH:MM:SS sein, Sekunden werden ignoriert.
    """
    if isinstance(value, (time, datetime)):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM:SS)")
    match = _CLOCK_PATTERN.match(value)
    if not match:
        raise InvalidTimeFormat(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM:SS)")
    hours, minutes, _ = (int(part) for part in match.groups())
    return hours * 60 + minutes


def within_operating_window(
    instant: datetime,
    opening: str | time,
    closing: str | time,
    duration_minutes: int
) -> bool:
    """
    Prüft ob [instant, instant + duration) in die Öffnungszeiten passt.

    Schließzeit < Öffnungszeit = Betrieb über Mitternacht. Dann reicht es,
    wenn der Start nach der Öffnung liegt ODER das Ende vor der Schließung.
    Dauern über 24h werden nicht unterstützt.
    """
    start = to_minute_offset(instant)
    end = start + duration_minutes
    opening_minutes = to_minute_offset(opening)
    closing_minutes = to_minute_offset(closing)

    if closing_minutes < opening_minutes:
        return start >= opening_minutes or end <= closing_minutes

    return start >= opening_minutes and end <= closing_minutes


def is_peak(instant: datetime, peak_start: str | time | None, peak_end: str | time | None) -> bool:
    # Grenzen inklusive, Peak-Fenster über Mitternacht gibt es nicht
    if peak_start is None or peak_end is None:
        return False
    minute = to_minute_offset(instant)
    return to_minute_offset(peak_start) <= minute <= to_minute_offset(peak_end)


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Halboffene Intervalle [a_start, a_end) und [b_start, b_end)."""
    return a_start < b_end and b_start < a_end
