"""
Normalisation des dates calendaires.

Point unique de conversion « une date quelconque » → (année, mois, jour).
L'année, le mois et le jour sont lus tels qu'ils figurent dans la valeur :
jamais de conversion vers un fuseau local avant extraction. Un timestamp
« 2025-10-02T00:00:00Z » reste le 2 octobre, quel que soit le fuseau du client.
"""

import re
from datetime import date, datetime
from typing import NamedTuple, Union

# YYYY-MM-DD (ou YYYY/MM/DD), éventuellement suivi d'une heure et d'un décalage
_DATE_RE = re.compile(
    r"^\s*(\d{4})[-/](\d{1,2})[-/](\d{1,2})"
    r"(?:[T ](?:[01]?\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d+)?)?\s*(?:Z|[+-]\d{2}(?::?\d{2})?)?)?\s*$"
)

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class InvalidCalendarDate(ValueError):
    pass


class CalendarDate(NamedTuple):
    """Date sans heure ni fuseau. L'égalité est celle du triplet."""

    year: int
    month: int
    day: int

    @property
    def iso(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    @property
    def weekday_name(self) -> str:
        return _WEEKDAYS[self.to_date().weekday()]

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return self.iso


CalendarDateInput = Union[CalendarDate, date, datetime, str]


def normalize_calendar_date(value: CalendarDateInput) -> CalendarDate:
    """
    Retourne la date calendaire portée par `value`.

    - datetime : champs year/month/day de la valeur elle-même (tzinfo ignoré,
      aucun astimezone()).
    - date : telle quelle.
    - str : les 10 premiers caractères « YYYY-MM-DD » ; l'heure et le décalage
      éventuels sont validés puis ignorés.

    Lève InvalidCalendarDate si la valeur ne désigne pas une date valide.
    """
    if isinstance(value, CalendarDate):
        return value

    # datetime hérite de date : le test doit précéder celui de date
    if isinstance(value, datetime):
        return CalendarDate(value.year, value.month, value.day)

    if isinstance(value, date):
        return CalendarDate(value.year, value.month, value.day)

    if isinstance(value, str):
        match = _DATE_RE.match(value)
        if match is None:
            raise InvalidCalendarDate(f"Date invalide : '{value}' (format attendu YYYY-MM-DD).")
        year, month, day = (int(part) for part in match.groups())
        try:
            date(year, month, day)
        except ValueError:
            raise InvalidCalendarDate(f"Date inexistante : '{value}'.")
        return CalendarDate(year, month, day)

    raise InvalidCalendarDate(f"Type de date non supporté : {type(value).__name__}.")
