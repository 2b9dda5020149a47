"""
Calendario de días hábiles (feriados nacionales de Brasil).

¿Por qué existe?
La guía DAS vence el día 20 del mes siguiente al periodo. Si el 20 cae en
sábado, domingo o feriado nacional, el vencimiento se recorre al siguiente
día hábil. Cuando el webhook no manda "vencimento", tenemos que reproducir
esa regla nosotros.

Los feriados se calculan analíticamente por año (sin tablas que caduquen):
- Móviles, relativos a la Pascua: Carnaval (P−47), Viernes Santo (P−2),
  la propia Pascua y Corpus Christi (P+60).
- Fijos: 1/ene, 21/abr, 1/may, 7/sep, 12/oct, 2/nov, 15/nov, 25/dic.
"""

from datetime import date, timedelta
from functools import lru_cache

DAS_DUE_DAY = 20
"""Día del mes siguiente en que vence la guía DAS."""

_FIXED_HOLIDAYS: tuple[tuple[int, int], ...] = (
    (1, 1),  # Confraternização Universal
    (4, 21),  # Tiradentes
    (5, 1),  # Dia do Trabalho
    (9, 7),  # Independência
    (10, 12),  # Nossa Senhora Aparecida
    (11, 2),  # Finados
    (11, 15),  # Proclamação da República
    (12, 25),  # Natal
)


def easter_sunday(year: int) -> date:
    """Calcula el domingo de Pascua (algoritmo gregoriano anónimo,
    Meeus/Jones/Butcher).

    Ejemplos:
        >>> easter_sunday(2024)
        date(2024, 3, 31)
        >>> easter_sunday(2025)
        date(2025, 4, 20)
    """
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


@lru_cache(maxsize=64)
def national_holidays(year: int) -> frozenset[date]:
    """Devuelve el conjunto de feriados nacionales de un año."""
    easter = easter_sunday(year)
    moving = {
        easter - timedelta(days=47),  # Carnaval
        easter - timedelta(days=2),  # Sexta-feira Santa
        easter,
        easter + timedelta(days=60),  # Corpus Christi
    }
    fixed = {date(year, month, day) for month, day in _FIXED_HOLIDAYS}
    return frozenset(moving | fixed)


def is_business_day(day: date) -> bool:
    """True si el día no es sábado, domingo ni feriado nacional."""
    if day.weekday() >= 5:
        return False
    return day not in national_holidays(day.year)


def next_business_day(day: date) -> date:
    """Recorre la fecha hacia adelante hasta el primer día hábil.

    Si la fecha ya es hábil, se devuelve tal cual.
    """
    current = day
    while not is_business_day(current):
        current += timedelta(days=1)
    return current


def das_due_date(year: int, month: int) -> date:
    """Vencimiento de la guía DAS del periodo (year, month).

    Día 20 del mes siguiente, recorrido al siguiente día hábil.
    Diciembre vence en enero del año siguiente.

    Ejemplos:
        >>> das_due_date(2024, 3)   # 20/04/2024 es sábado, 21 es Tiradentes
        date(2024, 4, 22)
    """
    if month == 12:
        raw_due = date(year + 1, 1, DAS_DUE_DAY)
    else:
        raw_due = date(year, month + 1, DAS_DUE_DAY)
    return next_business_day(raw_due)
