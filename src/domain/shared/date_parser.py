"""
Conversión de fechas del webhook de diagnóstico.

CONTEXTO DEL PROBLEMA:
El webhook mezcla formatos según el campo y la versión:
- "vencimento" y "dataApresentacao": "20/04/2024" (dd/mm/yyyy).
- Algunas versiones devuelven "dataApresentacao" en ISO: "2024-05-31" o
  "2024-05-31T10:22:00".
- "periodo": "Março/2024" (nombre de mes en portugués + año).

SOLUCIÓN:
Funciones pequeñas que siempre devuelven objetos `date` de Python (no
strings) y lanzan ValueError con el texto original cuando no pueden.
"""

import re
from datetime import date

from src.domain.shared.month_map import month_to_int


def parse_br_date(date_text: str) -> date:
    """Parsea una fecha brasileña dd/mm/yyyy.

    También acepta año de 2 dígitos ("20/04/24") y separador "-".

    Raises:
        ValueError: Si el formato no es dd/mm/yyyy o la fecha no existe.

    Ejemplos:
        >>> parse_br_date("20/04/2024")
        date(2024, 4, 20)
    """
    text = date_text.strip()
    if not text:
        raise ValueError("El texto de fecha está vacío")

    m = re.match(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2}|\d{4})$", text)
    if not m:
        raise ValueError(f"Formato de fecha no reconocido: '{text}'. Se esperaba dd/mm/yyyy")

    day = int(m.group(1))
    month = int(m.group(2))
    year = _expand_year(int(m.group(3)))
    return _build_date(year, month, day, text)


def parse_flexible_date(date_text: str) -> date:
    """Parsea dd/mm/yyyy o ISO (yyyy-mm-dd, con o sin hora).

    Se usa para "dataApresentacao", que cambió de formato entre versiones.
    """
    text = date_text.strip()
    m = re.match(r"^(\d{4})-(\d{2})-(\d{2})", text)
    if m:
        return _build_date(int(m.group(1)), int(m.group(2)), int(m.group(3)), text)
    return parse_br_date(text)


def parse_period_label(period_text: str) -> tuple[int, int]:
    """Extrae (año, mes) de una etiqueta de periodo.

    Formatos soportados:
        "Março/2024"  → (2024, 3)
        "mar/2024"    → (2024, 3)
        "Março 2024"  → (2024, 3)
        "03/2024"     → (2024, 3)

    Raises:
        ValueError: Si no se reconoce el mes o el año.
    """
    text = period_text.strip()
    m = re.match(r"^([^\d/\s-]+|\d{1,2})\s*[/\-\s]\s*(\d{4})$", text)
    if not m:
        raise ValueError(f"Periodo no reconocido: '{period_text}'")

    month_text, year_text = m.group(1), m.group(2)
    if month_text.isdigit():
        month = int(month_text)
        if not 1 <= month <= 12:
            raise ValueError(f"Mes fuera de rango en periodo '{period_text}': {month}")
    else:
        month = month_to_int(month_text)

    return int(year_text), month


def parse_year(value: object) -> int | None:
    """Convierte el campo "ano" (texto o número) a int.

    Devuelve None si no es un año plausible. El webhook manda "2023",
    2023, o a veces "2023 " con espacios.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        year = value
    elif isinstance(value, str) and value.strip().isdigit():
        year = int(value.strip())
    else:
        return None
    if 1900 <= year <= 2100:
        return year
    return None


# ============================================================
# FUNCIONES INTERNAS (prefijo _ = no exportadas)
# ============================================================


def _expand_year(year_short: int) -> int:
    """Expande un año de 2 dígitos a 4 dígitos (00-49 → 2000-2049)."""
    if year_short >= 100:
        return year_short
    if year_short < 50:
        return 2000 + year_short
    return 1900 + year_short


def _build_date(year: int, month: int, day: int, original_text: str) -> date:
    """Construye un objeto date con validación y un mensaje que incluye
    el texto original para debugging."""
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(
            f"Fecha inválida construida de '{original_text}': "
            f"año={year}, mes={month}, día={day} — {e}"
        )
