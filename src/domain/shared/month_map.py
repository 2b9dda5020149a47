"""
Mapeo unificado de nombres de meses en portugués a números.

CONTEXTO DEL PROBLEMA:
Cuando una guía DAS llega sin "vencimento", la fecha de vencimiento se
deriva del campo "periodo", que el webhook escribe como "Março/2024".
En la práctica aparecen variantes:
- Nombre completo con acento: "Março"
- Nombre completo sin acento (algunos relays pierden el UTF-8): "Marco"
- Abreviatura de 3 letras: "Mar", "Fev", "Set"
- Mayúsculas o minúsculas indistintamente.

SOLUCIÓN:
Un solo diccionario que cubre todas las variantes. El lookup siempre es
case-insensitive e insensible a acentos (se normaliza antes de buscar).
"""

from src.domain.shared.text_cleaner import fold_accents

# Clave normalizada (mayúsculas, sin acentos) → número de mes.
_MONTH_MAP: dict[str, int] = {
    # --- Nombres completos ---
    "JANEIRO": 1,
    "FEVEREIRO": 2,
    "MARCO": 3,
    "ABRIL": 4,
    "MAIO": 5,
    "JUNHO": 6,
    "JULHO": 7,
    "AGOSTO": 8,
    "SETEMBRO": 9,
    "OUTUBRO": 10,
    "NOVEMBRO": 11,
    "DEZEMBRO": 12,
    # --- Abreviaturas de 3 letras ---
    "JAN": 1,
    "FEV": 2,
    "MAR": 3,
    "ABR": 4,
    "MAI": 5,
    "JUN": 6,
    "JUL": 7,
    "AGO": 8,
    "SET": 9,
    "OUT": 10,
    "NOV": 11,
    "DEZ": 12,
}


def month_to_int(month_name: str) -> int:
    """Convierte un nombre de mes en portugués a su número 1-12.

    Args:
        month_name: Nombre o abreviatura. Ejemplos: 'Março', 'marco', 'MAR'.

    Returns:
        Entero de 1 a 12.

    Raises:
        ValueError: Si el nombre no se reconoce.

    Ejemplos:
        >>> month_to_int("Março")
        3
        >>> month_to_int("dez")
        12
    """
    normalized = fold_accents(month_name.strip()).upper()
    result = _MONTH_MAP.get(normalized)
    if result is None:
        raise ValueError(f"Mes no reconocido: '{month_name}'")
    return result

