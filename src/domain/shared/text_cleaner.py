"""
Utilidades de limpieza de texto.

Funciones reutilizables para normalizar los textos libres que manda el
webhook (situación de la guía, status de la declaración, CNPJ con máscara)
antes de que el clasificador los compare.

Estas funciones NO tienen lógica de negocio. Solo operan sobre strings puros.
"""

import re
import unicodedata


def clean_whitespace(text: str) -> str:
    """Reemplaza múltiples espacios/tabs por un solo espacio y hace strip.

    Ejemplos:
        >>> clean_whitespace("  Não   optante ")
        'Não optante'
    """
    return re.sub(r"\s+", " ", text).strip()


def fold_accents(text: str) -> str:
    """Elimina los acentos de un texto ("Não optante" → "Nao optante").

    ¿Cuándo se necesita? Cuando el texto pasa por un relay que pierde la
    codificación o cuando el webhook cambia de "Março" a "Marco" entre
    versiones. Comparar sin acentos hace que ambas variantes coincidan.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_status(text: object) -> str:
    """Normaliza un status libre para compararlo: sin acentos, minúsculas,
    espacios colapsados. None y valores no-texto devuelven cadena vacía.

    Ejemplos:
        >>> normalize_status("  NÃO  Optante")
        'nao optante'
        >>> normalize_status(None)
        ''
    """
    if not isinstance(text, str):
        return ""
    return clean_whitespace(fold_accents(text)).lower()


def digits_only(text: str) -> str:
    """Deja solo los dígitos de un texto.

    Es la normalización del CNPJ: "12.345.678/0001-90" → "12345678000190".
    También se usa para derivar la clave del snapshot guardado.
    """
    return re.sub(r"\D", "", text)


def preview(value: str, limit: int = 100) -> str:
    """Recorta un texto largo para la narración ("...") sin romper líneas."""
    flat = value.replace("\n", " ")
    if len(flat) <= limit:
        return flat
    return flat[:limit] + "..."
