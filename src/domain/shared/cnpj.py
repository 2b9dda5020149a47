"""
Normalización del identificador de la entidad (CNPJ).

El CNPJ llega con o sin máscara ("12.345.678/0001-90" o "12345678000190").
Todo el motor trabaja con la forma de solo dígitos: es la que se manda al
webhook y de la que se deriva la clave del snapshot guardado.
"""

from src.domain.exceptions import InvalidEntityId
from src.domain.shared.text_cleaner import digits_only

CNPJ_LENGTH = 14


def normalize_cnpj(value: str, strict: bool = True) -> str:
    """Quita todo lo que no sea dígito.

    Args:
        value: CNPJ con o sin máscara.
        strict: Si es True, exige exactamente 14 dígitos.

    Returns:
        CNPJ de solo dígitos.

    Raises:
        InvalidEntityId: Si no quedan dígitos, o si strict y la longitud
                         no es 14.

    Ejemplos:
        >>> normalize_cnpj("12.345.678/0001-90")
        '12345678000190'
    """
    if not isinstance(value, str):
        raise InvalidEntityId(repr(value))

    digits = digits_only(value)
    if not digits:
        raise InvalidEntityId(value)
    if strict and len(digits) != CNPJ_LENGTH:
        raise InvalidEntityId(value)
    return digits


def format_cnpj(digits: str) -> str:
    """Aplica la máscara XX.XXX.XXX/XXXX-XX. Si no son 14 dígitos, no toca nada."""
    if len(digits) != CNPJ_LENGTH or not digits.isdigit():
        return digits
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"
