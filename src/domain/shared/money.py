"""
Utilidades para manejo de montos monetarios en formato brasileño.

CONTEXTO DEL PROBLEMA:
El webhook de diagnóstico devuelve los montos de cada guía DAS como texto
localizado: "R$ 1.234,56". El punto es separador de miles y la coma es el
separador decimal, al revés que en los estados de cuenta mexicanos.
Además, según la versión del webhook, el mismo campo puede llegar como
número JSON (75.0), como texto sin símbolo ("75,00") o vacío.

SOLUCIÓN:
Una sola función que:
1. Siempre devuelve Decimal (precisión monetaria garantizada).
2. Acepta texto localizado y números JSON.
3. Lanza excepción clara ante valores no parseables (en vez de enmascarar).
4. Ofrece una variante "segura" (parse_money_safe) que retorna Decimal("0")
   para los casos donde un 0 es aceptable (como campos opcionales).
"""

from decimal import Decimal, InvalidOperation


def parse_money(value: str | int | float | Decimal) -> Decimal:
    """Convierte un monto en formato brasileño a Decimal.

    Formatos soportados:
    - Con símbolo: "R$ 1.234,56"
    - Sin símbolo: "1.234,56"
    - Sin miles: "75,00"
    - Negativo: "-R$ 10,00" o "R$ -10,00"
    - Número JSON: 75, 75.5 (se convierte vía str para no heredar
      errores de float)

    Args:
        value: Texto o número que representa un monto.

    Returns:
        Decimal con el valor numérico.

    Raises:
        TypeError: Si el valor no es texto ni número.
        ValueError: Si el texto no se puede convertir a un monto válido.

    Ejemplos:
        >>> parse_money("R$ 1.234,56")
        Decimal('1234.56')
        >>> parse_money("75,00")
        Decimal('75.00')
        >>> parse_money(75.5)
        Decimal('75.5')
    """
    if isinstance(value, bool):
        raise TypeError("parse_money no acepta bool")
    if isinstance(value, (int, float, Decimal)):
        result = value if isinstance(value, Decimal) else Decimal(str(value))
        if not result.is_finite():
            raise ValueError(f"Monto no finito: {value!r}")
        return result
    if not isinstance(value, str):
        raise TypeError(f"parse_money espera str o número, recibió {type(value).__name__}")
    if not value.strip():
        raise ValueError("El texto del monto está vacío")

    # Quitar símbolo de moneda y espacios (incluye el espacio no separable
    # que algunos formateadores pt-BR insertan después de "R$")
    cleaned = value.replace("R$", "").replace("\xa0", "").replace(" ", "").strip()

    # Miles con punto, decimales con coma
    cleaned = cleaned.replace(".", "").replace(",", ".")

    if not cleaned or cleaned == "-":
        raise ValueError(f"No se pudo extraer un monto de: '{value}'")

    try:
        result = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"No se pudo convertir a monto: '{value}' (limpio: '{cleaned}')")

    if not result.is_finite():
        raise ValueError(f"Monto no finito: '{value}'")

    return result


def parse_money_safe(value: str | int | float | Decimal | None) -> Decimal:
    """Versión "segura" de parse_money que retorna Decimal("0") ante errores.

    Se usa para los campos de desglose (principal, multa, juros) que son
    informativos. NO se usa para el total de la guía: ahí un 0 silencioso
    enmascararía un monto ilegible, y el clasificador necesita saberlo.

    Ejemplos:
        >>> parse_money_safe("R$ 1.234,56")
        Decimal('1234.56')
        >>> parse_money_safe("")
        Decimal('0')
        >>> parse_money_safe(None)
        Decimal('0')
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, str) and value.strip() in ("", "-", "N/A", "n/a"):
        return Decimal("0")

    try:
        return parse_money(value)
    except (TypeError, ValueError):
        return Decimal("0")


def format_money(amount: Decimal) -> str:
    """Formatea un Decimal como monto brasileño legible.

    Útil para la narración y para el reporte.

    Ejemplos:
        >>> format_money(Decimal("1234567.89"))
        'R$ 1.234.567,89'
        >>> format_money(Decimal("0"))
        'R$ 0,00'
    """
    amount = amount.quantize(Decimal("0.01"))
    # Formatear al estilo inglés y después intercambiar separadores
    texto = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    if amount < 0:
        return f"-R$ {texto}"
    return f"R$ {texto}"

