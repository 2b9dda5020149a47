"""
Modelo de dominio: Guía DAS (obligación mensual).

Una PeriodicObligation representa la guía de pago mensual consolidado del
MEI para un periodo (mes/año).

Decisiones de diseño:
- Se usa `Decimal` para montos (ver src.domain.shared.money).
- `derived_status` lo calcula el clasificador. El "situacao" del webhook
  se guarda crudo en `raw_status` solo para mostrarlo: no es un enum
  confiable.
- Cuando el monto llegó ilegible, `amount` queda en 0 y `amount_valid` en
  False. El registro se conserva para mostrarlo, pero no suma a la deuda.
- Las listas de guías se reemplazan completas en cada corrida; nunca se
  modifica una guía existente (frozen=True).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class ObligationStatus(str, Enum):
    """Estado derivado de una guía DAS."""

    PAID = "paid"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class PeriodicObligation:
    """Guía DAS clasificada."""

    period: str
    """Etiqueta del periodo tal como llega. Ejemplo: 'Março/2024'."""

    due_date: date | None
    """Vencimiento. Del campo "vencimento" si existe; si no, derivado del
    periodo (día 20 del mes siguiente, recorrido a día hábil). None si
    ninguna de las dos fuentes es utilizable."""

    amount: Decimal
    """Total de la guía. Decimal("0") cuando el monto era ilegible."""

    raw_status: str
    """Texto libre "situacao" del webhook. Cadena vacía si no vino."""

    derived_status: ObligationStatus
    """Estado calculado: paid, overdue o upcoming."""

    year: int | None = None
    """Año de competencia (campo "ano", o el año de la etiqueta del periodo).
    Lo usa el estimador para contar guías por año."""

    amount_valid: bool = True
    """False si el monto no se pudo convertir (MalformedAmount)."""

    principal: Decimal | None = None
    """Valor principal, si el webhook manda el desglose."""

    fine: Decimal | None = None
    """Multa por atraso ("multa")."""

    interest: Decimal | None = None
    """Juros por atraso ("juros")."""

    @property
    def counts_as_debt(self) -> bool:
        """True si la guía suma a la deuda: vencida y con monto válido."""
        return self.derived_status is ObligationStatus.OVERDUE and self.amount_valid

    def __post_init__(self) -> None:
        """Validaciones al crear la instancia."""
        if self.amount < Decimal("0"):
            raise ValueError(f"amount no puede ser negativo: {self.amount}")
        if not isinstance(self.derived_status, ObligationStatus):
            raise ValueError(f"derived_status inválido: {self.derived_status!r}")
