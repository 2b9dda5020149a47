"""
Modelo de dominio: Declaración anual DASN.

La DASN-SIMEI es la declaración anual obligatoria del MEI. Mientras la
declaración de un año no se entrega, el portal retiene las guías DAS de ese
año, por eso una DASN pendiente dispara la estimación de deuda.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class FilingStatus(str, Enum):
    """Estado derivado de una declaración anual."""

    FILED = "filed"
    EXEMPT = "exempt"
    PENDING = "pending"


@dataclass(frozen=True)
class AnnualFiling:
    """Declaración anual clasificada."""

    year: int
    """Año-calendario declarado."""

    submitted_date: date | None
    """Fecha de entrega ("dataApresentacao"). None si no fue entregada o
    si la fecha no se pudo leer."""

    raw_status: str
    """Status crudo del webhook: 'Regular', 'Não optante' o vacío."""

    derived_status: FilingStatus
    """Estado calculado: filed, exempt o pending."""

    @property
    def is_pending(self) -> bool:
        return self.derived_status is FilingStatus.PENDING

    def __post_init__(self) -> None:
        """Validaciones al crear la instancia."""
        if self.year < 1900 or self.year > 2100:
            raise ValueError(f"Año fuera de rango razonable: {self.year}")
