"""
Modelo de dominio: Resultado canónico del normalizador.

Es el "puente" entre el ResponseNormalizer y el ObligationClassifier.
Sin importar qué forma tenía la respuesta (arreglo, envoltorio
{resultado: ...} u objeto suelto), el clasificador siempre recibe dos
listas de registros crudos.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CanonicalResult:
    """Listas crudas de registros extraídas de la respuesta del webhook."""

    periodic_raw: list[dict[str, Any]] = field(default_factory=list)
    """Registros de guías DAS tal como llegaron."""

    annual_raw: list[dict[str, Any]] = field(default_factory=list)
    """Registros de declaraciones DASN tal como llegaron."""

    tier: str = ""
    """Nivel de extracción que resolvió la respuesta. Ejemplo:
    'envelope+specific', 'array+generic', 'single_obligation'.
    Se narra para saber qué forma mandó el webhook."""

    @property
    def is_empty(self) -> bool:
        return not self.periodic_raw and not self.annual_raw
