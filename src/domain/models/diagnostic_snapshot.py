"""
Modelo de dominio: Snapshot del diagnóstico fiscal.

Este es el único artefacto visible del motor:
- Lo PRODUCE el FiscalDiagnosticEngine al final de una corrida exitosa.
- Lo GUARDA el SnapshotStore (uno por CNPJ, se reemplaza completo).
- Lo CONSUMEN la superficie de presentación, el reporte Excel y las alertas.

Al ser el contrato entre el motor y todo lo demás, la serialización JSON
vive aquí (to_dict / from_dict) y no en cada adaptador.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from src.domain.exceptions import PersistenceCorrupt
from src.domain.models.annual_filing import AnnualFiling, FilingStatus
from src.domain.models.periodic_obligation import ObligationStatus, PeriodicObligation


class ComplianceState(str, Enum):
    """Situación fiscal general de la entidad."""

    REGULAR = "regular"
    IRREGULAR = "irregular"


@dataclass(frozen=True)
class EstimatedPeriod:
    """Contribución heurística de un año a la deuda total."""

    year: int
    """Año estimado."""

    months: int
    """Meses estimados (12 para años pasados, parcial para el año actual)."""

    amount: Decimal
    """months × monto promedio de la guía."""


@dataclass(frozen=True)
class DiagnosticSnapshot:
    """Resultado completo de un diagnóstico fiscal."""

    periodic_obligations: list[PeriodicObligation]
    """Guías DAS ordenadas por vencimiento descendente."""

    annual_filings: list[AnnualFiling]
    """Declaraciones DASN."""

    total_debt: Decimal
    """Guías vencidas + deuda estimada."""

    is_estimated: bool
    """True si alguna parte de total_debt viene de la estimación."""

    computed_at: datetime
    """Momento del cálculo. Solo para mostrar."""

    estimated_periods: list[EstimatedPeriod] = field(default_factory=list)
    """Detalle de la estimación, un elemento por año estimado."""

    @property
    def pending_filing_count(self) -> int:
        """Cantidad de declaraciones pendientes.

        Propiedad y no campo para que nunca pueda contradecir la lista.
        """
        return sum(1 for f in self.annual_filings if f.is_pending)

    @property
    def compliance_state(self) -> ComplianceState:
        """REGULAR solo si no hay deuda ni declaraciones pendientes."""
        if self.total_debt == Decimal("0") and self.pending_filing_count == 0:
            return ComplianceState.REGULAR
        return ComplianceState.IRREGULAR

    @property
    def overdue_count(self) -> int:
        return sum(1 for o in self.periodic_obligations if o.counts_as_debt)

    def __post_init__(self) -> None:
        """Validaciones al crear la instancia."""
        if self.total_debt < Decimal("0"):
            raise ValueError(f"total_debt no puede ser negativo: {self.total_debt}")
        if self.is_estimated != bool(self.estimated_periods):
            raise ValueError(
                "is_estimated debe ser True si y solo si hay periodos estimados "
                f"(is_estimated={self.is_estimated}, "
                f"periodos={len(self.estimated_periods)})"
            )

    # =================================================================
    # Serialización
    # =================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convierte el snapshot a un dict serializable con json.dumps.

        Decimal se guarda como texto para no perder centavos; las fechas
        en ISO. pending_filing_count y compliance_state se incluyen para
        consumidores externos, pero from_dict los recalcula.
        """
        return {
            "periodicObligations": [_obligation_to_dict(o) for o in self.periodic_obligations],
            "annualFilings": [_filing_to_dict(f) for f in self.annual_filings],
            "totalDebt": str(self.total_debt),
            "pendingFilingCount": self.pending_filing_count,
            "complianceState": self.compliance_state.value,
            "isEstimated": self.is_estimated,
            "estimatedPeriods": [
                {"year": p.year, "months": p.months, "amount": str(p.amount)}
                for p in self.estimated_periods
            ],
            "computedAt": self.computed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Any, key: str = "snapshot") -> "DiagnosticSnapshot":
        """Reconstruye un snapshot desde to_dict().

        Raises:
            PersistenceCorrupt: Si falta un campo o algún valor es ilegible.
        """
        if not isinstance(data, dict):
            raise PersistenceCorrupt(key, f"se esperaba un objeto, llegó {type(data).__name__}")
        try:
            return cls(
                periodic_obligations=[
                    _obligation_from_dict(o) for o in data["periodicObligations"]
                ],
                annual_filings=[_filing_from_dict(f) for f in data["annualFilings"]],
                total_debt=Decimal(data["totalDebt"]),
                is_estimated=bool(data["isEstimated"]),
                computed_at=datetime.fromisoformat(data["computedAt"]),
                estimated_periods=[
                    EstimatedPeriod(
                        year=int(p["year"]),
                        months=int(p["months"]),
                        amount=Decimal(p["amount"]),
                    )
                    for p in data.get("estimatedPeriods", [])
                ],
            )
        except (KeyError, TypeError, AttributeError, ValueError, InvalidOperation) as e:
            raise PersistenceCorrupt(key, f"{type(e).__name__}: {e}")


# ============================================================
# FUNCIONES INTERNAS (prefijo _ = no exportadas)
# ============================================================


def _require_object(value: Any) -> None:
    if not isinstance(value, dict):
        raise TypeError(f"registro no es un objeto: {value!r}")


def _decimal_or_none(value: Any) -> Decimal | None:
    return None if value is None else Decimal(value)


def _str_or_none(value: Decimal | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _obligation_to_dict(o: PeriodicObligation) -> dict[str, Any]:
    return {
        "period": o.period,
        "dueDate": _str_or_none(o.due_date),
        "amount": str(o.amount),
        "rawStatus": o.raw_status,
        "derivedStatus": o.derived_status.value,
        "year": o.year,
        "amountValid": o.amount_valid,
        "principal": _str_or_none(o.principal),
        "fine": _str_or_none(o.fine),
        "interest": _str_or_none(o.interest),
    }


def _obligation_from_dict(d: Any) -> PeriodicObligation:
    _require_object(d)
    due = d.get("dueDate")
    return PeriodicObligation(
        period=d["period"],
        due_date=date.fromisoformat(due) if due else None,
        amount=Decimal(d["amount"]),
        raw_status=d["rawStatus"],
        derived_status=ObligationStatus(d["derivedStatus"]),
        year=d.get("year"),
        amount_valid=bool(d.get("amountValid", True)),
        principal=_decimal_or_none(d.get("principal")),
        fine=_decimal_or_none(d.get("fine")),
        interest=_decimal_or_none(d.get("interest")),
    )


def _filing_to_dict(f: AnnualFiling) -> dict[str, Any]:
    return {
        "year": f.year,
        "submittedDate": _str_or_none(f.submitted_date),
        "rawStatus": f.raw_status,
        "derivedStatus": f.derived_status.value,
    }


def _filing_from_dict(d: Any) -> AnnualFiling:
    _require_object(d)
    submitted = d.get("submittedDate")
    return AnnualFiling(
        year=int(d["year"]),
        submitted_date=date.fromisoformat(submitted) if submitted else None,
        raw_status=d["rawStatus"],
        derived_status=FilingStatus(d["derivedStatus"]),
    )
