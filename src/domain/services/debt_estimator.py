"""
Servicio de dominio: Estimador de deuda.

CONTEXTO DEL PROBLEMA:
El portal retiene las guías DAS de un año hasta que se entrega la DASN del
año anterior. Resultado: una entidad con declaraciones atrasadas puede
aparecer "sin guías" y, con una suma ingenua, "sin deuda".

SOLUCIÓN:
    total = Σ guías vencidas (con monto válido)
          + 12 × promedio       por cada año pasado con DASN pendiente y sin guías
          + meses × promedio    para el año actual, si la DASN del año anterior
                                está pendiente y el año actual no tiene guías

El promedio es una constante de negocio (R$ 75,00). Opcionalmente se puede
derivar del historial de la entidad (últimas 12 guías pagadas).

Todas las contribuciones quedan registradas como EstimatedPeriod para que
`is_estimated` sea auditable.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.domain.models.annual_filing import AnnualFiling
from src.domain.models.diagnostic_snapshot import EstimatedPeriod
from src.domain.models.periodic_obligation import ObligationStatus, PeriodicObligation
from src.domain.ports.diagnostic_narrator import DiagnosticNarrator

DEFAULT_AVERAGE_PERIOD_AMOUNT = Decimal("75.00")
"""Valor promedio histórico de una guía DAS del MEI."""

MONTHS_PER_YEAR = 12
HISTORY_WINDOW = 12
"""Cantidad de guías pagadas recientes usadas con estimate_from_history."""

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class DebtEstimate:
    """Resultado del estimador."""

    total_debt: Decimal
    """Deuda total (vencida + estimada), redondeada a centavos."""

    estimated_periods: list[EstimatedPeriod] = field(default_factory=list)
    """Detalle de cada año estimado."""

    @property
    def is_estimated(self) -> bool:
        return bool(self.estimated_periods)


class DebtEstimator:
    """Calcula la deuda total con la proyección heurística por año."""

    def __init__(
        self,
        average_period_amount: Decimal = DEFAULT_AVERAGE_PERIOD_AMOUNT,
        estimate_from_history: bool = False,
    ) -> None:
        """
        Args:
            average_period_amount: Monto promedio de una guía.
            estimate_from_history: Si es True, el promedio se calcula con las
                                   últimas guías pagadas de la entidad (cae
                                   al promedio fijo si no hay ninguna).
        """
        if average_period_amount < Decimal("0"):
            raise ValueError(f"El monto promedio no puede ser negativo: {average_period_amount}")
        self._average = average_period_amount
        self._from_history = estimate_from_history

    def estimate(
        self,
        obligations: list[PeriodicObligation],
        filings: list[AnnualFiling],
        today: date,
        narrator: DiagnosticNarrator,
    ) -> DebtEstimate:
        """Calcula la deuda total.

        Args:
            obligations: Guías ya clasificadas.
            filings: Declaraciones ya clasificadas.
            today: Fecha de hoy (define el año actual y los meses transcurridos).
            narrator: Narrador de la corrida actual.

        Returns:
            DebtEstimate con el total y los periodos estimados.
        """
        base = sum(
            (o.amount for o in obligations if o.counts_as_debt),
            Decimal("0"),
        )

        records_per_year = Counter(o.year for o in obligations if o.year is not None)
        pending_years = sorted({f.year for f in filings if f.is_pending})
        current_year = today.year
        average = self._average_amount(obligations)

        marked: list[tuple[int, int]] = []

        # Años pasados: 12 meses si no hay ninguna guía del año.
        for year in pending_years:
            if year >= current_year:
                continue
            existing = records_per_year.get(year, 0)
            if existing:
                narrator.log_estimation_skipped(year, existing)
                continue
            marked.append((year, MONTHS_PER_YEAR))

        # Año actual: estimación parcial solo si la DASN del año anterior
        # está pendiente y todavía no hay guías del año.
        previous_pending = (current_year - 1) in pending_years
        current_count = records_per_year.get(current_year, 0)
        if previous_pending and current_count == 0:
            marked.append((current_year, today.month))

        estimated: list[EstimatedPeriod] = []
        for year, months in marked:
            if months <= 0:
                continue
            amount = (average * months).quantize(_CENTS, rounding=ROUND_HALF_UP)
            estimated.append(EstimatedPeriod(year=year, months=months, amount=amount))
            narrator.log_estimation_added(year, months, amount)

        total = base + sum((p.amount for p in estimated), Decimal("0"))
        return DebtEstimate(
            total_debt=total.quantize(_CENTS, rounding=ROUND_HALF_UP),
            estimated_periods=estimated,
        )

    def _average_amount(self, obligations: list[PeriodicObligation]) -> Decimal:
        """Promedio de la guía: fijo, o derivado del historial si se pidió."""
        if not self._from_history:
            return self._average

        paid = [
            o
            for o in obligations
            if o.derived_status is ObligationStatus.PAID and o.amount_valid and o.amount > 0
        ]
        # Las guías ya vienen ordenadas por vencimiento descendente.
        recent = paid[:HISTORY_WINDOW]
        if not recent:
            return self._average

        total = sum((o.amount for o in recent), Decimal("0"))
        return (total / len(recent)).quantize(_CENTS, rounding=ROUND_HALF_UP)
