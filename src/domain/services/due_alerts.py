"""
Servicio de dominio: Alertas de vencimiento.

A partir de un snapshot arma los recordatorios que ve el usuario:
- Una alerta de prioridad alta por cada DASN pendiente.
- La PRIMERA guía DAS no pagada cuyo vencimiento cae dentro de ±3 días
  de hoy (vence pronto, vence hoy o venció hace poco).

No envía nada: la entrega de notificaciones es de otro sistema.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.models.periodic_obligation import ObligationStatus
from src.domain.shared.money import format_money

DEFAULT_WINDOW_DAYS = 3


class AlertPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class DueAlert:
    """Recordatorio derivado de un snapshot."""

    kind: str
    """'dasn_pending' o 'das_due'."""

    title: str
    message: str
    priority: AlertPriority

    due_date: date | None = None
    """Vencimiento de la guía. None para las declaraciones."""


def build_due_alerts(
    snapshot: DiagnosticSnapshot,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[DueAlert]:
    """Arma las alertas de un snapshot.

    Args:
        snapshot: Snapshot del diagnóstico.
        today: Fecha de referencia.
        window_days: Días hacia adelante y hacia atrás que cuentan como
                     "vencimiento cercano".

    Returns:
        Primero las declaraciones pendientes (por año), después la guía.
    """
    alerts: list[DueAlert] = []

    for filing in sorted(snapshot.annual_filings, key=lambda f: f.year):
        if not filing.is_pending:
            continue
        alerts.append(
            DueAlert(
                kind="dasn_pending",
                title=f"DASN {filing.year} pendente",
                message=f"A declaração anual de {filing.year} ainda não foi entregue.",
                priority=AlertPriority.HIGH,
            )
        )

    for obligation in snapshot.periodic_obligations:
        if obligation.derived_status is ObligationStatus.PAID or obligation.due_date is None:
            continue
        delta = (obligation.due_date - today).days
        if abs(delta) > window_days:
            continue

        if delta > 0:
            message = f"Vence em {delta} dia(s)"
        elif delta == 0:
            message = "Vence hoje"
        else:
            message = f"Venceu há {-delta} dia(s)"
        alerts.append(
            DueAlert(
                kind="das_due",
                title=f"DAS {obligation.period}",
                message=f"{message}: {format_money(obligation.amount)}",
                priority=AlertPriority.HIGH if delta <= 0 else AlertPriority.MEDIUM,
                due_date=obligation.due_date,
            )
        )
        break

    return alerts
