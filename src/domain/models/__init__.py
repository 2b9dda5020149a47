"""
Modelos de dominio del proyecto fiscal-diagnostic.

Todos los modelos son dataclasses inmutables (frozen=True) que representan
los datos del negocio sin dependencias externas.

Uso:
    from src.domain.models import PeriodicObligation, AnnualFiling, DiagnosticSnapshot
"""

from src.domain.models.annual_filing import AnnualFiling, FilingStatus
from src.domain.models.canonical_result import CanonicalResult
from src.domain.models.diagnostic_request import DiagnosticRequest, StrategyResponse
from src.domain.models.diagnostic_run import DiagnosticRun, RunState
from src.domain.models.diagnostic_snapshot import (
    ComplianceState,
    DiagnosticSnapshot,
    EstimatedPeriod,
)
from src.domain.models.periodic_obligation import ObligationStatus, PeriodicObligation

__all__ = [
    "AnnualFiling",
    "CanonicalResult",
    "ComplianceState",
    "DiagnosticRequest",
    "DiagnosticRun",
    "DiagnosticSnapshot",
    "EstimatedPeriod",
    "FilingStatus",
    "ObligationStatus",
    "PeriodicObligation",
    "RunState",
    "StrategyResponse",
]
