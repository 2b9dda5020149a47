"""
Modelo de dominio: Corrida de diagnóstico.

Cada corrida recorre una máquina de estados:

    idle → fetching → normalizing → classifying → estimating → complete
      └──────┴────────────┴─────────────┴─────────────┴──→ failed

`complete` y `failed` son terminales para esa corrida. No hay reintento
en el lugar: una corrida nueva empieza otra máquina desde `idle`.
"""

from dataclasses import dataclass, field
from enum import Enum

from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot


class RunState(str, Enum):
    """Estados de una corrida."""

    IDLE = "idle"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    CLASSIFYING = "classifying"
    ESTIMATING = "estimating"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETE, RunState.FAILED)


_SUCCESS_PATH: dict[RunState, RunState] = {
    RunState.IDLE: RunState.FETCHING,
    RunState.FETCHING: RunState.NORMALIZING,
    RunState.NORMALIZING: RunState.CLASSIFYING,
    RunState.CLASSIFYING: RunState.ESTIMATING,
    RunState.ESTIMATING: RunState.COMPLETE,
}


def advance(current: RunState, target: RunState) -> RunState:
    """Valida y aplica una transición.

    Se permite el siguiente paso del camino exitoso, o `failed` desde
    cualquier estado no terminal.

    Raises:
        ValueError: Si la transición no es válida.
    """
    if current.is_terminal:
        raise ValueError(f"La corrida ya terminó en '{current.value}'")
    if target is RunState.FAILED or _SUCCESS_PATH.get(current) is target:
        return target
    raise ValueError(f"Transición inválida: {current.value} → {target.value}")


@dataclass(frozen=True)
class DiagnosticRun:
    """Resultado de una corrida, exitosa o no."""

    token: int
    """Token monótono de la corrida. Solo el más reciente escribe en el store."""

    entity_id: str
    """CNPJ normalizado."""

    state: RunState
    """Estado terminal: COMPLETE o FAILED."""

    snapshot: DiagnosticSnapshot | None = None
    """Snapshot calculado. None si la corrida falló."""

    error: str = ""
    """Mensaje para el usuario cuando la corrida falló."""

    error_type: str = ""
    """Nombre de la excepción que causó la falla (ej. 'UpstreamUnavailable')."""

    failed_at: RunState | None = None
    """Paso en el que falló la corrida."""

    log_lines: list[str] = field(default_factory=list)
    """Narración completa de la corrida."""

    elapsed_seconds: float = 0.0
    """Duración de la corrida. Solo para mostrar."""

    applied: bool = False
    """True si el snapshot se escribió en el store. False si falló o si
    otra corrida más reciente ya había empezado (resultado obsoleto)."""

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.COMPLETE

    def __post_init__(self) -> None:
        """Validaciones al crear la instancia."""
        if not self.state.is_terminal:
            raise ValueError(f"DiagnosticRun requiere un estado terminal: {self.state.value}")
        if self.state is RunState.COMPLETE and self.snapshot is None:
            raise ValueError("Una corrida completa debe tener snapshot")
