"""
Puertos (interfaces) del dominio.

Los puertos definen QUÉ necesita el dominio, sin decir CÓMO se implementa.
Cada puerto tiene uno o más adaptadores que lo implementan.

Uso:
    from src.domain.ports import TransportStrategy, SnapshotStore, DiagnosticNarrator
"""

from src.domain.ports.diagnostic_narrator import DiagnosticNarrator
from src.domain.ports.output_writer import OutputWriter
from src.domain.ports.snapshot_store import SnapshotStore
from src.domain.ports.transport_strategy import TransportStrategy

__all__ = [
    "DiagnosticNarrator",
    "OutputWriter",
    "SnapshotStore",
    "TransportStrategy",
]
