"""
Puerto de salida: Escritor del reporte de diagnóstico.

Define el contrato para escribir un snapshot en algún formato persistente
para entregarlo al usuario (Excel hoy).

¿Por qué es un puerto de SALIDA?
Porque el motor no decide NI conoce el formato del reporte. Solo produce
un DiagnosticSnapshot y lo pasa a quien implemente este puerto.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot


class OutputWriter(ABC):
    """Interfaz para escribir el reporte de un diagnóstico."""

    @abstractmethod
    def write_snapshot(
        self, entity_id: str, snapshot: DiagnosticSnapshot, output_path: Path
    ) -> Path:
        """Escribe el reporte de un snapshot.

        Args:
            entity_id: CNPJ al que pertenece el snapshot.
            snapshot: Snapshot a reportar.
            output_path: Ruta donde crear el archivo de salida.

        Returns:
            Ruta real del archivo creado (puede diferir si se añadió extensión).

        Raises:
            OutputError: Si falla la escritura (permisos, disco lleno, etc.)
        """
        ...
