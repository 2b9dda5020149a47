"""
Puerto de salida: Almacén del último snapshot.

Guarda UN snapshot por CNPJ (el más reciente). No hay historial, ni
expiración, ni versiones: una corrida exitosa nueva lo sobrescribe.

¿Por qué un puerto? Porque el motor no decide dónde vive el snapshot.
Hoy es un archivo JSON local; en la app web era localStorage; en tests es
un diccionario en memoria.
"""

from abc import ABC, abstractmethod

from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot


class SnapshotStore(ABC):
    """Interfaz para guardar y recuperar el último snapshot por CNPJ."""

    @abstractmethod
    def save(self, entity_id: str, snapshot: DiagnosticSnapshot) -> None:
        """Reemplaza completo el snapshot de la entidad.

        Args:
            entity_id: CNPJ, con o sin máscara. La clave se deriva de sus dígitos.
            snapshot: Snapshot a guardar.
        """
        ...

    @abstractmethod
    def load(self, entity_id: str) -> DiagnosticSnapshot | None:
        """Devuelve el snapshot guardado, o None si no existe.

        Un snapshot corrupto se trata como ausencia (y se purga), nunca
        como error.
        """
        ...

    @abstractmethod
    def purge(self, entity_id: str) -> None:
        """Elimina el snapshot de la entidad, si existe."""
        ...
