"""
Adaptador de salida: Almacén de snapshots en archivos JSON.

Guarda el último snapshot de cada CNPJ en dos lugares:
- Un diccionario en memoria (lecturas rápidas dentro del proceso).
- Un archivo JSON por CNPJ en `cache_dir`: fiscal_cache_<dígitos>.json

La escritura es un reemplazo completo y atómico: se escribe un archivo
temporal en el mismo directorio y se renombra con os.replace. Un lector
nunca ve un snapshot a medio escribir.

Un archivo ilegible (JSON roto, campos faltantes) se trata como ausencia:
se borra y load() devuelve None.
"""

import json
import os
import tempfile
import threading
from pathlib import Path

from src.domain.exceptions import OutputError, PersistenceCorrupt
from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.ports.snapshot_store import SnapshotStore
from src.domain.shared.cnpj import normalize_cnpj

KEY_PREFIX = "fiscal_cache_"


def cache_key(entity_id: str) -> str:
    """Clave determinista del snapshot: prefijo + dígitos del CNPJ.

    Ejemplos:
        >>> cache_key("12.345.678/0001-90")
        'fiscal_cache_12345678000190'
    """
    return f"{KEY_PREFIX}{normalize_cnpj(entity_id, strict=False)}"


class JsonFileSnapshotStore(SnapshotStore):
    """SnapshotStore respaldado por archivos JSON locales."""

    def __init__(self, cache_dir: Path) -> None:
        """
        Args:
            cache_dir: Directorio de los archivos. Se crea al primer save().
        """
        self._cache_dir = Path(cache_dir)
        self._memory: dict[str, DiagnosticSnapshot] = {}
        self._lock = threading.Lock()

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, entity_id: str) -> Path:
        return self._cache_dir / f"{cache_key(entity_id)}.json"

    def save(self, entity_id: str, snapshot: DiagnosticSnapshot) -> None:
        key = cache_key(entity_id)
        path = self._cache_dir / f"{key}.json"
        payload = json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)

        with self._lock:
            try:
                self._cache_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{key}.", suffix=".tmp", dir=self._cache_dir
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                        tmp.write(payload)
                    os.replace(tmp_name, path)
                except OSError:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise OutputError(str(path), str(e))

            self._memory[key] = snapshot

    def load(self, entity_id: str) -> DiagnosticSnapshot | None:
        key = cache_key(entity_id)
        path = self._cache_dir / f"{key}.json"

        with self._lock:
            if key in self._memory:
                return self._memory[key]
            if not path.exists():
                return None

            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                snapshot = DiagnosticSnapshot.from_dict(data, key=key)
            except (ValueError, PersistenceCorrupt):
                # JSONDecodeError y UnicodeDecodeError son ValueError
                path.unlink(missing_ok=True)
                return None

            self._memory[key] = snapshot
            return snapshot

    def purge(self, entity_id: str) -> None:
        key = cache_key(entity_id)
        with self._lock:
            self._memory.pop(key, None)
            (self._cache_dir / f"{key}.json").unlink(missing_ok=True)
