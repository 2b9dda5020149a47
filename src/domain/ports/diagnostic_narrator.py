"""
Puerto de salida: Narrador del diagnóstico.

Define el contrato para registrar, paso a paso, qué decidió el motor
durante una corrida: qué estrategia intentó, qué status recibió, qué forma
tenía la respuesta, cuántos registros encontró, qué años estimó.

¿Por qué no usar simplemente el módulo `logging` de Python?
Porque `logging` es una herramienta de infraestructura (HOW), mientras que
este puerto define los EVENTOS de negocio (WHAT):
- "Conectando via: direct" (no "INFO: POST https://...")
- "Estimativa adicionada para 2023" (no "DEBUG: months=12")

Además la narración es parte del modelo de confianza del usuario: un
diagnóstico tarda 30-40 segundos y estas líneas son la única señal de
progreso. Cada corrida recibe su PROPIO narrador (no hay un buffer global),
así dos corridas simultáneas nunca mezclan sus líneas.

La narración es solo observabilidad: no sirve para reanudar una corrida,
solo para explicarla.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class DiagnosticNarrator(ABC):
    """Interfaz para la narración de una corrida."""

    # --- Inicio ---

    @abstractmethod
    def log_run_started(self, entity_id: str, token: int) -> None:
        """Registra el inicio de una corrida (el buffer ya está vacío)."""
        ...

    @abstractmethod
    def log_cache_loaded(self, entity_id: str) -> None:
        """Registra que se cargó un snapshot guardado."""
        ...

    # --- Transporte ---

    @abstractmethod
    def log_strategy_attempt(self, strategy_name: str) -> None:
        """Registra el intento de una estrategia, ANTES de ejecutarla."""
        ...

    @abstractmethod
    def log_strategy_response(self, strategy_name: str, status_code: int) -> None:
        """Registra el status HTTP de una estrategia exitosa."""
        ...

    @abstractmethod
    def log_strategy_failed(self, strategy_name: str, error: Exception) -> None:
        """Registra la falla de una estrategia (incluye el status si lo hubo)."""
        ...

    @abstractmethod
    def log_body_preview(self, preview: str) -> None:
        """Registra un extracto del cuerpo recibido, para debugging."""
        ...

    # --- Normalización y clasificación ---

    @abstractmethod
    def log_shape_recognized(self, tier: str) -> None:
        """Registra qué nivel de extracción resolvió la respuesta."""
        ...

    @abstractmethod
    def log_records_found(self, num_periodic: int, num_annual: int) -> None:
        """Registra cuántos registros crudos se encontraron."""
        ...

    @abstractmethod
    def log_malformed_amount(self, period: str, raw_amount: object) -> None:
        """Registra un monto ilegible (no fatal)."""
        ...

    @abstractmethod
    def log_record_warning(self, message: str) -> None:
        """Registra cualquier otra degradación por registro (fecha ilegible,
        año ausente, etc.)."""
        ...

    # --- Estimación ---

    @abstractmethod
    def log_estimation_added(self, year: int, months: int, amount: Decimal) -> None:
        """Registra la deuda estimada agregada para un año."""
        ...

    @abstractmethod
    def log_estimation_skipped(self, year: int, existing_count: int) -> None:
        """Registra que un año con DASN pendiente NO se estimó porque ya
        tiene guías (evita doble conteo)."""
        ...

    # --- Cierre ---

    @abstractmethod
    def log_snapshot_saved(self, entity_id: str) -> None:
        """Registra que el snapshot se guardó localmente."""
        ...

    @abstractmethod
    def log_stale_result_discarded(self, token: int, latest_token: int) -> None:
        """Registra que el resultado se descartó porque ya empezó otra corrida."""
        ...

    @abstractmethod
    def log_run_failed(self, error: Exception) -> None:
        """Registra la falla de la corrida."""
        ...

    @abstractmethod
    def log_run_complete(self, compliance_state: str, total_debt: Decimal) -> None:
        """Registra el fin exitoso de la corrida."""
        ...

    # --- Consulta ---

    @property
    @abstractmethod
    def lines(self) -> list[str]:
        """Copia de las líneas narradas hasta ahora, en orden."""
        ...
