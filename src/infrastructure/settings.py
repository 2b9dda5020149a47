"""
Configuración del motor de diagnóstico.

Se lee de variables de entorno con el prefijo FISCAL_DIAGNOSTIC_ (y de un
archivo .env si existe). Los flags de la CLI tienen prioridad.

Variables:
    FISCAL_DIAGNOSTIC_WEBHOOK_URL
    FISCAL_DIAGNOSTIC_HEADER_KEY
    FISCAL_DIAGNOSTIC_IDENTITY_FIELD
    FISCAL_DIAGNOSTIC_STRATEGY_ORDER      (separadas por coma)
    FISCAL_DIAGNOSTIC_CORS_RELAY_PREFIX
    FISCAL_DIAGNOSTIC_WRAPPED_RELAY_URL
    FISCAL_DIAGNOSTIC_REQUEST_TIMEOUT_S   (vacío = sin timeout)
    FISCAL_DIAGNOSTIC_AVERAGE_PERIOD_AMOUNT
    FISCAL_DIAGNOSTIC_ESTIMATE_FROM_HISTORY
    FISCAL_DIAGNOSTIC_CACHE_DIR
"""

from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.adapters.input.transport_strategies.cors_relay import DEFAULT_CORS_RELAY_PREFIX
from src.adapters.input.transport_strategies.wrapped_relay import DEFAULT_WRAPPED_RELAY_URL
from src.domain.services.debt_estimator import DEFAULT_AVERAGE_PERIOD_AMOUNT

DEFAULT_STRATEGY_ORDER = "cors_relay,wrapped_relay,direct"


class DiagnosticSettings(BaseSettings):
    """Ajustes del motor editables por el operador."""

    webhook_url: str = Field(
        "",
        description="URL del webhook de diagnóstico. Obligatoria para correr.",
    )
    header_key: str = Field(
        "cnpj",
        description="Nombre del header HTTP que lleva el CNPJ.",
    )
    identity_field: str = Field(
        "cnpj",
        description="Campo del body JSON y parámetro de query con el CNPJ.",
    )
    strategy_order_raw: str = Field(
        DEFAULT_STRATEGY_ORDER,
        alias="FISCAL_DIAGNOSTIC_STRATEGY_ORDER",
        description="Estrategias de transporte en orden, separadas por coma.",
    )
    cors_relay_prefix: str = Field(
        DEFAULT_CORS_RELAY_PREFIX,
        description="Prefijo del relay CORS; la URL destino va codificada después.",
    )
    wrapped_relay_url: str = Field(
        DEFAULT_WRAPPED_RELAY_URL,
        description="Endpoint del relay que envuelve la respuesta en 'contents'.",
    )
    request_timeout_s: float | None = Field(
        None,
        description="Timeout por petición en segundos. None = sin timeout.",
    )
    average_period_amount: Decimal = Field(
        DEFAULT_AVERAGE_PERIOD_AMOUNT,
        ge=0,
        description="Monto promedio de una guía DAS para la estimación.",
    )
    estimate_from_history: bool = Field(
        False,
        description="Derivar el promedio de las últimas guías pagadas.",
    )
    cache_dir: Path = Field(
        Path.home() / ".fiscal_diagnostic",
        description="Directorio de los snapshots guardados.",
    )

    model_config = SettingsConfigDict(
        env_prefix="FISCAL_DIAGNOSTIC_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def strategy_order(self) -> list[str]:
        """Nombres de estrategias normalizados (minúsculas, sin vacíos)."""
        parts = (p.strip().lower() for p in self.strategy_order_raw.split(","))
        return [p for p in parts if p]
