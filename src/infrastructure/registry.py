"""
Registro de estrategias de transporte y armado del motor.

Centraliza la relación nombre → estrategia. Agregar un camino de red nuevo
requiere solo 2 pasos:
1. Crear la clase XxxStrategy que implemente TransportStrategy.
2. Registrarla en create_default_registry().

El ORDEN en que se prueban no lo decide el registro sino la configuración
(strategy_order): el registro solo sabe qué estrategias existen.
"""

from collections.abc import Sequence

import httpx

from src.domain.exceptions import ConfigurationError
from src.domain.ports.transport_strategy import TransportStrategy
from src.domain.services.debt_estimator import DebtEstimator
from src.domain.services.diagnostic_engine import FiscalDiagnosticEngine, NarratorFactory
from src.domain.services.obligation_classifier import ObligationClassifier
from src.domain.services.response_normalizer import ResponseNormalizer
from src.domain.services.strategy_transport import StrategyTransport
from src.infrastructure.settings import DiagnosticSettings


class TransportStrategyRegistry:
    """Registro de estrategias de transporte disponibles."""

    def __init__(self) -> None:
        self._strategies: dict[str, TransportStrategy] = {}

    def register(self, strategy: TransportStrategy) -> None:
        """Registra una estrategia. La clave es strategy.name (minúsculas).

        Raises:
            ValueError: Si ya existe una estrategia con ese nombre.
        """
        name = strategy.name.lower()
        if name in self._strategies:
            raise ValueError(
                f"Ya existe una estrategia registrada como '{name}': "
                f"{type(self._strategies[name]).__name__}. "
                f"No se puede registrar {type(strategy).__name__}."
            )
        self._strategies[name] = strategy

    def get(self, name: str) -> TransportStrategy | None:
        return self._strategies.get(name.lower())

    def ordered(self, names: Sequence[str]) -> list[TransportStrategy]:
        """Devuelve las estrategias en el orden pedido.

        Raises:
            ConfigurationError: Si un nombre no está registrado o la lista
                                queda vacía.
        """
        ordered: list[TransportStrategy] = []
        for name in names:
            strategy = self.get(name)
            if strategy is None:
                raise ConfigurationError(
                    "strategy_order",
                    f"estrategia desconocida '{name}'. "
                    f"Disponibles: {self.available_strategies}",
                )
            if strategy not in ordered:
                ordered.append(strategy)
        if not ordered:
            raise ConfigurationError("strategy_order", "no hay estrategias configuradas")
        return ordered

    @property
    def available_strategies(self) -> list[str]:
        return sorted(self._strategies.keys())

    def __len__(self) -> int:
        return len(self._strategies)


def create_default_registry(
    settings: DiagnosticSettings, client: httpx.Client
) -> TransportStrategyRegistry:
    """Crea un registro con todas las estrategias disponibles.

    Args:
        settings: Ajustes (URLs de relays y timeout).
        client: Cliente httpx compartido por todas las estrategias.
    """
    from src.adapters.input.transport_strategies.cors_relay import CorsRelayStrategy
    from src.adapters.input.transport_strategies.direct import DirectStrategy
    from src.adapters.input.transport_strategies.wrapped_relay import WrappedRelayStrategy

    timeout = settings.request_timeout_s
    registry = TransportStrategyRegistry()
    registry.register(CorsRelayStrategy(client, settings.cors_relay_prefix, timeout))
    registry.register(WrappedRelayStrategy(client, settings.wrapped_relay_url, timeout))
    registry.register(DirectStrategy(client, timeout))
    return registry


def create_engine(
    settings: DiagnosticSettings,
    client: httpx.Client,
    narrator_factory: NarratorFactory | None = None,
) -> FiscalDiagnosticEngine:
    """Arma el motor completo a partir de la configuración.

    Este es el único lugar donde se conectan las piezas concretas.
    """
    from src.adapters.output.narrators.memory_narrator import MemoryNarrator
    from src.adapters.output.stores.json_file_store import JsonFileSnapshotStore

    registry = create_default_registry(settings, client)
    transport = StrategyTransport(registry.ordered(settings.strategy_order))

    factory: NarratorFactory = narrator_factory or MemoryNarrator

    return FiscalDiagnosticEngine(
        transport=transport,
        normalizer=ResponseNormalizer(),
        classifier=ObligationClassifier(),
        estimator=DebtEstimator(
            average_period_amount=settings.average_period_amount,
            estimate_from_history=settings.estimate_from_history,
        ),
        store=JsonFileSnapshotStore(settings.cache_dir),
        narrator_factory=factory,
        webhook_url=settings.webhook_url,
        header_name=settings.header_key,
        identity_field=settings.identity_field,
    )

