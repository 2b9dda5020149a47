"""
Puerto de entrada: Estrategia de transporte.

Define el contrato de UNA forma de llegar al webhook de diagnóstico.
Hay una estrategia por cada camino de red:

    TransportStrategy (interfaz)
    ├── CorsRelayStrategy      → relay CORS que reenvía la petición tal cual
    ├── WrappedRelayStrategy   → relay que envuelve la respuesta en {contents}
    └── DirectStrategy         → llamada directa al webhook

El StrategyTransport recorre una lista ordenada de estas estrategias y se
queda con la primera que responde. Agregar un camino nuevo = agregar una
clase y registrarla; el orquestador no cambia.
"""

from abc import ABC, abstractmethod

from src.domain.models.diagnostic_request import DiagnosticRequest, StrategyResponse


class TransportStrategy(ABC):
    """Interfaz para un intento de transporte."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Nombre legible de la estrategia. Para la narración y el registro.

        Ejemplo: 'cors_relay', 'wrapped_relay', 'direct'
        """
        ...

    @abstractmethod
    def attempt(self, request: DiagnosticRequest) -> StrategyResponse:
        """Ejecuta un único intento (sin reintentos).

        Args:
            request: Recurso a consultar.

        Returns:
            StrategyResponse con el status HTTP y el cuerpo JSON parseado.

        Raises:
            StrategyError: Si el status no es 2xx, el cuerpo no es JSON, un
                          paso de desenvoltura falla o hay error de red.
                          El error lleva el status observado cuando existe.
        """
        ...
