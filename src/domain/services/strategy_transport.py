"""
Servicio de dominio: Transporte con estrategias de respaldo.

El webhook de diagnóstico no siempre es alcanzable por el mismo camino:
a veces el relay CORS está caído, a veces el relay que envuelve la
respuesta devuelve basura, a veces la llamada directa es bloqueada.

Este servicio prueba una lista ORDENADA de estrategias, una sola vez cada
una, y devuelve el cuerpo de la primera que responde bien. No hay
reintentos ni backoff exponencial: el usuario vuelve a lanzar la corrida
si todas fallan.
"""

import json
from collections.abc import Sequence
from typing import Any

from src.domain.exceptions import StrategyError, UpstreamUnavailable
from src.domain.models.diagnostic_request import DiagnosticRequest
from src.domain.ports.diagnostic_narrator import DiagnosticNarrator
from src.domain.ports.transport_strategy import TransportStrategy
from src.domain.shared.text_cleaner import preview


class StrategyTransport:
    """Recorre las estrategias en orden y se queda con la primera exitosa.

    Recibe las estrategias por constructor (Dependency Injection): no sabe
    si son relays, llamadas directas o dobles de prueba.
    """

    def __init__(self, strategies: Sequence[TransportStrategy]) -> None:
        """
        Args:
            strategies: Estrategias en orden de prioridad.
        """
        if not strategies:
            raise ValueError("StrategyTransport requiere al menos una estrategia")
        self._strategies = list(strategies)

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def fetch(self, request: DiagnosticRequest, narrator: DiagnosticNarrator) -> Any:
        """Obtiene el cuerpo JSON de la primera estrategia exitosa.

        Args:
            request: Recurso a consultar.
            narrator: Narrador de la corrida actual.

        Returns:
            Cuerpo JSON parseado (forma desconocida).

        Raises:
            UpstreamUnavailable: Si ninguna estrategia tuvo éxito. Lleva el
                                último error observado.
        """
        last_error: Exception | None = None

        for strategy in self._strategies:
            narrator.log_strategy_attempt(strategy.name)

            try:
                response = strategy.attempt(request)
            except StrategyError as e:
                narrator.log_strategy_failed(strategy.name, e)
                last_error = e
                continue  # Probar siguiente estrategia

            narrator.log_strategy_response(strategy.name, response.status_code)
            narrator.log_body_preview(_preview_body(response.body))
            return response.body

        raise UpstreamUnavailable(request.entity_id, last_error, len(self._strategies))


def _preview_body(body: Any) -> str:
    """Extracto del cuerpo para la narración (máx. 100 caracteres)."""
    try:
        text = json.dumps(body, ensure_ascii=False)
    except (TypeError, ValueError):
        text = repr(body)
    return preview(text, 100)
