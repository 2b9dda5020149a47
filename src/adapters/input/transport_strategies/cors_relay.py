"""
Adaptador de entrada: Relay CORS.

El relay reenvía la petición tal cual y devuelve la respuesta del webhook
sin envolverla:

    POST https://corsproxy.io/?<url del webhook codificada>
"""

from urllib.parse import quote

import httpx

from src.adapters.input.transport_strategies.http_strategy import HttpTransportStrategy
from src.domain.models.diagnostic_request import DiagnosticRequest

DEFAULT_CORS_RELAY_PREFIX = "https://corsproxy.io/?"


class CorsRelayStrategy(HttpTransportStrategy):
    """POST a través de un relay que antepone su prefijo a la URL destino."""

    def __init__(
        self,
        client: httpx.Client,
        relay_prefix: str = DEFAULT_CORS_RELAY_PREFIX,
        timeout: float | None = None,
    ) -> None:
        super().__init__(client, timeout)
        self._relay_prefix = relay_prefix

    @property
    def name(self) -> str:
        return "cors_relay"

    def _build_url(self, request: DiagnosticRequest) -> str:
        return f"{self._relay_prefix}{quote(request.target_url, safe='')}"
