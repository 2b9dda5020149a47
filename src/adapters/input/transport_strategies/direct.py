"""
Adaptador de entrada: Llamada directa al webhook.

Sin relay. Es la última opción del orden por defecto porque desde un
navegador suele bloquearla CORS; desde la CLI normalmente funciona.
"""

from src.adapters.input.transport_strategies.http_strategy import HttpTransportStrategy
from src.domain.models.diagnostic_request import DiagnosticRequest


class DirectStrategy(HttpTransportStrategy):
    """POST directo a la URL del webhook."""

    @property
    def name(self) -> str:
        return "direct"

    def _build_url(self, request: DiagnosticRequest) -> str:
        return request.target_url
