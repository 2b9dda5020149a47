"""
Adaptador de entrada: Base de las estrategias HTTP.

Todas las estrategias hacen lo mismo (un POST con el CNPJ en query, body y
header) y solo cambian la URL a la que llaman y cómo interpretan la
respuesta. Esta clase concentra la parte común:

1. Ejecutar el POST con httpx (sin reintentos).
2. Convertir cualquier error de red a StrategyError.
3. Validar que el status sea 2xx.
4. Parsear el cuerpo como JSON.

Las subclases implementan `_build_url` y, si hace falta, `_unwrap`.

¿Por qué un httpx.Client compartido?
Reutiliza conexiones entre estrategias y corridas, y en tests se reemplaza
el transporte con respx sin tocar las estrategias.
"""

import json
from abc import abstractmethod
from typing import Any

import httpx

from src.domain.exceptions import StrategyError
from src.domain.models.diagnostic_request import DiagnosticRequest, StrategyResponse
from src.domain.ports.transport_strategy import TransportStrategy


class HttpTransportStrategy(TransportStrategy):
    """Estrategia base sobre httpx.Client."""

    def __init__(self, client: httpx.Client, timeout: float | None = None) -> None:
        """
        Args:
            client: Cliente httpx compartido.
            timeout: Segundos de espera por petición. None = sin límite.
        """
        self._client = client
        self._timeout = timeout

    @abstractmethod
    def _build_url(self, request: DiagnosticRequest) -> str:
        """URL final a la que se hace el POST."""
        ...

    def _unwrap(self, status_code: int, body: Any) -> StrategyResponse:
        """Interpreta el cuerpo ya parseado. Por defecto lo deja tal cual."""
        return StrategyResponse(status_code=status_code, body=body)

    def attempt(self, request: DiagnosticRequest) -> StrategyResponse:
        try:
            url = self._build_url(request)
            response = self._client.post(
                url,
                json=request.payload,
                headers=request.headers,
                timeout=self._timeout,
            )
        except (httpx.InvalidURL, ValueError) as e:
            # URL del webhook mal configurada: urlsplit o httpx la rechazan
            raise StrategyError(self.name, f"URL inválida: {e}")
        except httpx.HTTPError as e:
            raise StrategyError(self.name, f"error de red: {type(e).__name__}: {e}")

        if not response.is_success:
            raise StrategyError(self.name, "status fuera de 2xx", response.status_code)

        body = parse_json_body(self.name, response.text, response.status_code)
        return self._unwrap(response.status_code, body)


def parse_json_body(strategy: str, text: str, status_code: int | None) -> Any:
    """Parsea un texto JSON o lanza StrategyError con el status observado."""
    if not text or not text.strip():
        raise StrategyError(strategy, "cuerpo vacío", status_code)
    try:
        return json.loads(text)
    except ValueError as e:
        raise StrategyError(strategy, f"cuerpo no es JSON: {e}", status_code)
