"""
Adaptador de entrada: Relay que envuelve la respuesta.

Este relay no devuelve la respuesta del webhook directamente, sino un
objeto propio:

    {
        "contents": "<cuerpo del webhook, como TEXTO>",
        "status": {"http_code": 200, ...}
    }

Hay dos niveles que validar: el status del relay (lo valida la clase base)
y el status del webhook (status.http_code). Después el texto de
"contents" se parsea como JSON.
"""

from typing import Any
from urllib.parse import urlencode

import httpx

from src.adapters.input.transport_strategies.http_strategy import (
    HttpTransportStrategy,
    parse_json_body,
)
from src.domain.exceptions import StrategyError
from src.domain.models.diagnostic_request import DiagnosticRequest, StrategyResponse

DEFAULT_WRAPPED_RELAY_URL = "https://api.allorigins.win/get"


class WrappedRelayStrategy(HttpTransportStrategy):
    """POST a través de un relay que envuelve el cuerpo en `contents`."""

    def __init__(
        self,
        client: httpx.Client,
        relay_url: str = DEFAULT_WRAPPED_RELAY_URL,
        timeout: float | None = None,
    ) -> None:
        super().__init__(client, timeout)
        self._relay_url = relay_url

    @property
    def name(self) -> str:
        return "wrapped_relay"

    def _build_url(self, request: DiagnosticRequest) -> str:
        separator = "&" if "?" in self._relay_url else "?"
        return f"{self._relay_url}{separator}{urlencode({'url': request.target_url})}"

    def _unwrap(self, status_code: int, body: Any) -> StrategyResponse:
        if not isinstance(body, dict) or "contents" not in body:
            raise StrategyError(self.name, "respuesta del relay sin 'contents'", status_code)

        inner_status = _inner_status(body)
        if inner_status is not None and not 200 <= inner_status < 300:
            raise StrategyError(self.name, "el webhook respondió con error", inner_status)

        contents = body["contents"]
        observed = inner_status if inner_status is not None else status_code
        if isinstance(contents, str):
            inner_body = parse_json_body(self.name, contents, observed)
        elif contents is None:
            raise StrategyError(self.name, "'contents' vacío", observed)
        else:
            # Algunas versiones del relay ya devuelven el objeto parseado.
            inner_body = contents

        return StrategyResponse(status_code=observed, body=inner_body)


def _inner_status(body: dict[str, Any]) -> int | None:
    status = body.get("status")
    if not isinstance(status, dict):
        return None
    code = status.get("http_code")
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    return code
