"""
Modelo de dominio: Petición de diagnóstico y respuesta de una estrategia.

¿Por qué el CNPJ va en tres lugares (query, body y header)?
Porque el webhook es de un tercero y, según la versión y el relay por el
que pasa, lee el identificador del header, del query string o del body.
Algunos proxies eliminan headers personalizados; mandar los tres hace que
cualquier implementación lo encuentre.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


@dataclass(frozen=True)
class DiagnosticRequest:
    """Descripción del recurso a consultar, independiente del transporte."""

    webhook_url: str
    """URL base del webhook configurado."""

    entity_id: str
    """CNPJ normalizado (solo dígitos)."""

    header_name: str = "cnpj"
    """Nombre del header que lleva el CNPJ. Configurable por el operador."""

    identity_field: str = "cnpj"
    """Nombre del campo en el body JSON y del parámetro de query."""

    @property
    def target_url(self) -> str:
        """URL del webhook con el CNPJ agregado como parámetro de query.

        Respeta los parámetros que la URL configurada ya tuviera.
        """
        parts = urlsplit(self.webhook_url)
        query = [(k, v) for k, v in parse_qsl(parts.query) if k != self.identity_field]
        query.append((self.identity_field, self.entity_id))
        return urlunsplit(parts._replace(query=urlencode(query)))

    @property
    def payload(self) -> dict[str, str]:
        """Body JSON: {"<identity_field>": "<cnpj>"}."""
        return {self.identity_field: self.entity_id}

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.header_name:
            headers[self.header_name] = self.entity_id
        return headers

    def __post_init__(self) -> None:
        """Validaciones al crear la instancia."""
        if not self.webhook_url:
            raise ValueError("La URL del webhook no puede estar vacía")
        if not self.entity_id.isdigit():
            raise ValueError(f"El CNPJ debe estar normalizado a dígitos: '{self.entity_id}'")


@dataclass(frozen=True)
class StrategyResponse:
    """Respuesta exitosa de una estrategia de transporte."""

    status_code: int
    """Status HTTP observado (del relay o del webhook)."""

    body: Any
    """Cuerpo JSON ya parseado. Su forma es desconocida hasta normalizar."""
