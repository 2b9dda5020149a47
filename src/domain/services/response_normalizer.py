"""
Servicio de dominio: Normalizador de respuestas del webhook.

CONTEXTO DEL PROBLEMA:
El webhook de diagnóstico es de un tercero, no tiene contrato versionado y
ya cambió de forma varias veces. Formas observadas:

    [{"sucesso": true, "resultado": {"dAS": {...}, "dASN": {...}}}]
    {"sucesso": true, "resultado": {"dAS": {...}, "dASN": {...}}}
    {"dAS": {"anos": [...]}, "dASN": {"anos": [...]}}
    {"anos": [...]}                       ← lista genérica
    {"periodo": "Março/2024", ...}        ← una sola guía suelta

SOLUCIÓN:
Extracción por niveles. Cada nivel es una función que devuelve el valor
extraído o None; se usa el primero que responde. El objetivo es MAXIMIZAR
la extracción, no validar un esquema estricto: el motor no debe fallar solo
porque el webhook cambió el envoltorio.

Niveles de resolución del objeto:
    1. array     → primer elemento (y su "resultado" si lo tiene)
    2. envelope  → campo "resultado" / "result"
    3. bare      → el objeto tal cual

Niveles de extracción de listas (por cada lista):
    1. specific  → dAS.anos / dASN.anos (o dAS / dASN como lista)
    2. generic   → "anos", separando registros por forma
    3. single_obligation → el objeto mismo es una guía

El normalizador es puro: no modifica la entrada y dos llamadas con el
mismo cuerpo devuelven resultados iguales.
"""

import copy
from collections.abc import Callable
from typing import Any

from src.domain.exceptions import UnrecognizedShape
from src.domain.models.canonical_result import CanonicalResult

ENVELOPE_KEYS: tuple[str, ...] = ("resultado", "result")
"""Campos de envoltorio reconocidos. "resultado" es el que manda el webhook."""

PERIODIC_KEY = "dAS"
ANNUAL_KEY = "dASN"
GENERIC_LIST_KEY = "anos"

KNOWN_KEYS: frozenset[str] = frozenset({PERIODIC_KEY, ANNUAL_KEY, GENERIC_LIST_KEY, "identificacao"})
"""Si el objeto resuelto tiene alguno de estos campos, la respuesta es
reconocible aunque sus listas vengan vacías (entidad sin registros)."""

OBLIGATION_FIELDS: frozenset[str] = frozenset(
    {"periodo", "vencimento", "total", "principal", "situacao"}
)
"""Campos que identifican un registro de guía DAS."""

FILING_FIELDS: frozenset[str] = frozenset({"status", "dataApresentacao"})
"""Campos que identifican un registro de declaración DASN."""


Resolver = Callable[[Any], dict[str, Any] | None]


class ResponseNormalizer:
    """Reduce cualquier forma de respuesta conocida a un CanonicalResult."""

    def __init__(self) -> None:
        # Orden de prioridad de los niveles de resolución.
        self._resolvers: list[tuple[str, Resolver]] = [
            ("array", self._resolve_array),
            ("envelope", self._resolve_envelope),
            ("bare", self._resolve_bare),
        ]

    def normalize(self, body: Any) -> CanonicalResult:
        """Normaliza el cuerpo JSON crudo.

        Args:
            body: Cuerpo ya parseado (forma desconocida).

        Returns:
            CanonicalResult con las listas de registros crudos.

        Raises:
            UnrecognizedShape: Si no se pudo resolver un objeto o el objeto
                              no tiene ningún campo conocido ni es una guía.
        """
        body = copy.deepcopy(body)

        resolved: dict[str, Any] | None = None
        resolver_name = ""
        for name, resolver in self._resolvers:
            resolved = resolver(body)
            if resolved is not None:
                resolver_name = name
                break

        if resolved is None:
            raise UnrecognizedShape(f"se esperaba un objeto o arreglo, llegó {_describe(body)}")

        periodic, periodic_tier = self._extract_periodic(resolved)
        annual, annual_tier = self._extract_annual(resolved)

        if periodic or annual:
            tier = _join_tiers(periodic_tier, annual_tier)
            return CanonicalResult(periodic, annual, f"{resolver_name}+{tier}")

        # Último recurso: el objeto mismo es una guía suelta.
        if _looks_like_obligation(resolved):
            return CanonicalResult([resolved], [], f"{resolver_name}+single_obligation")

        if KNOWN_KEYS & resolved.keys():
            return CanonicalResult([], [], f"{resolver_name}+empty")

        raise UnrecognizedShape(
            f"ninguna lista de registros en los campos {sorted(resolved.keys())[:10]}"
        )

    # =================================================================
    # Niveles de resolución del objeto
    # =================================================================

    @staticmethod
    def _resolve_array(body: Any) -> dict[str, Any] | None:
        """Formato 1: [{"resultado": {...}}] o [{...}]."""
        if not isinstance(body, list) or not body:
            return None
        first = body[0]
        if not isinstance(first, dict):
            return None
        inner = _envelope_of(first)
        return inner if inner is not None else first

    @staticmethod
    def _resolve_envelope(body: Any) -> dict[str, Any] | None:
        """Formato 2: {"resultado": {...}}."""
        if not isinstance(body, dict):
            return None
        return _envelope_of(body)

    @staticmethod
    def _resolve_bare(body: Any) -> dict[str, Any] | None:
        """Formato 3: el objeto mismo es el resultado."""
        return body if isinstance(body, dict) else None

    # =================================================================
    # Niveles de extracción de listas
    # =================================================================

    def _extract_periodic(self, resolved: dict[str, Any]) -> tuple[list[dict[str, Any]], str]:
        specific = _list_under(resolved, PERIODIC_KEY)
        if specific:
            return specific, "specific"
        generic = [r for r in _generic_list(resolved) if _looks_like_obligation(r)]
        if generic:
            return generic, "generic"
        return [], ""

    def _extract_annual(self, resolved: dict[str, Any]) -> tuple[list[dict[str, Any]], str]:
        specific = _list_under(resolved, ANNUAL_KEY)
        if specific:
            return specific, "specific"
        generic = [r for r in _generic_list(resolved) if _looks_like_filing(r)]
        if generic:
            return generic, "generic"
        return [], ""


# ============================================================
# FUNCIONES INTERNAS (prefijo _ = no exportadas)
# ============================================================


def _envelope_of(obj: dict[str, Any]) -> dict[str, Any] | None:
    for key in ENVELOPE_KEYS:
        inner = obj.get(key)
        if isinstance(inner, dict) and inner:
            return inner
    return None


def _records(value: Any) -> list[dict[str, Any]]:
    """Filtra una lista dejando solo los registros que son objetos."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _list_under(resolved: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Lee `key.anos`, o `key` directamente si ya es una lista."""
    section = resolved.get(key)
    if isinstance(section, dict):
        return _records(section.get(GENERIC_LIST_KEY))
    return _records(section)


def _generic_list(resolved: dict[str, Any]) -> list[dict[str, Any]]:
    return _records(resolved.get(GENERIC_LIST_KEY))


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _looks_like_obligation(record: dict[str, Any]) -> bool:
    """Una guía tiene al menos un campo de guía con valor."""
    return any(_has_value(record.get(f)) for f in OBLIGATION_FIELDS)


def _looks_like_filing(record: dict[str, Any]) -> bool:
    """Una declaración tiene año y no tiene campos de guía.

    Sin este filtro, una lista genérica de guías se duplicaría como
    declaraciones pendientes y dispararía estimaciones falsas.
    """
    if _looks_like_obligation(record):
        return False
    return "ano" in record or any(f in record for f in FILING_FIELDS)


def _join_tiers(periodic_tier: str, annual_tier: str) -> str:
    tiers = [t for t in (periodic_tier, annual_tier) if t]
    unique = list(dict.fromkeys(tiers))
    return "/".join(unique)


def _describe(body: Any) -> str:
    if isinstance(body, list):
        return "un arreglo vacío" if not body else "un arreglo sin objetos"
    return type(body).__name__
