"""
Adaptador de salida: Narrador en memoria.

Acumula líneas "[HH:MM:SS] mensaje" en una lista propia de la corrida.
Es la implementación que consume la superficie de presentación (y los
tests): el buffer nace vacío con cada instancia, y el motor crea una
instancia por corrida.

Los mensajes están en portugués porque son texto de producto: el usuario
final es un MEI brasileño.
"""

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from src.domain.exceptions import StrategyError, UpstreamUnavailable
from src.domain.ports.diagnostic_narrator import DiagnosticNarrator
from src.domain.shared.cnpj import format_cnpj
from src.domain.shared.money import format_money


class MemoryNarrator(DiagnosticNarrator):
    """Narrador que guarda las líneas en memoria."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._lines: list[str] = []

    def _emit(self, message: str) -> None:
        self._lines.append(f"[{self._clock():%H:%M:%S}] {message}")

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    # --- Inicio ---

    def log_run_started(self, entity_id: str, token: int) -> None:
        self._emit(f"Iniciando diagnóstico fiscal para {format_cnpj(entity_id)} (execução #{token})...")

    def log_cache_loaded(self, entity_id: str) -> None:
        self._emit("Dados carregados do cache local.")

    # --- Transporte ---

    def log_strategy_attempt(self, strategy_name: str) -> None:
        self._emit(f"Conectando via: {strategy_name}...")

    def log_strategy_response(self, strategy_name: str, status_code: int) -> None:
        self._emit(f"Resposta recebida (Status: {status_code}).")

    def log_strategy_failed(self, strategy_name: str, error: Exception) -> None:
        if isinstance(error, StrategyError):
            status, causa = error.status_code, error.causa
        else:
            status, causa = None, str(error)
        suffix = f" (Status: {status})" if status is not None else ""
        self._emit(f"Falha em {strategy_name}{suffix}: {causa}")

    def log_body_preview(self, preview: str) -> None:
        self._emit(f"Prévia da resposta: {preview}")

    # --- Normalización y clasificación ---

    def log_shape_recognized(self, tier: str) -> None:
        self._emit(f"Estrutura reconhecida: {tier}.")

    def log_records_found(self, num_periodic: int, num_annual: int) -> None:
        self._emit(f"Encontrados {num_periodic} registros DAS e {num_annual} declarações DASN.")

    def log_malformed_amount(self, period: str, raw_amount: object) -> None:
        self._emit(f"Aviso: valor ilegível {raw_amount!r} na guia '{period or '?'}'; considerado R$ 0,00.")

    def log_record_warning(self, message: str) -> None:
        self._emit(f"Aviso: {message}")

    # --- Estimación ---

    def log_estimation_added(self, year: int, months: int, amount: Decimal) -> None:
        self._emit(
            f"DASN {year} pendente sem guias: estimativa de {months} mês(es) "
            f"adicionada ({format_money(amount)})."
        )

    def log_estimation_skipped(self, year: int, existing_count: int) -> None:
        self._emit(
            f"Aviso: DASN {year} pendente, mas já existem {existing_count} guia(s) "
            f"para o ano. Estimativa não aplicada."
        )

    # --- Cierre ---

    def log_snapshot_saved(self, entity_id: str) -> None:
        self._emit("Resultados salvos localmente.")

    def log_stale_result_discarded(self, token: int, latest_token: int) -> None:
        self._emit(
            f"Resultado da execução #{token} descartado: a execução #{latest_token} é mais recente."
        )

    def log_run_failed(self, error: Exception) -> None:
        if isinstance(error, UpstreamUnavailable):
            self._emit("Todas as tentativas falharam.")
        self._emit(f"Falha no diagnóstico: {error}")

    def log_run_complete(self, compliance_state: str, total_debt: Decimal) -> None:
        situacao = "REGULAR" if compliance_state == "regular" else "IRREGULAR"
        self._emit(f"Diagnóstico concluído: {situacao}, dívida total {format_money(total_debt)}.")
