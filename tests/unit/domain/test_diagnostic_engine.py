"""
Tests para FiscalDiagnosticEngine.

Se usan estrategias falsas (sin red) para controlar exactamente qué
cuerpo llega al motor, y un store real en un directorio temporal.
"""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.adapters.output.narrators.memory_narrator import MemoryNarrator
from src.adapters.output.stores.json_file_store import JsonFileSnapshotStore
from src.domain.exceptions import StrategyError
from src.domain.models.annual_filing import FilingStatus
from src.domain.models.diagnostic_request import DiagnosticRequest, StrategyResponse
from src.domain.models.diagnostic_run import RunState
from src.domain.models.diagnostic_snapshot import ComplianceState, DiagnosticSnapshot
from src.domain.models.periodic_obligation import ObligationStatus
from src.domain.ports.transport_strategy import TransportStrategy
from src.domain.services.debt_estimator import DebtEstimator
from src.domain.services.diagnostic_engine import FiscalDiagnosticEngine
from src.domain.services.obligation_classifier import ObligationClassifier
from src.domain.services.response_normalizer import ResponseNormalizer
from src.domain.services.strategy_transport import StrategyTransport

CNPJ = "12.345.678/0001-90"
CNPJ_DIGITOS = "12345678000190"
AHORA = datetime(2024, 6, 15, 10, 0, 0)
WEBHOOK = "https://hook.exemplo/webhook/fiscal"


class FakeStrategy(TransportStrategy):
    """Estrategia que devuelve un cuerpo fijo o lanza StrategyError."""

    def __init__(self, name: str, body=None, error: str | None = None, on_attempt=None):
        self._name = name
        self._body = body
        self._error = error
        self._on_attempt = on_attempt
        self.requests: list[DiagnosticRequest] = []

    @property
    def name(self) -> str:
        return self._name

    def attempt(self, request: DiagnosticRequest) -> StrategyResponse:
        self.requests.append(request)
        if self._on_attempt is not None:
            callback, self._on_attempt = self._on_attempt, None
            callback()
        if self._error is not None:
            raise StrategyError(self._name, self._error, 502)
        return StrategyResponse(status_code=200, body=self._body)


def _body_escenario_a(situacao="Liquidado", vencimento="20/04/2024") -> dict:
    return {
        "dAS": {
            "anos": [
                {
                    "periodo": "Março/2024",
                    "vencimento": vencimento,
                    "total": "R$ 75,00",
                    "situacao": situacao,
                }
            ]
        },
        "dASN": {"anos": []},
    }


def _engine(strategies, store, webhook_url=WEBHOOK) -> FiscalDiagnosticEngine:
    return FiscalDiagnosticEngine(
        transport=StrategyTransport(strategies),
        normalizer=ResponseNormalizer(),
        classifier=ObligationClassifier(),
        estimator=DebtEstimator(),
        store=store,
        narrator_factory=lambda: MemoryNarrator(clock=lambda: AHORA),
        webhook_url=webhook_url,
        clock=lambda: AHORA,
    )


@pytest.fixture
def store(tmp_path) -> JsonFileSnapshotStore:
    return JsonFileSnapshotStore(tmp_path)


class TestEscenarios:
    def test_escenario_a_guia_pagada(self, store):
        engine = _engine([FakeStrategy("direct", _body_escenario_a())], store)

        run = engine.run(CNPJ)

        assert run.state is RunState.COMPLETE
        [guia] = run.snapshot.periodic_obligations
        assert guia.derived_status is ObligationStatus.PAID
        assert run.snapshot.total_debt == Decimal("0")
        assert run.snapshot.compliance_state is ComplianceState.REGULAR
        assert run.applied

    def test_escenario_b_guia_vencida(self, store):
        body = _body_escenario_a(situacao="", vencimento="15/06/2023")
        engine = _engine([FakeStrategy("direct", body)], store)

        run = engine.run(CNPJ)

        [guia] = run.snapshot.periodic_obligations
        assert guia.derived_status is ObligationStatus.OVERDUE
        assert run.snapshot.total_debt == Decimal("75.00")
        assert run.snapshot.compliance_state is ComplianceState.IRREGULAR
        assert not run.snapshot.is_estimated

    def test_escenario_c_dasn_pendiente_sin_guias(self, store):
        body = {"dAS": {"anos": []}, "dASN": {"anos": [{"ano": "2023", "status": None}]}}
        engine = _engine([FakeStrategy("direct", body)], store)

        run = engine.run(CNPJ)

        snapshot = run.snapshot
        [dasn] = snapshot.annual_filings
        assert dasn.derived_status is FilingStatus.PENDING
        assert snapshot.is_estimated
        meses = {p.year: p.months for p in snapshot.estimated_periods}
        assert meses[2023] == 12
        # 2023 pendiente y 2024 sin guías: junio suma 6 meses parciales
        assert meses[2024] == 6
        assert snapshot.total_debt == Decimal("75.00") * 18
        assert snapshot.pending_filing_count == 1

    def test_escenario_d_todas_las_estrategias_fallan(self, store):
        previo = _engine([FakeStrategy("direct", _body_escenario_a())], store).run(CNPJ)
        assert previo.applied

        engine = _engine(
            [
                FakeStrategy("cors_relay", error="cuerpo no es JSON"),
                FakeStrategy("wrapped_relay", error="cuerpo no es JSON"),
                FakeStrategy("direct", error="cuerpo no es JSON"),
            ],
            store,
        )
        run = engine.run(CNPJ)

        assert run.state is RunState.FAILED
        assert run.error_type == "UpstreamUnavailable"
        assert run.failed_at is RunState.FETCHING
        assert run.snapshot is None
        assert not run.applied
        assert store.load(CNPJ) == previo.snapshot


class TestFallasDeLaCorrida:
    def test_forma_no_reconocida(self, store):
        engine = _engine([FakeStrategy("direct", {"message": "Workflow was started"})], store)
        run = engine.run(CNPJ)
        assert run.state is RunState.FAILED
        assert run.error_type == "UnrecognizedShape"
        assert run.failed_at is RunState.NORMALIZING
        assert store.load(CNPJ) is None

    def test_cnpj_invalido(self, store):
        strategy = FakeStrategy("direct", _body_escenario_a())
        run = _engine([strategy], store).run("abc")
        assert run.error_type == "InvalidEntityId"
        assert run.failed_at is RunState.IDLE
        assert strategy.requests == []

    def test_cnpj_con_longitud_incorrecta(self, store):
        run = _engine([FakeStrategy("direct", _body_escenario_a())], store).run("123")
        assert run.error_type == "InvalidEntityId"

    def test_sin_webhook_configurado(self, store):
        run = _engine([FakeStrategy("direct", _body_escenario_a())], store, webhook_url="").run(CNPJ)
        assert run.error_type == "ConfigurationError"

    def test_narracion_de_la_falla(self, store):
        engine = _engine([FakeStrategy("direct", error="timeout")], store)
        run = engine.run(CNPJ)
        assert any("Todas as tentativas falharam." in line for line in run.log_lines)

    @pytest.mark.parametrize("total", ["NaN", "1e400", "-Infinity"])
    def test_total_no_finito_no_aborta_la_corrida(self, store, total):
        # json.loads acepta NaN/Infinity y convierte 1e400 en inf
        body = json.loads(
            '{"dAS": {"anos": ['
            f'{{"periodo": "Março/2024", "vencimento": "20/04/2024", "total": {total}, "situacao": ""}},'
            '{"periodo": "Fevereiro/2024", "vencimento": "20/03/2024", "total": "R$ 75,00", "situacao": ""}'
            ']}, "dASN": {"anos": [{"ano": "2022", "status": null}]}}'
        )
        engine = _engine([FakeStrategy("direct", body)], store)

        run = engine.run(CNPJ)

        assert run.state is RunState.COMPLETE
        marzo, febrero = run.snapshot.periodic_obligations
        assert not marzo.amount_valid
        assert marzo.amount == Decimal("0")
        assert febrero.amount_valid
        # 75 vencidos + 12 meses estimados de 2022
        assert run.snapshot.total_debt == Decimal("975.00")
        assert any("ilegível" in line for line in run.log_lines)


class TestPeticion:
    def test_cnpj_normalizado_en_la_peticion(self, store):
        strategy = FakeStrategy("direct", _body_escenario_a())
        _engine([strategy], store).run(CNPJ)
        [request] = strategy.requests
        assert request.entity_id == CNPJ_DIGITOS
        assert request.target_url == f"{WEBHOOK}?cnpj={CNPJ_DIGITOS}"

    def test_usa_la_primera_estrategia_exitosa(self, store):
        primera = FakeStrategy("cors_relay", error="502")
        segunda = FakeStrategy("wrapped_relay", _body_escenario_a())
        tercera = FakeStrategy("direct", _body_escenario_a())
        run = _engine([primera, segunda, tercera], store).run(CNPJ)
        assert run.succeeded
        assert tercera.requests == []


class TestNarracion:
    def test_lineas_con_hora(self, store):
        run = _engine([FakeStrategy("direct", _body_escenario_a())], store).run(CNPJ)
        assert run.log_lines
        assert all(line.startswith("[10:00:00] ") for line in run.log_lines)

    def test_pasos_narrados_en_orden(self, store):
        run = _engine([FakeStrategy("direct", _body_escenario_a())], store).run(CNPJ)
        texto = "\n".join(run.log_lines)
        orden = [
            "Conectando via: direct...",
            "Resposta recebida (Status: 200).",
            "Estrutura reconhecida: bare+specific.",
            "Encontrados 1 registros DAS e 0 declarações DASN.",
            "Resultados salvos localmente.",
        ]
        posiciones = [texto.index(fragmento) for fragmento in orden]
        assert posiciones == sorted(posiciones)

    def test_cada_corrida_tiene_su_propia_narracion(self, store):
        engine = _engine([FakeStrategy("direct", _body_escenario_a())], store)
        primera = engine.run(CNPJ)
        segunda = engine.run(CNPJ)
        assert len(primera.log_lines) == len(segunda.log_lines)
        assert "execução #1" in primera.log_lines[0]
        assert "execução #2" in segunda.log_lines[0]


class TestTokens:
    def test_tokens_crecientes(self, store):
        engine = _engine([FakeStrategy("direct", _body_escenario_a())], store)
        assert engine.latest_token == 0
        assert engine.run(CNPJ).token == 1
        assert engine.run(CNPJ).token == 2
        assert engine.latest_token == 2

    def test_resultado_obsoleto_se_descarta(self, store):
        """Una corrida que termina después de que empezó otra no escribe."""
        cuerpo_viejo = _body_escenario_a(situacao="", vencimento="15/06/2023")
        cuerpo_nuevo = _body_escenario_a()
        holder: dict = {}
        lenta = FakeStrategy("cors_relay", cuerpo_viejo)
        engine = _engine([lenta], store)

        def lanzar_corrida_nueva():
            # La corrida vieja sigue "esperando" al webhook mientras la
            # nueva empieza, termina y guarda.
            lenta._body = cuerpo_nuevo
            holder["nueva"] = engine.run(CNPJ)
            lenta._body = cuerpo_viejo

        lenta._on_attempt = lanzar_corrida_nueva

        vieja = engine.run(CNPJ)
        nueva = holder["nueva"]

        assert nueva.token == 2 and nueva.applied
        assert vieja.token == 1 and vieja.succeeded and not vieja.applied
        assert any("descartado" in line for line in vieja.log_lines)
        guardado = store.load(CNPJ)
        assert guardado.total_debt == Decimal("0")


class TestCache:
    def test_load_cached_sin_datos(self, store):
        engine = _engine([FakeStrategy("direct", _body_escenario_a())], store)
        assert engine.load_cached(CNPJ) is None

    def test_load_cached_despues_de_correr(self, store):
        engine = _engine([FakeStrategy("direct", _body_escenario_a())], store)
        run = engine.run(CNPJ)
        narrator = MemoryNarrator(clock=lambda: AHORA)
        cached = engine.load_cached(CNPJ_DIGITOS, narrator=narrator)
        assert isinstance(cached, DiagnosticSnapshot)
        assert cached == run.snapshot
        assert narrator.lines == ["[10:00:00] Dados carregados do cache local."]

    def test_snapshot_calculado_con_el_reloj(self, store):
        run = _engine([FakeStrategy("direct", _body_escenario_a())], store).run(CNPJ)
        assert run.snapshot.computed_at == AHORA
        assert run.snapshot.periodic_obligations[0].due_date == date(2024, 4, 20)
