"""
Servicio de dominio: Motor de diagnóstico fiscal.

Orquesta una corrida completa ("run diagnostic"):
1. Normaliza el CNPJ y arma la DiagnosticRequest.
2. Obtiene el cuerpo por el StrategyTransport           (fetching)
3. Lo reduce a un CanonicalResult                       (normalizing)
4. Clasifica guías y declaraciones                      (classifying)
5. Calcula la deuda total con la estimación             (estimating)
6. Guarda el snapshot, si la corrida sigue vigente      (complete)

Cualquier DiagnosticBaseError en los pasos 1-5 termina la corrida en
`failed` con el motivo capturado; el snapshot guardado no se toca.

¿Por qué un token por corrida?
Las peticiones no tienen timeout ni cancelación: si el usuario lanza una
corrida nueva mientras la anterior sigue esperando al webhook, ambas pueden
terminar. Cada corrida recibe un token creciente y solo la que tenga el
token MÁS RECIENTE escribe en el store. Las demás se narran como
descartadas. Así la corrida vieja nunca pisa el resultado de la nueva.
"""

import threading
import time
from collections.abc import Callable
from datetime import datetime

from src.domain.exceptions import ConfigurationError, DiagnosticBaseError, OutputError
from src.domain.models.diagnostic_request import DiagnosticRequest
from src.domain.models.diagnostic_run import DiagnosticRun, RunState, advance
from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.ports.diagnostic_narrator import DiagnosticNarrator
from src.domain.ports.snapshot_store import SnapshotStore
from src.domain.services.debt_estimator import DebtEstimator
from src.domain.services.obligation_classifier import ObligationClassifier
from src.domain.services.response_normalizer import ResponseNormalizer
from src.domain.services.strategy_transport import StrategyTransport
from src.domain.shared.cnpj import normalize_cnpj

NarratorFactory = Callable[[], DiagnosticNarrator]
Clock = Callable[[], datetime]


class FiscalDiagnosticEngine:
    """Ejecuta corridas de diagnóstico para un CNPJ.

    Recibe todas sus dependencias por constructor (Dependency Injection).
    El único estado propio es el contador de tokens.
    """

    def __init__(
        self,
        transport: StrategyTransport,
        normalizer: ResponseNormalizer,
        classifier: ObligationClassifier,
        estimator: DebtEstimator,
        store: SnapshotStore,
        narrator_factory: NarratorFactory,
        webhook_url: str,
        header_name: str = "cnpj",
        identity_field: str = "cnpj",
        clock: Clock = datetime.now,
    ) -> None:
        """
        Args:
            transport: Transporte con las estrategias ya ordenadas.
            normalizer: Normalizador de respuestas.
            classifier: Clasificador de guías y declaraciones.
            estimator: Estimador de deuda.
            store: Almacén del último snapshot por CNPJ.
            narrator_factory: Crea un narrador NUEVO por corrida.
            webhook_url: URL del webhook de diagnóstico.
            header_name: Header que lleva el CNPJ.
            identity_field: Campo del body/query que lleva el CNPJ.
            clock: Devuelve la fecha-hora local actual. Se inyecta en tests.
        """
        self._transport = transport
        self._normalizer = normalizer
        self._classifier = classifier
        self._estimator = estimator
        self._store = store
        self._narrator_factory = narrator_factory
        self._webhook_url = webhook_url
        self._header_name = header_name
        self._identity_field = identity_field
        self._clock = clock

        self._lock = threading.Lock()
        self._latest_token = 0

    @property
    def latest_token(self) -> int:
        """Último token emitido (0 si todavía no hubo corridas)."""
        with self._lock:
            return self._latest_token

    def run(self, entity_id: str) -> DiagnosticRun:
        """Ejecuta una corrida completa.

        Nunca lanza excepciones de dominio: una falla se devuelve como una
        DiagnosticRun en estado FAILED con el motivo y la narración.

        Args:
            entity_id: CNPJ con o sin máscara.

        Returns:
            DiagnosticRun terminal (COMPLETE o FAILED).
        """
        token = self._issue_token()
        narrator = self._narrator_factory()
        started = time.monotonic()
        state = RunState.IDLE
        cnpj = entity_id

        narrator.log_run_started(entity_id, token)

        try:
            cnpj = normalize_cnpj(entity_id)
            request = self._build_request(cnpj)

            state = advance(state, RunState.FETCHING)
            body = self._transport.fetch(request, narrator)

            state = advance(state, RunState.NORMALIZING)
            canonical = self._normalizer.normalize(body)
            narrator.log_shape_recognized(canonical.tier)
            narrator.log_records_found(len(canonical.periodic_raw), len(canonical.annual_raw))

            state = advance(state, RunState.CLASSIFYING)
            now = self._clock()
            today = now.date()
            obligations = self._classifier.classify_periodic(canonical.periodic_raw, today, narrator)
            filings = self._classifier.classify_annual(canonical.annual_raw, narrator)

            state = advance(state, RunState.ESTIMATING)
            estimate = self._estimator.estimate(obligations, filings, today, narrator)
            snapshot = DiagnosticSnapshot(
                periodic_obligations=obligations,
                annual_filings=filings,
                total_debt=estimate.total_debt,
                is_estimated=estimate.is_estimated,
                computed_at=now,
                estimated_periods=estimate.estimated_periods,
            )

            state = advance(state, RunState.COMPLETE)

        except DiagnosticBaseError as e:
            narrator.log_run_failed(e)
            return DiagnosticRun(
                token=token,
                entity_id=cnpj,
                state=RunState.FAILED,
                error=str(e),
                error_type=type(e).__name__,
                failed_at=state,
                log_lines=narrator.lines,
                elapsed_seconds=time.monotonic() - started,
            )

        applied = self._apply_if_latest(token, cnpj, snapshot, narrator)
        narrator.log_run_complete(snapshot.compliance_state.value, snapshot.total_debt)

        return DiagnosticRun(
            token=token,
            entity_id=cnpj,
            state=RunState.COMPLETE,
            snapshot=snapshot,
            log_lines=narrator.lines,
            elapsed_seconds=time.monotonic() - started,
            applied=applied,
        )

    def load_cached(
        self, entity_id: str, narrator: DiagnosticNarrator | None = None
    ) -> DiagnosticSnapshot | None:
        """Carga especulativa del último snapshot guardado.

        Se usa al abrir un CNPJ conocido para no mostrar un estado vacío
        mientras no haya una corrida nueva.

        Returns:
            El snapshot guardado, o None si no hay (o estaba corrupto).
        """
        snapshot = self._store.load(normalize_cnpj(entity_id, strict=False))
        if snapshot is not None and narrator is not None:
            narrator.log_cache_loaded(entity_id)
        return snapshot

    # =================================================================
    # Internos
    # =================================================================

    def _issue_token(self) -> int:
        with self._lock:
            self._latest_token += 1
            return self._latest_token

    def _build_request(self, cnpj: str) -> DiagnosticRequest:
        if not self._webhook_url or not self._webhook_url.strip():
            raise ConfigurationError("webhook_url", "no hay URL de diagnóstico configurada")
        return DiagnosticRequest(
            webhook_url=self._webhook_url.strip(),
            entity_id=cnpj,
            header_name=self._header_name,
            identity_field=self._identity_field,
        )

    def _apply_if_latest(
        self,
        token: int,
        cnpj: str,
        snapshot: DiagnosticSnapshot,
        narrator: DiagnosticNarrator,
    ) -> bool:
        """Guarda el snapshot solo si ninguna corrida posterior empezó.

        La comparación y la escritura ocurren bajo el mismo lock: entre
        ambas no puede colarse otra corrida.
        """
        with self._lock:
            latest = self._latest_token
            if token != latest:
                narrator.log_stale_result_discarded(token, latest)
                return False
            try:
                self._store.save(cnpj, snapshot)
            except OutputError as e:
                narrator.log_record_warning(f"Não foi possível salvar localmente: {e}")
                return False

        narrator.log_snapshot_saved(cnpj)
        return True
