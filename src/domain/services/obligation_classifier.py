"""
Servicio de dominio: Clasificador de obligaciones.

Convierte los registros crudos del CanonicalResult en modelos de dominio
con un estado derivado:

Guías DAS (PeriodicObligation):
    1. Monto: "R$ 1.234,56" → Decimal("1234.56"). Si es ilegible, el monto
       queda en 0, se marca inválido y se narra (MalformedAmount no aborta).
    2. Vencimiento: "vencimento" dd/mm/yyyy; si no hay, se deriva del
       "periodo" (día 20 del mes siguiente, recorrido a día hábil).
    3. Estado: paid si la situación contiene "liquidado" o "pago";
       si no, overdue si vence ANTES de hoy; si no, upcoming.
    4. Orden: vencimiento descendente; empates conservan el orden original.

Declaraciones DASN (AnnualFiling):
    exempt si el status es "Não optante"; filed si es "Regular" o hay
    fecha de entrega; pending en cualquier otro caso.

Todo error por registro se recupera aquí: el clasificador degrada por
registro en lugar de tumbar el snapshot completo.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from src.domain.exceptions import MalformedAmount
from src.domain.models.annual_filing import AnnualFiling, FilingStatus
from src.domain.models.periodic_obligation import ObligationStatus, PeriodicObligation
from src.domain.ports.diagnostic_narrator import DiagnosticNarrator
from src.domain.shared.business_days import das_due_date
from src.domain.shared.date_parser import (
    parse_br_date,
    parse_flexible_date,
    parse_period_label,
    parse_year,
)
from src.domain.shared.money import parse_money, parse_money_safe
from src.domain.shared.text_cleaner import normalize_status

SETTLED_MARKERS: tuple[str, ...] = ("liquidado", "pago")
"""Si la situación contiene alguno de estos textos, la guía está pagada."""

REGULAR_STATUS = "regular"
NOT_OPTED_IN_STATUS = "nao optante"


class ObligationClassifier:
    """Clasifica guías y declaraciones a partir de registros crudos."""

    # =================================================================
    # Guías DAS
    # =================================================================

    def classify_periodic(
        self,
        records: list[dict[str, Any]],
        today: date,
        narrator: DiagnosticNarrator,
    ) -> list[PeriodicObligation]:
        """Clasifica las guías y las ordena por vencimiento descendente.

        Args:
            records: Registros crudos de guías.
            today: Fecha de hoy (medianoche local). Se inyecta para que el
                   resultado sea determinista en tests.
            narrator: Narrador de la corrida actual.

        Returns:
            Lista nueva de PeriodicObligation, una por registro.
        """
        obligations = [self._classify_one(record, today, narrator) for record in records]

        # sorted() es estable también con reverse=True: los empates
        # conservan el orden original. Las guías sin fecha van al final.
        return sorted(
            obligations,
            key=lambda o: (o.due_date is not None, o.due_date or date.min),
            reverse=True,
        )

    def _classify_one(
        self, record: dict[str, Any], today: date, narrator: DiagnosticNarrator
    ) -> PeriodicObligation:
        period = _text(record.get("periodo"))
        raw_status = _text(record.get("situacao"))

        amount, amount_valid = self._parse_amount(record, period, narrator)
        period_parts = _period_parts(period)
        due_date = self._resolve_due_date(record, period, period_parts, narrator)

        year = parse_year(record.get("ano"))
        if year is None and period_parts is not None:
            year = period_parts[0]

        status = self._derive_status(raw_status, due_date, today)
        if due_date is None and status is not ObligationStatus.PAID:
            narrator.log_record_warning(
                f"Guia '{period or '?'}' sem vencimento utilizável; classificada como a vencer."
            )

        return PeriodicObligation(
            period=period,
            due_date=due_date,
            amount=amount,
            raw_status=raw_status,
            derived_status=status,
            year=year,
            amount_valid=amount_valid,
            principal=_optional_money(record.get("principal")),
            fine=_optional_money(record.get("multa")),
            interest=_optional_money(record.get("juros")),
        )

    @staticmethod
    def _parse_amount(
        record: dict[str, Any], period: str, narrator: DiagnosticNarrator
    ) -> tuple[Decimal, bool]:
        """Lee "total" (o "principal" si no hay total).

        Returns:
            (monto, es_valido). Un monto ilegible o negativo devuelve
            (Decimal("0"), False).
        """
        raw = record.get("total")
        if not _present(raw):
            raw = record.get("principal")

        try:
            if not _present(raw):
                raise MalformedAmount(raw, period)
            try:
                amount = parse_money(raw)
            except (TypeError, ValueError, ArithmeticError):
                raise MalformedAmount(raw, period)
            if amount < Decimal("0"):
                raise MalformedAmount(raw, period)
        except MalformedAmount:
            narrator.log_malformed_amount(period, raw)
            return Decimal("0"), False

        return amount, True

    @staticmethod
    def _resolve_due_date(
        record: dict[str, Any],
        period: str,
        period_parts: tuple[int, int] | None,
        narrator: DiagnosticNarrator,
    ) -> date | None:
        """Prefiere "vencimento"; si falta o es ilegible, deriva del periodo."""
        raw_due = record.get("vencimento")
        if isinstance(raw_due, str) and raw_due.strip():
            try:
                return parse_br_date(raw_due)
            except ValueError:
                narrator.log_record_warning(
                    f"Vencimento ilegível '{raw_due}' na guia '{period or '?'}'; "
                    f"usando o período."
                )

        if period_parts is None:
            return None
        year, month = period_parts
        return das_due_date(year, month)

    @staticmethod
    def _derive_status(raw_status: str, due_date: date | None, today: date) -> ObligationStatus:
        situacao = raw_status.lower()
        if any(marker in situacao for marker in SETTLED_MARKERS):
            return ObligationStatus.PAID
        if due_date is not None and due_date < today:
            return ObligationStatus.OVERDUE
        return ObligationStatus.UPCOMING

    # =================================================================
    # Declaraciones DASN
    # =================================================================

    def classify_annual(
        self, records: list[dict[str, Any]], narrator: DiagnosticNarrator
    ) -> list[AnnualFiling]:
        """Clasifica las declaraciones anuales.

        Los registros sin año utilizable se narran y se omiten: sin año no
        se pueden relacionar con las guías ni estimar.
        """
        filings: list[AnnualFiling] = []
        for record in records:
            year = parse_year(record.get("ano"))
            if year is None:
                narrator.log_record_warning(
                    f"Declaração sem ano válido ignorada: {record.get('ano')!r}"
                )
                continue
            filings.append(self._classify_filing(year, record))
        return filings

    @staticmethod
    def _classify_filing(year: int, record: dict[str, Any]) -> AnnualFiling:
        raw_status = _text(record.get("status"))
        raw_submitted = record.get("dataApresentacao")
        has_submission = _present(raw_submitted)

        submitted_date: date | None = None
        if isinstance(raw_submitted, str) and raw_submitted.strip():
            try:
                submitted_date = parse_flexible_date(raw_submitted)
            except ValueError:
                submitted_date = None

        status = normalize_status(raw_status)
        if status == NOT_OPTED_IN_STATUS:
            derived = FilingStatus.EXEMPT
        elif status == REGULAR_STATUS or has_submission:
            derived = FilingStatus.FILED
        else:
            derived = FilingStatus.PENDING

        return AnnualFiling(
            year=year,
            submitted_date=submitted_date,
            raw_status=raw_status,
            derived_status=derived,
        )


# ============================================================
# FUNCIONES INTERNAS (prefijo _ = no exportadas)
# ============================================================


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _text(value: Any) -> str:
    """Convierte un campo libre a texto; None → ''."""
    if value is None:
        return ""
    return str(value).strip()


def _period_parts(period: str) -> tuple[int, int] | None:
    if not period:
        return None
    try:
        return parse_period_label(period)
    except ValueError:
        return None


def _optional_money(value: Any) -> Decimal | None:
    if not _present(value):
        return None
    return parse_money_safe(value)
