"""
Tests para ObligationClassifier.

`today` siempre se fija explícitamente: la clasificación vencida/a vencer
depende de la fecha y los tests deben ser deterministas.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.adapters.output.narrators.memory_narrator import MemoryNarrator
from src.domain.models.annual_filing import FilingStatus
from src.domain.models.periodic_obligation import ObligationStatus
from src.domain.services.obligation_classifier import ObligationClassifier

HOY = date(2024, 6, 15)


@pytest.fixture
def classifier() -> ObligationClassifier:
    return ObligationClassifier()


@pytest.fixture
def narrator() -> MemoryNarrator:
    return MemoryNarrator(clock=lambda: datetime(2024, 6, 15, 9, 0, 0))


def _guia(**campos) -> dict:
    base = {
        "periodo": "Março/2024",
        "vencimento": "20/04/2024",
        "total": "R$ 75,00",
        "situacao": "",
    }
    base.update(campos)
    return base


class TestEstadoDeGuias:
    @pytest.mark.parametrize("situacao", ["Liquidado", "LIQUIDADO", "Pago", "pago parcialmente", "Pago em 10/05/2024"])
    def test_marcador_de_pago_gana_sobre_vencimiento(self, classifier, narrator, situacao):
        [guia] = classifier.classify_periodic(
            [_guia(situacao=situacao, vencimento="20/04/2020")], HOY, narrator
        )
        assert guia.derived_status is ObligationStatus.PAID

    def test_vencida(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(situacao="Devedor")], HOY, narrator)
        assert guia.derived_status is ObligationStatus.OVERDUE
        assert guia.counts_as_debt

    def test_vence_hoy_es_a_vencer(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(vencimento="15/06/2024")], HOY, narrator)
        assert guia.derived_status is ObligationStatus.UPCOMING

    def test_futura(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(vencimento="20/07/2024")], HOY, narrator)
        assert guia.derived_status is ObligationStatus.UPCOMING


class TestMontos:
    def test_monto_brasileno(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(total="R$ 1.234,56")], HOY, narrator)
        assert guia.amount == Decimal("1234.56")
        assert guia.amount_valid

    def test_numero_json(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(total=80.9)], HOY, narrator)
        assert guia.amount == Decimal("80.9")

    def test_sin_total_usa_principal(self, classifier, narrator):
        [guia] = classifier.classify_periodic(
            [_guia(total=None, principal="R$ 70,60")], HOY, narrator
        )
        assert guia.amount == Decimal("70.60")
        assert guia.principal == Decimal("70.60")

    def test_monto_ilegible_no_aborta(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(total="R$ abc")], HOY, narrator)
        assert guia.amount == Decimal("0")
        assert not guia.amount_valid
        assert not guia.counts_as_debt
        assert any("ilegível" in line for line in narrator.lines)

    def test_monto_negativo_es_invalido(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(total="-R$ 5,00")], HOY, narrator)
        assert guia.amount == Decimal("0")
        assert not guia.amount_valid

    @pytest.mark.parametrize("total", [float("nan"), float("inf"), float("-inf")])
    def test_monto_no_finito_es_invalido(self, classifier, narrator, total):
        [guia] = classifier.classify_periodic(
            [_guia(total=total, principal=float("nan"))], HOY, narrator
        )
        assert guia.amount == Decimal("0")
        assert not guia.amount_valid
        assert guia.principal == Decimal("0")
        assert any("ilegível" in line for line in narrator.lines)

    def test_desglose(self, classifier, narrator):
        [guia] = classifier.classify_periodic(
            [_guia(principal="R$ 70,60", multa="R$ 1,41", juros="R$ 0,99")], HOY, narrator
        )
        assert guia.fine == Decimal("1.41")
        assert guia.interest == Decimal("0.99")

    def test_registro_con_monto_ilegible_se_conserva(self, classifier, narrator):
        guias = classifier.classify_periodic(
            [_guia(), _guia(periodo="Abril/2024", total="???")], HOY, narrator
        )
        assert len(guias) == 2


class TestVencimientos:
    def test_sin_vencimiento_se_deriva_del_periodo(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(vencimento=None)], HOY, narrator)
        # 20/04/2024 sábado, 21 Tiradentes → 22
        assert guia.due_date == date(2024, 4, 22)

    def test_vencimiento_ilegible_usa_el_periodo(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(vencimento="em breve")], HOY, narrator)
        assert guia.due_date == date(2024, 4, 22)
        assert any("Vencimento ilegível" in line for line in narrator.lines)

    def test_sin_fecha_utilizable_es_a_vencer(self, classifier, narrator):
        [guia] = classifier.classify_periodic(
            [_guia(periodo="???", vencimento="")], HOY, narrator
        )
        assert guia.due_date is None
        assert guia.derived_status is ObligationStatus.UPCOMING
        assert any("sem vencimento" in line for line in narrator.lines)

    def test_anio_del_campo_ano(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia(ano="2023")], HOY, narrator)
        assert guia.year == 2023

    def test_anio_del_periodo(self, classifier, narrator):
        [guia] = classifier.classify_periodic([_guia()], HOY, narrator)
        assert guia.year == 2024


class TestOrden:
    def test_vencimiento_descendente(self, classifier, narrator):
        guias = classifier.classify_periodic(
            [
                _guia(periodo="Jan/2024", vencimento="20/02/2024"),
                _guia(periodo="Mar/2024", vencimento="22/04/2024"),
                _guia(periodo="Fev/2024", vencimento="20/03/2024"),
            ],
            HOY,
            narrator,
        )
        assert [g.period for g in guias] == ["Mar/2024", "Fev/2024", "Jan/2024"]

    def test_empates_conservan_orden_original(self, classifier, narrator):
        guias = classifier.classify_periodic(
            [_guia(periodo="A"), _guia(periodo="B"), _guia(periodo="C")], HOY, narrator
        )
        assert [g.period for g in guias] == ["A", "B", "C"]

    def test_sin_fecha_al_final(self, classifier, narrator):
        guias = classifier.classify_periodic(
            [_guia(periodo="X", vencimento=None), _guia(periodo="Março/2024")], HOY, narrator
        )
        assert [g.period for g in guias] == ["Março/2024", "X"]

    def test_lista_vacia(self, classifier, narrator):
        assert classifier.classify_periodic([], HOY, narrator) == []


class TestDeclaraciones:
    def test_regular_es_entregada(self, classifier, narrator):
        [dasn] = classifier.classify_annual([{"ano": "2023", "status": "Regular"}], narrator)
        assert dasn.derived_status is FilingStatus.FILED

    def test_fecha_de_entrega_es_entregada(self, classifier, narrator):
        [dasn] = classifier.classify_annual(
            [{"ano": 2023, "status": None, "dataApresentacao": "31/05/2024"}], narrator
        )
        assert dasn.derived_status is FilingStatus.FILED
        assert dasn.submitted_date == date(2024, 5, 31)

    @pytest.mark.parametrize("status", ["Não optante", "NAO OPTANTE", "não  optante"])
    def test_no_optante_es_exenta(self, classifier, narrator, status):
        [dasn] = classifier.classify_annual([{"ano": "2022", "status": status}], narrator)
        assert dasn.derived_status is FilingStatus.EXEMPT

    def test_no_optante_gana_sobre_fecha(self, classifier, narrator):
        [dasn] = classifier.classify_annual(
            [{"ano": "2022", "status": "Não optante", "dataApresentacao": "01/05/2023"}],
            narrator,
        )
        assert dasn.derived_status is FilingStatus.EXEMPT

    @pytest.mark.parametrize("status", [None, "", "Pendente"])
    def test_sin_status_es_pendiente(self, classifier, narrator, status):
        [dasn] = classifier.classify_annual([{"ano": "2023", "status": status}], narrator)
        assert dasn.derived_status is FilingStatus.PENDING
        assert dasn.is_pending

    def test_fecha_ilegible_igual_cuenta_como_entregada(self, classifier, narrator):
        [dasn] = classifier.classify_annual(
            [{"ano": "2023", "dataApresentacao": "ontem"}], narrator
        )
        assert dasn.derived_status is FilingStatus.FILED
        assert dasn.submitted_date is None

    def test_sin_anio_se_omite(self, classifier, narrator):
        filings = classifier.classify_annual([{"status": "Regular"}, {"ano": "2023"}], narrator)
        assert [f.year for f in filings] == [2023]
        assert any("sem ano" in line for line in narrator.lines)
