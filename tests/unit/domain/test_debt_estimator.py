"""
Tests para DebtEstimator.

Los casos cubren la regla de estimación por año:
- años pasados con DASN pendiente y sin guías → 12 meses
- años con guías → no se estima (sin doble conteo)
- año actual → estimación parcial
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.adapters.output.narrators.memory_narrator import MemoryNarrator
from src.domain.models.annual_filing import AnnualFiling, FilingStatus
from src.domain.models.periodic_obligation import ObligationStatus, PeriodicObligation
from src.domain.services.debt_estimator import DebtEstimator

PROMEDIO = Decimal("75.00")


@pytest.fixture
def narrator() -> MemoryNarrator:
    return MemoryNarrator(clock=lambda: datetime(2024, 6, 15, 9, 0, 0))


def _guia(year: int, status=ObligationStatus.PAID, amount="75.00", valid=True, due=None):
    return PeriodicObligation(
        period=f"Jan/{year}",
        due_date=due or date(year, 2, 20),
        amount=Decimal(amount),
        raw_status="",
        derived_status=status,
        year=year,
        amount_valid=valid,
    )


def _dasn(year: int, status=FilingStatus.PENDING) -> AnnualFiling:
    return AnnualFiling(year=year, submitted_date=None, raw_status="", derived_status=status)


class TestDeudaBase:
    def test_suma_solo_vencidas(self, narrator):
        guias = [
            _guia(2024, ObligationStatus.OVERDUE, "75.00"),
            _guia(2024, ObligationStatus.OVERDUE, "80.90"),
            _guia(2024, ObligationStatus.PAID, "75.00"),
            _guia(2024, ObligationStatus.UPCOMING, "75.00"),
        ]
        result = DebtEstimator().estimate(guias, [], date(2024, 6, 15), narrator)
        assert result.total_debt == Decimal("155.90")
        assert not result.is_estimated

    def test_excluye_montos_invalidos(self, narrator):
        guias = [_guia(2024, ObligationStatus.OVERDUE, "0", valid=False)]
        result = DebtEstimator().estimate(guias, [], date(2024, 6, 15), narrator)
        assert result.total_debt == Decimal("0.00")

    def test_sin_datos(self, narrator):
        result = DebtEstimator().estimate([], [], date(2024, 6, 15), narrator)
        assert result.total_debt == Decimal("0")
        assert result.estimated_periods == []


class TestAniosPasados:
    def test_anio_pendiente_sin_guias_estima_12_meses(self, narrator):
        result = DebtEstimator().estimate([], [_dasn(2022)], date(2024, 6, 15), narrator)
        assert result.total_debt == 12 * PROMEDIO
        assert result.is_estimated
        [periodo] = result.estimated_periods
        assert (periodo.year, periodo.months, periodo.amount) == (2022, 12, Decimal("900.00"))
        assert any("estimativa de 12 mês(es)" in line for line in narrator.lines)

    def test_anio_pendiente_con_guias_no_estima(self, narrator):
        result = DebtEstimator().estimate(
            [_guia(2022)], [_dasn(2022)], date(2024, 6, 15), narrator
        )
        assert result.total_debt == Decimal("0")
        assert not result.is_estimated
        assert any("Estimativa não aplicada" in line for line in narrator.lines)

    @pytest.mark.parametrize("status", [FilingStatus.FILED, FilingStatus.EXEMPT])
    def test_anio_no_pendiente_no_estima(self, narrator, status):
        result = DebtEstimator().estimate([], [_dasn(2022, status)], date(2024, 6, 15), narrator)
        assert not result.is_estimated

    def test_varios_anios(self, narrator):
        result = DebtEstimator().estimate(
            [], [_dasn(2020), _dasn(2021), _dasn(2022)], date(2024, 6, 15), narrator
        )
        assert [p.year for p in result.estimated_periods] == [2020, 2021, 2022]
        assert result.total_debt == 36 * PROMEDIO


class TestAnioActual:
    def test_anterior_pendiente_y_actual_sin_guias(self, narrator):
        # 2023 pendiente → 12 meses; 2024 parcial → 6 meses (junio)
        result = DebtEstimator().estimate([], [_dasn(2023)], date(2024, 6, 15), narrator)
        meses = {p.year: p.months for p in result.estimated_periods}
        assert meses == {2023: 12, 2024: 6}
        assert result.total_debt == 18 * PROMEDIO

    def test_solo_el_actual_pendiente_no_estima(self, narrator):
        # Únicamente la DASN del año anterior habilita la estimación parcial
        result = DebtEstimator().estimate([], [_dasn(2024)], date(2024, 3, 1), narrator)
        assert result.estimated_periods == []
        assert result.total_debt == Decimal("0")
        assert not any("estimativa" in line for line in narrator.lines)

    def test_actual_con_guias_no_estima(self, narrator):
        result = DebtEstimator().estimate(
            [_guia(2024)], [_dasn(2023)], date(2024, 6, 15), narrator
        )
        meses = {p.year: p.months for p in result.estimated_periods}
        assert meses == {2023: 12}

    def test_anterior_pendiente_con_guias_igual_estima_el_actual(self, narrator):
        result = DebtEstimator().estimate(
            [_guia(2023)], [_dasn(2023)], date(2024, 2, 10), narrator
        )
        meses = {p.year: p.months for p in result.estimated_periods}
        assert meses == {2024: 2}

    def test_anio_futuro_no_se_estima(self, narrator):
        result = DebtEstimator().estimate([], [_dasn(2025)], date(2024, 6, 15), narrator)
        assert not result.is_estimated


class TestPromedio:
    def test_promedio_configurable(self, narrator):
        estimator = DebtEstimator(average_period_amount=Decimal("80.90"))
        result = estimator.estimate([], [_dasn(2022)], date(2024, 6, 15), narrator)
        assert result.total_debt == Decimal("970.80")

    def test_promedio_negativo_lanza_error(self):
        with pytest.raises(ValueError, match="negativo"):
            DebtEstimator(average_period_amount=Decimal("-1"))

    def test_promedio_del_historial(self, narrator):
        pagadas = [
            _guia(2024, amount="80.00", due=date(2024, 5, 20)),
            _guia(2024, amount="70.00", due=date(2024, 4, 22)),
        ]
        estimator = DebtEstimator(estimate_from_history=True)
        result = estimator.estimate(pagadas, [_dasn(2021)], date(2024, 6, 15), narrator)
        assert result.estimated_periods[0].amount == Decimal("900.00")

    def test_promedio_del_historial_sin_pagadas_usa_el_fijo(self, narrator):
        estimator = DebtEstimator(estimate_from_history=True)
        result = estimator.estimate([], [_dasn(2021)], date(2024, 6, 15), narrator)
        assert result.total_debt == 12 * PROMEDIO

    def test_historial_usa_solo_las_ultimas_12(self, narrator):
        recientes = [_guia(2024, amount="100.00") for _ in range(12)]
        viejas = [_guia(2023, amount="10.00") for _ in range(5)]
        estimator = DebtEstimator(estimate_from_history=True)
        result = estimator.estimate(recientes + viejas, [_dasn(2021)], date(2024, 6, 15), narrator)
        assert result.estimated_periods[0].amount == Decimal("1200.00")
