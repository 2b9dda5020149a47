"""
Tests para src.domain.shared.money

Cada caso de prueba viene de un formato real visto en el webhook:
- "R$ 1.234,56"  → formato estándar de "total"
- "75,00"        → sin símbolo (versiones viejas del webhook)
- 75.0           → número JSON (algunas versiones)
- "R$\xa075,00"  → espacio no separable del formateador pt-BR
"""

from decimal import Decimal

import pytest

from src.domain.shared.money import (
    format_money,
    parse_money,
    parse_money_safe,
)


class TestParseMoney:
    """Pruebas para parse_money (versión estricta, lanza excepciones)."""

    # --- Formato brasileño ---

    def test_monto_con_simbolo_y_miles(self):
        assert parse_money("R$ 1.234,56") == Decimal("1234.56")

    def test_monto_sin_simbolo(self):
        assert parse_money("75,00") == Decimal("75.00")

    def test_monto_millones(self):
        assert parse_money("R$ 1.234.567,89") == Decimal("1234567.89")

    def test_monto_cero(self):
        assert parse_money("R$ 0,00") == Decimal("0.00")

    def test_espacio_no_separable(self):
        assert parse_money("R$\xa075,00") == Decimal("75.00")

    def test_espacios_alrededor(self):
        assert parse_money("  R$ 80,90  ") == Decimal("80.90")

    def test_negativo(self):
        assert parse_money("-R$ 10,00") == Decimal("-10.00")

    # --- Números JSON ---

    def test_entero(self):
        assert parse_money(75) == Decimal("75")

    def test_float_sin_errores_de_redondeo(self):
        assert parse_money(80.9) == Decimal("80.9")

    def test_decimal_pasa_tal_cual(self):
        assert parse_money(Decimal("12.34")) == Decimal("12.34")

    # --- Errores ---

    def test_texto_vacio_lanza_error(self):
        with pytest.raises(ValueError, match="vacío"):
            parse_money("   ")

    def test_texto_no_numerico_lanza_error(self):
        with pytest.raises(ValueError):
            parse_money("Liquidado")

    def test_solo_simbolo_lanza_error(self):
        with pytest.raises(ValueError):
            parse_money("R$")

    def test_bool_lanza_type_error(self):
        with pytest.raises(TypeError):
            parse_money(True)

    def test_none_lanza_type_error(self):
        with pytest.raises(TypeError):
            parse_money(None)

    def test_infinito_lanza_error(self):
        with pytest.raises(ValueError, match="no finito"):
            parse_money("Infinity")

    @pytest.mark.parametrize(
        "valor", [float("nan"), float("inf"), float("-inf"), Decimal("NaN")]
    )
    def test_numero_no_finito_lanza_error(self, valor):
        # json.loads acepta NaN y convierte 1e400 en inf
        with pytest.raises(ValueError, match="no finito"):
            parse_money(valor)


class TestParseMoneySafe:
    """Pruebas para parse_money_safe (retorna 0 ante errores)."""

    def test_monto_valido(self):
        assert parse_money_safe("R$ 1.234,56") == Decimal("1234.56")

    @pytest.mark.parametrize("valor", [None, "", "-", "N/A", "basura"])
    def test_valores_vacios_o_invalidos_dan_cero(self, valor):
        assert parse_money_safe(valor) == Decimal("0")


class TestFormatMoney:
    def test_miles(self):
        assert format_money(Decimal("1234567.89")) == "R$ 1.234.567,89"

    def test_cero(self):
        assert format_money(Decimal("0")) == "R$ 0,00"

    def test_redondea_a_centavos(self):
        assert format_money(Decimal("75")) == "R$ 75,00"

    def test_negativo(self):
        assert format_money(Decimal("-10.5")) == "-R$ 10,50"

