from datetime import date

import pytest

from infra.calendario import CalendarioRRule, periodo_desde_config, regla_abreviada
from logic.fechas import (
    CalendarioAgotado,
    ajustar_dia_habil,
    calcular_fechas_esperadas,
    fecha_esperada_anterior,
    proxima_fecha_desde_hoy,
    proxima_fecha_esperada,
)
from logic.modelos import Direccion

MIERCOLES = date(2021, 12, 1)
JUEVES = date(2021, 12, 2)
VIERNES = date(2021, 12, 3)
SABADO = date(2021, 12, 4)
DOMINGO = date(2021, 12, 5)
LUNES = date(2021, 12, 6)
MARTES = date(2021, 12, 7)


class CalendarioDiario:
    """Todos los días son vencimiento."""

    def siguiente(self, fecha):
        return fecha

    def anterior(self, fecha):
        return fecha


def mensual_22(inicio=date(2021, 1, 22)):
    return CalendarioRRule([regla_abreviada([22, "Day", 1, "Month"], inicio)], inicio)


@pytest.mark.parametrize("entrada", [MIERCOLES, JUEVES, VIERNES, LUNES, MARTES])
def test_dia_habil_sin_cambios(entrada):
    assert ajustar_dia_habil(entrada, Direccion.ADELANTE) == entrada
    assert ajustar_dia_habil(entrada, Direccion.ATRAS) == entrada


def test_fin_de_semana_hacia_adelante_pasa_al_lunes():
    assert ajustar_dia_habil(SABADO, Direccion.ADELANTE) == LUNES
    assert ajustar_dia_habil(DOMINGO, Direccion.ADELANTE) == LUNES


def test_fin_de_semana_hacia_atras_pasa_al_viernes():
    assert ajustar_dia_habil(SABADO, Direccion.ATRAS) == VIERNES
    assert ajustar_dia_habil(DOMINGO, Direccion.ATRAS) == VIERNES


@pytest.mark.parametrize("desde, esperado", [
    (MIERCOLES, JUEVES),
    (JUEVES, VIERNES),
    (VIERNES, LUNES),
    (SABADO, LUNES),
    (DOMINGO, LUNES),
    (LUNES, MARTES),
    (MARTES, date(2021, 12, 8)),
])
def test_proxima_fecha_diaria(desde, esperado):
    assert proxima_fecha_esperada(desde, CalendarioDiario()) == esperado


def test_proxima_fecha_no_repite_la_fecha_de_partida():
    assert proxima_fecha_esperada(date(2021, 2, 22), mensual_22()) == date(2021, 3, 22)


def test_fecha_anterior_se_ajusta_hacia_atras():
    # 2021-05-22 es sábado
    assert fecha_esperada_anterior(date(2021, 5, 31), mensual_22()) == date(2021, 5, 21)
    assert fecha_esperada_anterior(date(2021, 6, 22), mensual_22()) == date(2021, 6, 22)
    assert fecha_esperada_anterior(SABADO, CalendarioDiario()) == VIERNES


def test_proxima_fecha_desde_hoy():
    assert proxima_fecha_desde_hoy(mensual_22(), hoy=date(2021, 4, 30)) == date(2021, 5, 24)


def test_fechas_esperadas_mensuales_con_fin_de_semana():
    fechas = calcular_fechas_esperadas(date(2021, 1, 22), mensual_22(), hoy=date(2021, 6, 30))
    assert fechas == [
        date(2021, 1, 22),
        date(2021, 2, 22),
        date(2021, 3, 22),
        date(2021, 4, 22),
        date(2021, 5, 24),
        date(2021, 6, 22),
    ]


def test_fechas_esperadas_incluye_hoy():
    fechas = calcular_fechas_esperadas(date(2021, 1, 22), mensual_22(), hoy=date(2021, 3, 22))
    assert fechas[-1] == date(2021, 3, 22)


def test_primera_fecha_futura_devuelve_vacio():
    inicio = date(2030, 1, 22)
    assert calcular_fechas_esperadas(inicio, mensual_22(inicio), hoy=date(2021, 6, 30)) == []


def test_primera_fecha_se_incluye_tal_cual():
    inicio = date(2021, 1, 20)
    fechas = calcular_fechas_esperadas(inicio, mensual_22(inicio), hoy=date(2021, 2, 28))
    assert fechas == [date(2021, 1, 20), date(2021, 1, 22), date(2021, 2, 22)]


def test_fechas_esperadas_ordenadas_y_sin_repetidos():
    fechas = calcular_fechas_esperadas(MIERCOLES, CalendarioDiario(), hoy=date(2021, 12, 31))
    assert fechas == sorted(set(fechas))
    assert SABADO not in fechas and DOMINGO not in fechas


def test_regla_finita_corta_la_enumeracion():
    inicio = date(2021, 1, 1)
    cal = periodo_desde_config("FREQ=MONTHLY;COUNT=2;BYMONTHDAY=22", inicio)
    fechas = calcular_fechas_esperadas(inicio, cal, hoy=date(2021, 12, 31))
    assert fechas == [date(2021, 1, 1), date(2021, 1, 22), date(2021, 2, 22)]


def test_regla_agotada_antes_de_la_primera_fecha():
    cal = periodo_desde_config("FREQ=MONTHLY;COUNT=1;BYMONTHDAY=22", date(2021, 1, 1))
    with pytest.raises(CalendarioAgotado):
        calcular_fechas_esperadas(date(2021, 3, 1), cal, hoy=date(2021, 12, 31))
