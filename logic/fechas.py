from __future__ import annotations
from datetime import date, timedelta
from typing import Optional, Protocol

from logic.modelos import Direccion


SABADO, DOMINGO = 5, 6


class ErrorCalendario(ValueError):
    """Período mal configurado o regla sin ocurrencias en el rango consultado."""


class CalendarioAgotado(ErrorCalendario):
    """La regla ya no tiene vencimientos posteriores a la fecha consultada."""


class Calendario(Protocol):
    """Regla recurrente de vencimientos (mensual, n-ésimo día hábil, uniones, etc.).

    - `siguiente(fecha)`: primera ocurrencia en `fecha` o después.
    - `anterior(fecha)`: última ocurrencia en `fecha` o antes.

    Ambos lanzan `ErrorCalendario` si no hay ocurrencia en ese sentido;
    `siguiente` lanza en particular `CalendarioAgotado`.
    """

    def siguiente(self, fecha: date) -> date: ...

    def anterior(self, fecha: date) -> date: ...


def ajustar_dia_habil(fecha: date, direccion: Direccion = Direccion.ADELANTE) -> date:
    """Mueve una fecha que cae en fin de semana al día hábil más cercano.

    - ADELANTE: sábado y domingo pasan al lunes siguiente.
    - ATRAS: sábado y domingo pasan al viernes anterior.
    """
    dia = fecha.weekday()
    if direccion is Direccion.ADELANTE:
        if dia == SABADO:
            return fecha + timedelta(days=2)
        if dia == DOMINGO:
            return fecha + timedelta(days=1)
    else:
        if dia == SABADO:
            return fecha - timedelta(days=1)
        if dia == DOMINGO:
            return fecha - timedelta(days=2)
    return fecha


def proxima_fecha_esperada(desde: date, calendario: Calendario) -> date:
    # +1 día: `desde` ya está consumida aunque sea una ocurrencia válida
    d = calendario.siguiente(desde + timedelta(days=1))
    # los extractos salen después del fin de semana, no antes
    return ajustar_dia_habil(d, Direccion.ADELANTE)


def fecha_esperada_anterior(desde: date, calendario: Calendario) -> date:
    d = calendario.anterior(desde)
    return ajustar_dia_habil(d, Direccion.ATRAS)


def proxima_fecha_desde_hoy(calendario: Calendario, hoy: Optional[date] = None) -> date:
    return proxima_fecha_esperada(hoy or date.today(), calendario)


def fecha_anterior_desde_hoy(calendario: Calendario, hoy: Optional[date] = None) -> date:
    return fecha_esperada_anterior(hoy or date.today(), calendario)


def calcular_fechas_esperadas(
    primera: date,
    calendario: Calendario,
    hoy: Optional[date] = None,
) -> list[date]:
    """Lista ordenada y sin duplicados de fechas en las que se espera un extracto.

    Incluye `primera` tal cual (sin ajustar) si no es futura y luego cada
    vencimiento ajustado a día hábil hasta `hoy` inclusive. Si la regla no
    tiene ningún vencimiento posterior a `primera` lanza `CalendarioAgotado`.
    """
    hoy = hoy or date.today()
    fechas: list[date] = []
    if primera <= hoy:
        fechas.append(primera)

    cursor = proxima_fecha_esperada(primera, calendario)
    while cursor <= hoy:
        fechas.append(cursor)
        try:
            cursor = proxima_fecha_esperada(cursor, calendario)
        except CalendarioAgotado:
            # regla finita (COUNT o UNTIL) que ya dio su último vencimiento
            break

    # el ajuste por fin de semana puede reordenar ocurrencias cercanas
    return sorted(set(fechas))
