from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from logic.modelos import EstadoExtracto, Extracto, ExtractoObservado


# Un archivo a 0, 1 o 2 días de la fecha esperada se considera cercano; a 3 ya no.
VENTANA_PROXIMIDAD_DIAS = 3


def _distancia(extracto: Extracto, fecha: date) -> int:
    return abs((extracto.fecha - fecha).days)


def es_cercano(extracto: Optional[Extracto], fecha: date) -> bool:
    """True si hay extracto y está dentro de la ventana de proximidad de `fecha`."""
    if extracto is None:
        return False
    return _distancia(extracto, fecha) < VENTANA_PROXIMIDAD_DIAS


def actual_es_mas_cercano(
    actual: Optional[Extracto],
    previo: Optional[Extracto],
    fecha: date,
) -> bool:
    """Desempate entre el extracto bajo el cursor y el último que se dejó atrás.

    Con igual distancia gana `previo` (se reutiliza el archivo ya visto).
    """
    if actual is not None and previo is not None:
        return _distancia(actual, fecha) < _distancia(previo, fecha)
    if actual is not None:
        return True
    if previo is not None:
        return False
    return True


@dataclass
class _Barrido:
    """Tres cursores sobre tres listas ordenadas, avanzando solo hacia adelante."""

    fechas: Sequence[date]
    extractos: Sequence[Extracto]
    ignoradas: Sequence[date]
    i_fecha: int = 0
    i_extracto: int = 0
    i_ignorada: int = 0
    previo: Optional[Extracto] = None
    salida: list[ExtractoObservado] = field(default_factory=list)

    def extracto_actual(self) -> Optional[Extracto]:
        if self.i_extracto < len(self.extractos):
            return self.extractos[self.i_extracto]
        return None

    def es_ignorada(self, d: date) -> bool:
        while self.i_ignorada < len(self.ignoradas) and self.ignoradas[self.i_ignorada] < d:
            self.i_ignorada += 1
        return self.i_ignorada < len(self.ignoradas) and self.ignoradas[self.i_ignorada] == d

    def alinear_extractos(self, d: date) -> None:
        while self.i_extracto < len(self.extractos) and self.extractos[self.i_extracto].fecha < d:
            self.previo = self.extractos[self.i_extracto]
            self.i_extracto += 1

    def clasificar(self, d: date) -> ExtractoObservado:
        if self.es_ignorada(d):
            return ExtractoObservado(d, EstadoExtracto.IGNORADO)

        self.alinear_extractos(d)
        actual = self.extracto_actual()

        # el cursor no avanza acá: lo consume alinear_extractos en la próxima fecha
        if actual is not None and actual.fecha == d:
            return ExtractoObservado(d, EstadoExtracto.DISPONIBLE, actual.ruta)

        mas_cercano = actual_es_mas_cercano(actual, self.previo, d)
        if es_cercano(actual, d) and mas_cercano:
            return ExtractoObservado(d, EstadoExtracto.DISPONIBLE, actual.ruta)
        if es_cercano(self.previo, d) and not mas_cercano:
            return ExtractoObservado(d, EstadoExtracto.DISPONIBLE, self.previo.ruta)

        return ExtractoObservado(d, EstadoExtracto.FALTANTE)

    def ejecutar(self) -> list[ExtractoObservado]:
        while self.i_fecha < len(self.fechas):
            d = self.fechas[self.i_fecha]
            self.salida.append(self.clasificar(d))
            self.i_fecha += 1
        return self.salida


def conciliar_extractos(
    fechas: Sequence[date],
    extractos: Sequence[Extracto],
    ignoradas: Sequence[date] = (),
) -> list[ExtractoObservado]:
    """Clasifica cada fecha esperada como Disponible, Ignorado o Faltante.

    Las tres secuencias deben venir ordenadas de forma ascendente y `fechas`
    sin repetidos. Devuelve exactamente un `ExtractoObservado` por fecha
    esperada, en el mismo orden, con la fecha esperada (no la del archivo).
    """
    return _Barrido(list(fechas), list(extractos), list(ignoradas)).ejecutar()


def resumen_estados(observados: Sequence[ExtractoObservado]) -> dict[EstadoExtracto, int]:
    """Cantidad de extractos por estado (incluye estados en cero)."""
    conteo = {estado: 0 for estado in EstadoExtracto}
    for obs in observados:
        conteo[obs.estado] += 1
    return conteo
