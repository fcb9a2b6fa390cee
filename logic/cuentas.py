from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Sequence

from logic.conciliacion import conciliar_extractos
from logic.fechas import (
    Calendario,
    CalendarioAgotado,
    calcular_fechas_esperadas,
    fecha_anterior_desde_hoy,
    proxima_fecha_desde_hoy,
)
from logic.modelos import Extracto, ExtractoObservado


@dataclass(frozen=True)
class Cuenta:
    clave: str
    nombre: str
    institucion: str
    primera_fecha: date       # fecha del primer extracto (ancla)
    calendario: Calendario    # regla de vencimientos
    formato: str              # formato strptime de los nombres de archivo
    directorio: Path

    def __str__(self) -> str:
        return f"{self.nombre} ({self.institucion})"

    def fechas_esperadas(self, hoy: Optional[date] = None) -> list[date]:
        return calcular_fechas_esperadas(self.primera_fecha, self.calendario, hoy)

    def proxima_fecha(self, desde: Optional[date] = None) -> date:
        return proxima_fecha_desde_hoy(self.calendario, desde)

    def fecha_anterior(self, desde: Optional[date] = None) -> date:
        return fecha_anterior_desde_hoy(self.calendario, desde)

    def conciliar(
        self,
        extractos: Sequence[Extracto],
        ignoradas: Sequence[date] = (),
        hoy: Optional[date] = None,
    ) -> list[ExtractoObservado]:
        return conciliar_extractos(self.fechas_esperadas(hoy), extractos, ignoradas)


@dataclass
class ColeccionExtractos:
    """Resultado de revisar todas las cuentas: clave de cuenta -> extractos observados."""

    cuentas: dict[str, list[ExtractoObservado]] = field(default_factory=dict)

    def get(self, clave: str) -> Optional[list[ExtractoObservado]]:
        return self.cuentas.get(clave)

    def insertar(self, clave: str, observados: list[ExtractoObservado]) -> Optional[list[ExtractoObservado]]:
        anterior = self.cuentas.get(clave)
        self.cuentas[clave] = observados
        return anterior

    def claves(self) -> list[str]:
        return sorted(self.cuentas)

    def __len__(self) -> int:
        return len(self.cuentas)

    def faltantes(self) -> dict[str, list[ExtractoObservado]]:
        """Solo las cuentas con algún extracto faltante, en orden de clave."""
        out: dict[str, list[ExtractoObservado]] = {}
        for clave in self.claves():
            faltan = [o for o in self.cuentas[clave] if o.faltante]
            if faltan:
                out[clave] = faltan
        return out


def proximos_vencimientos(cuentas: Iterable[Cuenta], hoy: Optional[date] = None) -> list[tuple[date, Cuenta]]:
    """Próxima fecha esperada de cada cuenta, la más cercana primero.

    Las cuentas cuya regla ya no tiene vencimientos quedan afuera.
    """
    hoy = hoy or date.today()
    pares = []
    for c in cuentas:
        try:
            pares.append((c.proxima_fecha(hoy), c))
        except CalendarioAgotado:
            continue
    return sorted(pares, key=lambda p: (p[0], p[1].clave))
