from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional


class EstadoExtracto(Enum):
    DISPONIBLE = "Disponible"
    IGNORADO = "Ignorado"
    FALTANTE = "Faltante"

    @property
    def simbolo(self) -> str:
        return _SIMBOLOS[self]


_SIMBOLOS = {
    EstadoExtracto.DISPONIBLE: "✔",
    EstadoExtracto.IGNORADO: "-",
    EstadoExtracto.FALTANTE: "❌",
}


class Direccion(Enum):
    ADELANTE = "adelante"
    ATRAS = "atras"


@dataclass(frozen=True, order=True)
class Extracto:
    fecha: date          # fecha leída del nombre del archivo
    ruta: Path           # archivo encontrado en el directorio de la cuenta

    def __str__(self) -> str:
        return f"{self.fecha.isoformat()} ({self.ruta})"


@dataclass(frozen=True)
class ExtractoObservado:
    fecha: date                    # siempre la fecha esperada, no la del archivo
    estado: EstadoExtracto
    ruta: Optional[Path] = None    # solo cuando estado == DISPONIBLE

    @property
    def disponible(self) -> bool:
        return self.estado is EstadoExtracto.DISPONIBLE

    @property
    def faltante(self) -> bool:
        return self.estado is EstadoExtracto.FALTANTE
