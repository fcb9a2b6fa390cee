from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from logic.modelos import Extracto


def fecha_desde_nombre(nombre: str, formato: str) -> Optional[date]:
    """Lee la fecha de un nombre de archivo con un formato `strptime`.

    Prueba primero con el nombre completo (formatos tipo "%Y-%m-%d.pdf") y
    después sin extensión (formatos tipo "%Y-%m-%d"). Devuelve None si no
    coincide ninguno.
    """
    candidatos = [nombre]
    stem = Path(nombre).stem
    if stem and stem != nombre:
        candidatos.append(stem)
    for texto in candidatos:
        try:
            return datetime.strptime(texto, formato).date()
        except ValueError:
            continue
    return None


def extracto_desde_ruta(ruta: str | Path, formato: str) -> Optional[Extracto]:
    ruta = Path(ruta)
    fecha = fecha_desde_nombre(ruta.name, formato)
    if fecha is None:
        return None
    return Extracto(fecha=fecha, ruta=ruta)


def nombre_esperado(fecha: date, formato: str) -> str:
    """Nombre de archivo que tendría el extracto de `fecha` (p. ej. para mostrar faltantes)."""
    return fecha.strftime(formato)


def ordenar_extractos(extractos: Iterable[Optional[Extracto]]) -> list[Extracto]:
    """Descarta los None y ordena por fecha (y ruta, para que el orden sea estable)."""
    return sorted(e for e in extractos if e is not None)


def normalizar_fecha(valor) -> Optional[date]:
    """Convierte lo que devuelve YAML (date, datetime o texto ISO) a `date`."""
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str):
        texto = valor.strip()
        if not texto:
            return None
        try:
            return date.fromisoformat(texto[:10])
        except ValueError:
            return None
    return None


def normalizar_fechas(valores: Iterable) -> list[date]:
    """Fechas válidas, ordenadas y sin repetidos."""
    out = set()
    for v in valores:
        f = normalizar_fecha(v)
        if f is not None:
            out.add(f)
    return sorted(out)
