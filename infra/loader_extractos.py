from __future__ import annotations
from datetime import date
from pathlib import Path
from typing import Optional

import yaml

from infra.config import Config
from infra.logger import get_logger
from logic.cuentas import ColeccionExtractos, Cuenta
from logic.lectura import (
    extracto_desde_ruta,
    fecha_desde_nombre,
    normalizar_fecha,
    normalizar_fechas,
    ordenar_extractos,
)
from logic.modelos import Extracto, ExtractoObservado


# Archivo dentro del directorio de cada cuenta con las fechas que no llevan extracto
IGNOREFILE = ".extractosignore.yaml"

log = get_logger()


# ==============================
# Extractos descargados
# ==============================
def listar_extractos(directorio: str | Path, formato: str) -> list[Extracto]:
    """Extractos del directorio (sin recorrer subcarpetas), ordenados por fecha.

    Los archivos cuyo nombre no respeta `formato` se descartan.
    """
    directorio = Path(directorio)
    if not directorio.is_dir():
        log.warning(
            "El directorio `%s` no existe; no se pueden revisar sus extractos.", directorio
        )
        return []

    archivos = [p for p in directorio.iterdir() if p.is_file()]
    return ordenar_extractos(extracto_desde_ruta(p, formato) for p in archivos)


# ==============================
# Archivo de fechas ignoradas
# ==============================
def ruta_ignorefile(directorio: str | Path, nombre: str = IGNOREFILE) -> Path:
    return Path(directorio) / nombre


def leer_ignorefile(path: str | Path) -> dict:
    """Contenido crudo del archivo de ignorados: {"fechas": [...], "archivos": [...]}.

    Si no existe devuelve listas vacías; si no se puede interpretar, ValueError.
    """
    path = Path(path)
    if not path.exists():
        return {"fechas": [], "archivos": []}
    if not path.is_file():
        raise ValueError(f"El archivo de ignorados debe ser un archivo, pero `{path}` no lo es.")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"No se pudo interpretar `{path}`. Revisar que tenga formato YAML válido.") from e

    if not isinstance(data, dict):
        raise ValueError(f"`{path}` debe contener las listas `fechas` y/o `archivos`.")

    out = {}
    for key in ("fechas", "archivos"):
        valor = data.get(key) or []
        if not isinstance(valor, list):
            raise ValueError(f"`{key}` en `{path}` debe ser una lista.")
        out[key] = valor
    return out


def cargar_fechas_ignoradas(
    directorio: str | Path,
    formato: str,
    nombre: str = IGNOREFILE,
) -> list[date]:
    """Fechas ignoradas de una cuenta, ordenadas y sin repetidos.

    Se toman de `fechas` y de los nombres listados en `archivos` (leídos con
    el formato de la cuenta). Las entradas que no se pueden leer se saltean.
    """
    path = ruta_ignorefile(directorio, nombre)
    data = leer_ignorefile(path)

    fechas = set()
    for valor in data["fechas"]:
        f = normalizar_fecha(valor)
        if f is None:
            log.warning("Fecha ignorada inválida en `%s`: %r", path, valor)
            continue
        fechas.add(f)
    for valor in data["archivos"]:
        f = fecha_desde_nombre(Path(str(valor)).name, formato)
        if f is None:
            log.warning("Archivo ignorado `%s` no respeta el formato `%s`", valor, formato)
            continue
        fechas.add(f)
    return sorted(fechas)


def agregar_fecha_ignorada(
    directorio: str | Path,
    fecha: date,
    nombre: str = IGNOREFILE,
) -> list[date]:
    """Agrega `fecha` al archivo de ignorados (si no estaba) y devuelve las fechas guardadas."""
    path = ruta_ignorefile(directorio, nombre)
    data = leer_ignorefile(path)

    fechas = set(normalizar_fechas(data["fechas"]))
    if fecha in fechas:
        return sorted(fechas)
    fechas.add(fecha)

    salida = {"fechas": sorted(fechas)}
    if data["archivos"]:
        salida["archivos"] = data["archivos"]

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(salida, f, sort_keys=False, allow_unicode=True)

    log.info("Fecha %s marcada como ignorada en `%s`", fecha.isoformat(), path)
    return salida["fechas"]


# ==============================
# Revisión de cuentas
# ==============================
def revisar_cuenta(
    cuenta: Cuenta,
    hoy: Optional[date] = None,
    ignorefile: str = IGNOREFILE,
) -> list[ExtractoObservado]:
    extractos = listar_extractos(cuenta.directorio, cuenta.formato)
    ignoradas = cargar_fechas_ignoradas(cuenta.directorio, cuenta.formato, ignorefile)
    return cuenta.conciliar(extractos, ignoradas, hoy)


def revisar_cuentas(config: Config, hoy: Optional[date] = None) -> ColeccionExtractos:
    """Concilia todas las cuentas del config y devuelve la colección por clave."""
    coleccion = ColeccionExtractos()
    for clave in config.claves():
        observados = revisar_cuenta(config.cuenta(clave), hoy, config.revision.ignorefile)
        coleccion.insertar(clave, observados)
        faltan = sum(1 for o in observados if o.faltante)
        log.info("Cuenta `%s`: %d extractos esperados, %d faltantes", clave, len(observados), faltan)
    return coleccion
