from __future__ import annotations
import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path

from infra.calendario import ErrorCalendario, periodo_desde_config
from logic.cuentas import Cuenta
from logic.fechas import proxima_fecha_esperada
from logic.lectura import normalizar_fecha


ENV_CONFIG = "EXTRACTOS_CONFIG"
CONFIG_DEFAULT = "config.yaml"


class ErrorCuenta(ValueError):
    """Cuenta mal definida en el archivo de configuración."""


@dataclass(frozen=True)
class AppConfig:
    title: str = "Control de extractos"
    page_layout: str = "wide"
    fecha_vista_formato: str = "%d/%m/%Y"


@dataclass(frozen=True)
class RevisionConfig:
    ignorefile: str = ".extractosignore.yaml"


@dataclass(frozen=True)
class Config:
    path: Path
    app: AppConfig
    revision: RevisionConfig
    cuentas: dict[str, Cuenta] = field(default_factory=dict)

    def claves(self) -> list[str]:
        return sorted(self.cuentas)

    def __len__(self) -> int:
        return len(self.cuentas)

    def cuenta(self, clave: str) -> Cuenta:
        return self.cuentas[clave]


class _CargadorSinDuplicados(yaml.SafeLoader):
    """SafeLoader que falla ante claves repetidas en vez de pisar la anterior."""

    def construct_mapping(self, node, deep=False):
        vistas = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in vistas:
                raise ErrorCuenta(
                    f"La clave `{key}` está duplicada. "
                    "Revisar el archivo de configuración para que las claves sean únicas."
                )
            vistas.add(key)
        return super().construct_mapping(node, deep=deep)


def ruta_config(path: str | Path | None = None) -> Path:
    """Prioridad: argumento explícito, variable EXTRACTOS_CONFIG, config.yaml local."""
    if path is not None:
        return Path(path)
    env = os.environ.get(ENV_CONFIG)
    if env:
        return Path(env)
    return Path(CONFIG_DEFAULT)


def _texto(props: dict, key: str, clave: str, que: str) -> str:
    valor = props.get(key)
    if not isinstance(valor, str) or not valor.strip():
        raise ErrorCuenta(f"Cuenta `{clave}`: falta {que} (`{key}`)")
    return valor


def _directorio(valor: str, base: Path) -> Path:
    ruta = Path(valor).expanduser()
    if not ruta.is_absolute():
        ruta = base / ruta
    return ruta.resolve()


def cuenta_desde_dict(clave: str, props: dict, base: Path) -> Cuenta:
    if not isinstance(props, dict):
        raise ErrorCuenta(f"Cuenta `{clave}`: se esperaba una tabla de propiedades")

    nombre = _texto(props, "nombre", clave, "el nombre de la cuenta")
    institucion = _texto(props, "institucion", clave, "el nombre de la institución")
    formato = _texto(props, "formato", clave, "el formato de nombre de los extractos")
    directorio = _directorio(_texto(props, "directorio", clave, "el directorio de extractos"), base)

    if "primera_fecha" not in props:
        raise ErrorCuenta(f"Cuenta `{clave}`: falta la fecha del primer extracto (`primera_fecha`)")
    primera = normalizar_fecha(props["primera_fecha"])
    if primera is None:
        raise ErrorCuenta(f"Cuenta `{clave}`: fecha del primer extracto inválida: {props['primera_fecha']!r}")

    if "periodo" not in props:
        raise ErrorCuenta(f"Cuenta `{clave}`: falta el período de los extractos (`periodo`)")
    try:
        calendario = periodo_desde_config(props["periodo"], primera)
        # una regla que se agota antes de la primera fecha no puede generar vencimientos
        proxima_fecha_esperada(primera, calendario)
    except ErrorCalendario as e:
        raise ErrorCuenta(f"Cuenta `{clave}`: {e}") from e

    return Cuenta(
        clave=clave,
        nombre=nombre,
        institucion=institucion,
        primera_fecha=primera,
        calendario=calendario,
        formato=formato,
        directorio=directorio,
    )


def load_config(path: str | Path | None = None) -> Config:
    path = ruta_config(path)
    if not path.exists():
        raise FileNotFoundError(f"El archivo de configuración `{path}` no existe.")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.load(f, Loader=_CargadorSinDuplicados) or {}

    cuentas_raw = data.get("cuentas")
    if not isinstance(cuentas_raw, dict):
        raise ValueError(
            f"No se encontró la sección `cuentas` en `{path}`. "
            "Revisar la configuración y volver a intentar."
        )

    base = path.resolve().parent
    cuentas = {str(k): cuenta_desde_dict(str(k), v, base) for k, v in cuentas_raw.items()}

    app = AppConfig(**(data.get("app") or {}))
    rev = RevisionConfig(**(data.get("revision") or {}))

    return Config(path=path.resolve(), app=app, revision=rev, cuentas=cuentas)
