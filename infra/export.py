from __future__ import annotations
import io
import pandas as pd

from infra.config import Config
from logic.cuentas import ColeccionExtractos
from logic.lectura import nombre_esperado


COLUMNAS = ["cuenta", "institucion", "fecha", "estado", "archivo"]


def observados_a_dataframe(coleccion: ColeccionExtractos, config: Config) -> pd.DataFrame:
    """Una fila por fecha esperada de cada cuenta, con fechas reales (no texto).

    Para los faltantes, `archivo` muestra el nombre que se espera encontrar.
    """
    rows = []
    for clave in coleccion.claves():
        cuenta = config.cuenta(clave)
        for obs in coleccion.get(clave) or []:
            if obs.ruta is not None:
                archivo = obs.ruta.name
            elif obs.faltante:
                archivo = nombre_esperado(obs.fecha, cuenta.formato)
            else:
                archivo = ""
            rows.append({
                "cuenta": cuenta.nombre,
                "institucion": cuenta.institucion,
                "fecha": pd.Timestamp(obs.fecha),
                "estado": obs.estado.value,
                "archivo": archivo,
            })
    return pd.DataFrame(rows, columns=COLUMNAS)


def dataframe_a_excel_bytes(
    df: pd.DataFrame,
    sheet_name: str = "Extractos",
    formato_columnas_fecha: dict[str, str] | None = None
) -> bytes:
    """
    Exporta un DataFrame a Excel conservando los tipos fecha (no texto).
    Si se pasa `formato_columnas_fecha` con {nombre_columna: "DD/MM/YYYY"}, aplica number_format.
    """
    buff = io.BytesIO()
    with pd.ExcelWriter(buff, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        if formato_columnas_fecha:
            ws = writer.sheets[sheet_name]
            headers = [c.value for c in ws[1]]
            for col_name, fmt in formato_columnas_fecha.items():
                if col_name in headers:
                    col_idx = headers.index(col_name) + 1
                    for (cell,) in ws.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                        cell.number_format = fmt
    return buff.getvalue()
