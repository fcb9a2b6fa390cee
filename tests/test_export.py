import io
from datetime import date
from pathlib import Path

import openpyxl
import pandas as pd

from infra.calendario import periodo_desde_config
from infra.config import AppConfig, Config, RevisionConfig
from infra.export import COLUMNAS, dataframe_a_excel_bytes, observados_a_dataframe
from logic.cuentas import ColeccionExtractos, Cuenta
from logic.modelos import EstadoExtracto, ExtractoObservado


def armar(tmp_path):
    inicio = date(2021, 9, 22)
    visa = Cuenta(
        clave="visa",
        nombre="Visa",
        institucion="Banco Galicia",
        primera_fecha=inicio,
        calendario=periodo_desde_config([22, "Day", 1, "Month"], inicio),
        formato="%Y-%m-%d.pdf",
        directorio=tmp_path,
    )
    cfg = Config(path=tmp_path / "config.yaml", app=AppConfig(), revision=RevisionConfig(),
                 cuentas={"visa": visa})
    col = ColeccionExtractos()
    col.insertar("visa", [
        ExtractoObservado(date(2021, 9, 22), EstadoExtracto.DISPONIBLE, Path(tmp_path / "2021-09-23.pdf")),
        ExtractoObservado(date(2021, 10, 22), EstadoExtracto.IGNORADO),
        ExtractoObservado(date(2021, 11, 22), EstadoExtracto.FALTANTE),
    ])
    return col, cfg


def test_observados_a_dataframe(tmp_path):
    col, cfg = armar(tmp_path)
    df = observados_a_dataframe(col, cfg)
    assert list(df.columns) == COLUMNAS
    assert df["cuenta"].tolist() == ["Visa"] * 3
    assert df["estado"].tolist() == ["Disponible", "Ignorado", "Faltante"]
    # el faltante muestra el nombre de archivo esperado
    assert df["archivo"].tolist() == ["2021-09-23.pdf", "", "2021-11-22.pdf"]
    assert str(df["fecha"].dtype).startswith("datetime64")


def test_dataframe_vacio_conserva_columnas(tmp_path):
    _, cfg = armar(tmp_path)
    df = observados_a_dataframe(ColeccionExtractos(), cfg)
    assert df.empty
    assert list(df.columns) == COLUMNAS


def test_excel_conserva_fechas_y_formato(tmp_path):
    col, cfg = armar(tmp_path)
    df = observados_a_dataframe(col, cfg)
    data = dataframe_a_excel_bytes(df, sheet_name="Extractos", formato_columnas_fecha={"fecha": "DD/MM/YYYY"})

    leido = pd.read_excel(io.BytesIO(data), sheet_name="Extractos")
    assert leido["fecha"].iloc[2] == pd.Timestamp(2021, 11, 22)

    ws = openpyxl.load_workbook(io.BytesIO(data))["Extractos"]
    assert ws["C2"].number_format == "DD/MM/YYYY"
