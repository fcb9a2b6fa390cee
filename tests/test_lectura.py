from datetime import date, datetime
from pathlib import Path

import pytest

from logic.lectura import (
    extracto_desde_ruta,
    fecha_desde_nombre,
    nombre_esperado,
    normalizar_fecha,
    normalizar_fechas,
    ordenar_extractos,
)
from logic.modelos import Extracto


@pytest.mark.parametrize("nombre, formato, esperado", [
    ("2021-09-22.pdf", "%Y-%m-%d.pdf", date(2021, 9, 22)),
    ("2021-09-22.pdf", "%Y-%m-%d", date(2021, 9, 22)),
    ("resumen_20220331.pdf", "resumen_%Y%m%d.pdf", date(2022, 3, 31)),
    ("22-09-2021.PDF", "%d-%m-%Y", date(2021, 9, 22)),
])
def test_fecha_desde_nombre(nombre, formato, esperado):
    assert fecha_desde_nombre(nombre, formato) == esperado


@pytest.mark.parametrize("nombre", ["notas.txt", "2021-02-30.pdf", ".extractosignore.yaml", ""])
def test_fecha_desde_nombre_que_no_respeta_el_formato(nombre):
    assert fecha_desde_nombre(nombre, "%Y-%m-%d.pdf") is None


def test_extracto_desde_ruta():
    e = extracto_desde_ruta("/tmp/visa/2021-09-22.pdf", "%Y-%m-%d.pdf")
    assert e == Extracto(date(2021, 9, 22), Path("/tmp/visa/2021-09-22.pdf"))
    assert extracto_desde_ruta("/tmp/visa/leeme.md", "%Y-%m-%d.pdf") is None


def test_nombre_esperado():
    assert nombre_esperado(date(2021, 9, 22), "%Y-%m-%d.pdf") == "2021-09-22.pdf"
    assert nombre_esperado(date(2022, 3, 31), "resumen_%Y%m%d.pdf") == "resumen_20220331.pdf"


def test_ordenar_extractos_descarta_none():
    b = Extracto(date(2021, 10, 22), Path("b.pdf"))
    a = Extracto(date(2021, 9, 22), Path("a.pdf"))
    assert ordenar_extractos([b, None, a]) == [a, b]


@pytest.mark.parametrize("valor, esperado", [
    (date(2021, 9, 22), date(2021, 9, 22)),
    (datetime(2021, 9, 22, 10, 30), date(2021, 9, 22)),
    ("2021-09-22", date(2021, 9, 22)),
    (" 2021-09-22T10:30:00 ", date(2021, 9, 22)),
    ("", None),
    ("ayer", None),
    (20210922, None),
    (None, None),
])
def test_normalizar_fecha(valor, esperado):
    assert normalizar_fecha(valor) == esperado


def test_normalizar_fechas_ordena_y_quita_repetidos():
    valores = ["2021-10-22", date(2021, 9, 22), "basura", datetime(2021, 10, 22)]
    assert normalizar_fechas(valores) == [date(2021, 9, 22), date(2021, 10, 22)]
