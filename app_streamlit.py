from datetime import date

import pandas as pd
import streamlit as st

from infra.calendario import ErrorCalendario
from infra.config import load_config
from infra.export import dataframe_a_excel_bytes, observados_a_dataframe
from infra.loader_extractos import agregar_fecha_ignorada, revisar_cuentas
from infra.logger import get_logger
from logic.conciliacion import resumen_estados
from logic.cuentas import proximos_vencimientos
from logic.lectura import nombre_esperado
from logic.modelos import EstadoExtracto

log = get_logger()

# =========================
# Configuración inicial
# =========================
cfg = load_config()
st.set_page_config(page_title=cfg.app.title, layout=cfg.app.page_layout)
st.title(cfg.app.title)
fmt_fecha = cfg.app.fecha_vista_formato

with st.expander("ℹ️ Cómo funciona la revisión de extractos"):
    st.markdown("""
    - Cada cuenta del `config.yaml` define la fecha del **primer extracto**, el **período** y el **formato** del nombre de archivo.
    - Se calculan las fechas en que debería haber un extracto hasta hoy (los vencimientos en fin de semana pasan al lunes).
    - Cada fecha queda **Disponible** (hay un archivo a menos de 3 días), **Ignorado** (figura en el archivo de ignorados) o **Faltante**.
    - Desde la pestaña **Faltantes** se puede marcar una fecha como ignorada.
    """)

hoy = st.date_input("Revisar hasta", value=date.today(), format="DD/MM/YYYY")

# =========================
# Conciliación
# =========================
coleccion = revisar_cuentas(cfg, hoy)

tab_faltantes, tab_historial, tab_proximos, tab_cuentas = st.tabs(
    ["Faltantes", "Historial", "Próximos", "Cuentas"]
)

# ---- Faltantes ----
with tab_faltantes:
    faltantes = coleccion.faltantes()
    if not faltantes:
        st.success("No falta ningún extracto.")
    for clave, observados in faltantes.items():
        cuenta = cfg.cuenta(clave)
        st.markdown(f"**{cuenta}**")
        for obs in observados:
            col_fecha, col_archivo, col_boton = st.columns([2, 3, 1])
            col_fecha.write(obs.fecha.strftime(fmt_fecha))
            col_archivo.code(nombre_esperado(obs.fecha, cuenta.formato))
            if col_boton.button("Ignorar", key=f"ignorar_{clave}_{obs.fecha.isoformat()}"):
                agregar_fecha_ignorada(cuenta.directorio, obs.fecha, cfg.revision.ignorefile)
                st.rerun()

# ---- Historial ----
with tab_historial:
    claves = cfg.claves()
    if not claves:
        st.info("No hay cuentas configuradas.")
    else:
        clave_sel = st.selectbox(
            "Cuenta", claves, format_func=lambda k: str(cfg.cuenta(k)), key="cuenta_historial"
        )
        observados = coleccion.get(clave_sel) or []

        # el más reciente arriba
        filas = [{
            "fecha": obs.fecha.strftime(fmt_fecha),
            "estado": f"{obs.estado.simbolo} {obs.estado.value}",
            "archivo": obs.ruta.name if obs.ruta else "",
        } for obs in reversed(observados)]
        historial = pd.DataFrame(filas, columns=["fecha", "estado", "archivo"])

        def colorear(fila):
            if fila["estado"].endswith(EstadoExtracto.FALTANTE.value):
                return ["color: #d9534f"] * len(fila)
            if fila["estado"].endswith(EstadoExtracto.IGNORADO.value):
                return ["color: #999999"] * len(fila)
            return [""] * len(fila)

        st.dataframe(historial.style.apply(colorear, axis=1), use_container_width=True)

        conteo = resumen_estados(observados)
        c1, c2, c3 = st.columns(3)
        c1.metric("Disponibles", conteo[EstadoExtracto.DISPONIBLE])
        c2.metric("Ignorados", conteo[EstadoExtracto.IGNORADO])
        c3.metric("Faltantes", conteo[EstadoExtracto.FALTANTE])

# ---- Próximos ----
with tab_proximos:
    proximos = pd.DataFrame(
        [{"fecha": f.strftime(fmt_fecha), "cuenta": str(c)}
         for f, c in proximos_vencimientos(cfg.cuentas.values(), hoy)],
        columns=["fecha", "cuenta"],
    )
    st.dataframe(proximos, use_container_width=True)

# ---- Cuentas ----
def ultimo_vencimiento(cuenta):
    try:
        return cuenta.fecha_anterior(hoy).strftime(fmt_fecha)
    except ErrorCalendario:
        return ""


with tab_cuentas:
    cuentas_df = pd.DataFrame(
        [{
            "clave": c.clave,
            "nombre": c.nombre,
            "institucion": c.institucion,
            "primer extracto": c.primera_fecha.strftime(fmt_fecha),
            "último vencimiento": ultimo_vencimiento(c),
            "formato": c.formato,
            "directorio": str(c.directorio),
        } for c in (cfg.cuenta(k) for k in cfg.claves())],
    )
    st.dataframe(cuentas_df, use_container_width=True)

# ---- Exportar a Excel ----
salida = observados_a_dataframe(coleccion, cfg)
xls_bytes = dataframe_a_excel_bytes(
    salida, sheet_name="Extractos", formato_columnas_fecha={"fecha": "DD/MM/YYYY"}
)
st.download_button("Descargar revisión (xlsx)", data=xls_bytes, file_name="extractos.xlsx")
log.info("Revisión generada para %d cuentas", len(coleccion))
