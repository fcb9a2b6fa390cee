from __future__ import annotations
from datetime import MAXYEAR, date, datetime, time, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta
from dateutil.rrule import MONTHLY, WEEKLY, YEARLY, rrule, rrulebase, rruleset, rrulestr

from logic.fechas import CalendarioAgotado, ErrorCalendario


# Granos del formato abreviado [n, x, m, y]: "el n-ésimo x de cada m y"
GRANOS = ("Day", "Week", "Month", "Quarter", "Half", "Year")
_MESES_POR_GRANO = {"Month": 1, "Quarter": 3, "Half": 6, "Year": 12}
# el bloque más largo de cada grano, en días
_DIAS_POR_GRANO = {"Month": 31, "Quarter": 92, "Half": 184, "Year": 366}

PeriodoConfig = Union[str, list, tuple]


def _a_datetime(fecha: date) -> datetime:
    return datetime.combine(fecha, time.min)


class CalendarioRRule:
    """Calendario de vencimientos respaldado por `dateutil.rrule`.

    Puede combinar varias reglas (unión); las ocurrencias se toman a nivel día.
    """

    def __init__(self, reglas: list[rrulebase], inicio: date):
        if not reglas:
            raise ErrorCalendario("El período no tiene ninguna regla")
        self.inicio = inicio
        self._set = rruleset(cache=True)
        for r in reglas:
            self._set.rrule(r)

    def siguiente(self, fecha: date) -> date:
        d = self._set.after(_a_datetime(fecha), inc=True)
        if d is None:
            raise CalendarioAgotado(f"La regla no tiene ocurrencias desde {fecha.isoformat()}")
        return d.date()

    def anterior(self, fecha: date) -> date:
        d = self._set.before(_a_datetime(fecha), inc=True)
        if d is None:
            raise ErrorCalendario(f"La regla no tiene ocurrencias hasta {fecha.isoformat()}")
        return d.date()

    def __repr__(self) -> str:
        return f"CalendarioRRule(inicio={self.inicio.isoformat()})"


class ReglaBloques(rrulebase):
    """El n-ésimo día o mes de cada bloque calendario (trimestre o semestre).

    Los bloques empiezan en enero, abril, julio y octubre (trimestres) o en
    enero y julio (semestres); con `paso` > 1 se toma uno de cada `paso`
    bloques a partir del que contiene `inicio`. Un `n` negativo cuenta desde
    el final del bloque. Los bloques demasiado cortos para `n` se saltean.
    """

    def __init__(self, n: int, grano: str, meses: int, paso: int, inicio: date):
        super().__init__(cache=False)
        self._n = n
        self._grano = grano
        self._meses = meses
        self._paso = paso
        self._inicio = inicio

    def _en_bloque(self, bloque: date) -> date | None:
        fin = bloque + relativedelta(months=self._meses)
        if self._grano == "Month":
            if self._n > 0:
                return bloque + relativedelta(months=self._n - 1)
            return fin + relativedelta(months=self._n)
        if abs(self._n) > (fin - bloque).days:
            return None
        if self._n > 0:
            return bloque + timedelta(days=self._n - 1)
        return fin + timedelta(days=self._n)

    def _iter(self):
        mes = (self._inicio.month - 1) // self._meses * self._meses + 1
        bloque = date(self._inicio.year, mes, 1)
        salto = relativedelta(months=self._meses * self._paso)
        limite = MAXYEAR - (self._meses * self._paso) // 12 - 1
        while bloque.year < limite:
            fecha = self._en_bloque(bloque)
            if fecha is not None and fecha >= self._inicio:
                yield _a_datetime(fecha)
            bloque += salto


def _grano(valor) -> str:
    if not isinstance(valor, str):
        raise ErrorCalendario(f"El grano `{valor}` del período debe ser texto")
    if valor not in GRANOS:
        raise ErrorCalendario(
            f"Grano `{valor}` no soportado para el período. "
            f"Granos permitidos: {', '.join(GRANOS)}"
        )
    return valor


def _entero(valor, cual: str) -> int:
    # bool es subclase de int
    if isinstance(valor, bool) or not isinstance(valor, int):
        raise ErrorCalendario(
            f"`{cual}` del período debe ser entero. "
            "El formato es [n, x, m, y] con n y m enteros, x e y granos."
        )
    return valor


def regla_abreviada(periodo: list | tuple, inicio: date) -> rrulebase:
    """Traduce [n, x, m, y] ("el n-ésimo x de cada m y") a una regla de `dateutil`.

    Un `n` negativo cuenta desde el final: [-1, "Day", 1, "Month"] es el
    último día de cada mes y [-1, "Day", 1, "Quarter"] el último día de cada
    trimestre. Combinaciones soportadas:

    - Day de Week (la semana empieza el lunes)
    - Day de Month, Quarter, Half o Year
    - Month de Quarter, Half o Year (primer día de ese mes)

    Trimestres, semestres y años son calendario; `m` cuenta bloques a partir
    del que contiene `inicio`.
    """
    if len(periodo) != 4:
        raise ErrorCalendario(
            f"El período debe tener 4 elementos (tiene {len(periodo)}). "
            "El formato es [n, x, m, y] con n y m enteros, x e y granos."
        )
    n = _entero(periodo[0], "n")
    x = _grano(periodo[1])
    m = _entero(periodo[2], "m")
    y = _grano(periodo[3])
    if n == 0 or m <= 0:
        raise ErrorCalendario("`n` no puede ser 0 y `m` debe ser positivo")

    dtstart = _a_datetime(inicio)

    if x == "Day" and y == "Week":
        if abs(n) > 7:
            raise ErrorCalendario(f"Una semana no tiene un día {n}")
        dia = n - 1 if n > 0 else 7 + n
        return rrule(WEEKLY, interval=m, byweekday=dia, dtstart=dtstart)

    if x == "Day" and y in _DIAS_POR_GRANO:
        if abs(n) > _DIAS_POR_GRANO[y]:
            raise ErrorCalendario(f"Un bloque `{y}` no tiene un día {n}")
        if y == "Month":
            return rrule(MONTHLY, interval=m, bymonthday=n, dtstart=dtstart)
        if y == "Year":
            return rrule(YEARLY, interval=m, byyearday=n, dtstart=dtstart)
        return ReglaBloques(n, x, _MESES_POR_GRANO[y], m, inicio)

    if x == "Month" and y in ("Quarter", "Half", "Year"):
        total = _MESES_POR_GRANO[y]
        if abs(n) > total:
            raise ErrorCalendario(f"Un bloque de {total} meses no tiene un mes {n}")
        if y == "Year":
            mes = n if n > 0 else 13 + n
            return rrule(YEARLY, interval=m, bymonth=mes, bymonthday=1, dtstart=dtstart)
        return ReglaBloques(n, x, total, m, inicio)

    raise ErrorCalendario(
        f"Combinación `{x}` de `{y}` no soportada; usar una regla RRULE "
        "(por ejemplo \"FREQ=MONTHLY;BYDAY=2TU\")"
    )


def regla_rrule(texto: str, inicio: date) -> rrulebase:
    """Regla en formato iCalendar ("FREQ=MONTHLY;BYDAY=2TU"), anclada en `inicio`."""
    try:
        return rrulestr(texto.strip(), dtstart=_a_datetime(inicio))
    except (ValueError, KeyError, TypeError) as e:
        raise ErrorCalendario(f"Regla RRULE inválida `{texto}`: {e}") from e


def _es_abreviado(valor) -> bool:
    return (
        isinstance(valor, (list, tuple))
        and len(valor) > 0
        and not isinstance(valor[0], (list, tuple, str))
    )


def periodo_desde_config(valor: PeriodoConfig, inicio: date) -> CalendarioRRule:
    """Construye el calendario de una cuenta a partir del `periodo` del config.

    Acepta una regla abreviada [n, x, m, y], un texto RRULE o una lista con
    cualquiera de ellos (unión de reglas).
    """
    if isinstance(valor, str):
        return CalendarioRRule([regla_rrule(valor, inicio)], inicio)
    if _es_abreviado(valor):
        return CalendarioRRule([regla_abreviada(valor, inicio)], inicio)
    if isinstance(valor, (list, tuple)) and valor:
        reglas = []
        for item in valor:
            if isinstance(item, str):
                reglas.append(regla_rrule(item, inicio))
            elif isinstance(item, (list, tuple)):
                reglas.append(regla_abreviada(item, inicio))
            else:
                raise ErrorCalendario(f"Elemento de período no reconocido: {item!r}")
        return CalendarioRRule(reglas, inicio)
    raise ErrorCalendario(f"Período no reconocido: {valor!r}")
