# NG-HEADER: Nombre de archivo: coercion.py
# NG-HEADER: Ubicación: services/sales/coercion.py
# NG-HEADER: Descripción: Conversión tolerante de números y fechas que llegan de la planilla o del front.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Conversión tolerante de valores crudos.

Los datos llegan como texto libre (formulario del front o celdas de la
planilla). Ninguna función de este módulo lanza excepciones: si un valor no se
puede interpretar se devuelve el default o el valor original.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

CENTS = Decimal("0.01")
# Origen de los números de serie de fecha de Google Sheets / Excel
SHEETS_EPOCH = date(1899, 12, 30)
TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"

_CURRENCY_RE = re.compile(r"[R$\s]")
_BR_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Interpreta ``value`` como decimal aceptando coma como separador.

    ``"1.234,50"`` -> 1234.50, ``"10,5"`` -> 10.5, ``"R$ 300"`` -> 300.
    Devuelve ``None`` si no es un número finito.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            return None
        return d if d.is_finite() else None
    s = _CURRENCY_RE.sub("", str(value))
    if not s:
        return None
    if "," in s and "." in s:
        # formato 1.234,56: el punto es separador de miles
        s = s.replace(".", "").replace(",", ".")
    elif "," in s:
        s = s.replace(",", ".")
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    d = parse_decimal(value)
    return default if d is None else d


def to_int(value: Any, default: int = 0) -> int:
    d = parse_decimal(value)
    if d is None:
        return default
    return int(d)


def to_exact_int(value: Any) -> Optional[int]:
    """Entero sólo si ``value`` es integral (``"2"``, ``2.0``); ``"2.7"`` -> ``None``."""
    d = parse_decimal(value)
    if d is None or d != d.to_integral_value():
        return None
    return int(d)


def coerce_numeric(value: Any) -> Any:
    """Decimal si se pudo interpretar; si no, el valor original tal cual."""
    d = parse_decimal(value)
    return value if d is None else d


def coerce_count(value: Any) -> Any:
    d = parse_decimal(value)
    if d is None:
        return value
    if d == d.to_integral_value():
        return int(d)
    return d


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_date(value: Any) -> Optional[date]:
    """Acepta ``date``/``datetime``, ISO (``2024-01-15``, con hora opcional),
    ``15/01/2024`` y números de serie de Sheets. ``None`` si no se entiende."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        try:
            return SHEETS_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError):
            return None
    s = str(value).strip()
    if not s:
        return None
    m = _BR_DATE_RE.match(s)
    if m:
        day, month, year = (int(g) for g in m.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def add_months(d: date, months: int) -> date:
    """Avanza ``months`` meses calendario.

    Conserva el día del mes; si el mes destino es más corto se usa su último
    día (31/01 + 1 -> 29/02 en bisiesto).
    """
    return d + relativedelta(months=months)


def format_date(d: date) -> str:
    return d.isoformat()


def now_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FMT)
