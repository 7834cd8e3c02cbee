# NG-HEADER: Nombre de archivo: schema.py
# NG-HEADER: Ubicación: store/schema.py
# NG-HEADER: Descripción: Columnas de las hojas Vendas/Parcelas y mapeo fila <-> registro tipado.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Esquema de las dos hojas y capa de mapeo.

Es el único lugar que conoce los textos de encabezado. El orden de las
columnas importa para las escrituras posicionales; en lectura se ubica cada
columna por su encabezado y, si no aparece, por su posición.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from services.sales.coercion import coerce_count, coerce_numeric, format_date, parse_date, to_int
from services.sales.models import Installment, Sale


@dataclass(frozen=True)
class TableSchema:
    columns: Tuple[Tuple[str, str], ...]  # (campo, encabezado)

    @property
    def headers(self) -> List[str]:
        return [h for _, h in self.columns]

    @property
    def fields(self) -> List[str]:
        return [f for f, _ in self.columns]

    def index_of(self, field_name: str) -> int:
        return self.fields.index(field_name)

    def locate(self, header_row: Sequence[Any]) -> Dict[str, int]:
        """Índice de columna por campo, resuelto contra la fila de encabezado real."""
        found = {str(h).strip(): i for i, h in enumerate(header_row or [])}
        return {f: found.get(h, i) for i, (f, h) in enumerate(self.columns)}


SALES = TableSchema(
    columns=(
        ("sale_id", "ID Venda"),
        ("payment_status", "Status Pagamento"),
        ("customer_name", "Cliente"),
        ("city_state", "Cidade/UF"),
        ("phone", "Telefone"),
        ("purchase_date", "Data Compra"),
        ("total_value", "Valor Total"),
        ("payment_method", "Forma Pagamento"),
        ("installment_count", "Qtd Parcelas"),
        ("installment_value", "Valor Parcela"),
        ("litter", "Ninhada"),
        ("sex", "Sexo"),
        ("color", "Cor"),
        ("delivery_date", "Data Entrega"),
        ("responsible", "Responsável"),
    )
)

INSTALLMENTS = TableSchema(
    columns=(
        ("sale_id", "ID Venda"),
        ("number", "Nº Parcela"),
        ("value", "Valor"),
        ("due_date", "Vencimento"),
        ("status", "Status"),
        ("payment_date", "Data Pagamento"),
    )
)


def to_cell(value: Any) -> Any:
    """Valor apto para la API de Sheets (JSON): Decimal -> float, None -> ''."""
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _date_text(value: Any) -> str:
    # Las celdas con formato de fecha llegan como número de serie
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        d = parse_date(value)
        return format_date(d) if d else _text(value)
    return _text(value)


def _cell(values: Sequence[Any], idx: int) -> Any:
    return values[idx] if idx < len(values) else ""


def _place(schema: TableSchema, record: Any, index: Optional[Dict[str, int]]) -> List[Any]:
    """Fila en el orden de columnas de ``index`` (el de la hoja real); sin índice, el canónico."""
    if index is None:
        return [to_cell(getattr(record, f)) for f in schema.fields]
    out: List[Any] = [""] * (max(index.values()) + 1)
    for f, i in index.items():
        out[i] = to_cell(getattr(record, f))
    return out


def sale_to_row(sale: Sale, index: Optional[Dict[str, int]] = None) -> List[Any]:
    return _place(SALES, sale, index)


def row_to_sale(values: Sequence[Any], row: int, index: Optional[Dict[str, int]] = None) -> Sale:
    index = index or SALES.locate(SALES.headers)
    raw = {f: _cell(values, i) for f, i in index.items()}
    installment_value = raw["installment_value"]
    return Sale(
        sale_id=_text(raw["sale_id"]),
        payment_status=_text(raw["payment_status"]),
        customer_name=_text(raw["customer_name"]),
        city_state=_text(raw["city_state"]),
        phone=_text(raw["phone"]),
        purchase_date=_date_text(raw["purchase_date"]),
        total_value=coerce_numeric(raw["total_value"]),
        payment_method=_text(raw["payment_method"]),
        installment_count=coerce_count(raw["installment_count"]),
        installment_value=None if installment_value in ("", None) else coerce_numeric(installment_value),
        litter=_text(raw["litter"]),
        sex=_text(raw["sex"]),
        color=_text(raw["color"]),
        delivery_date=_date_text(raw["delivery_date"]),
        responsible=_text(raw["responsible"]),
        row=row,
    )


def installment_to_row(inst: Installment, index: Optional[Dict[str, int]] = None) -> List[Any]:
    return _place(INSTALLMENTS, inst, index)


def row_to_installment(values: Sequence[Any], row: int, index: Optional[Dict[str, int]] = None) -> Installment:
    index = index or INSTALLMENTS.locate(INSTALLMENTS.headers)
    raw = {f: _cell(values, i) for f, i in index.items()}
    return Installment(
        sale_id=_text(raw["sale_id"]),
        number=to_int(raw["number"]),
        value=coerce_numeric(raw["value"]),
        due_date=_date_text(raw["due_date"]),
        status=_text(raw["status"]),
        payment_date=_date_text(raw["payment_date"]),
        row=row,
    )
