# NG-HEADER: Nombre de archivo: base.py
# NG-HEADER: Ubicación: store/base.py
# NG-HEADER: Descripción: Contrato del almacenamiento por filas (hojas Vendas y Parcelas).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Almacenamiento tabular con dos hojas direccionadas por fila.

Las subclases implementan sólo las primitivas de filas (leer todo, agregar,
sobrescribir fila, escribir celdas, borrar fila, asegurar encabezados). Las
operaciones tipadas por clave primaria viven acá y son comunes a todos los
backends.

Convención de filas: 1-based, la fila 1 es el encabezado; la primera fila de
datos es la 2.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from services.sales.models import Installment, Sale

from .schema import (
    INSTALLMENTS,
    SALES,
    installment_to_row,
    row_to_installment,
    row_to_sale,
    sale_to_row,
    to_cell,
)

logger = logging.getLogger(__name__)

HEADER_ROW = 1


class StoreError(Exception):
    """Falla del medio de almacenamiento (red, permisos, cuota)."""


class RowStore(ABC):
    def __init__(self, sales_table: str = "Vendas", installments_table: str = "Parcelas"):
        self.sales_table = sales_table
        self.installments_table = installments_table

    # --- Primitivas ---

    @abstractmethod
    def read_rows(self, table: str) -> List[List[Any]]:
        """Todas las filas de la hoja, encabezado incluido."""

    @abstractmethod
    def append_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> int:
        """Agrega ``rows`` al final en una sola escritura; devuelve la fila de la primera."""

    @abstractmethod
    def write_row(self, table: str, row: int, values: Sequence[Any]) -> None:
        ...

    @abstractmethod
    def write_cells(self, table: str, row: int, cells: Dict[int, Any]) -> None:
        """Escribe celdas sueltas de ``row``; ``cells`` mapea índice de columna (0-based) a valor."""

    @abstractmethod
    def delete_row(self, table: str, row: int) -> None:
        ...

    @abstractmethod
    def ensure_table(self, table: str, headers: Sequence[str]) -> bool:
        """Crea la hoja y/o su encabezado si faltan. True si hubo que crear algo."""

    def ping(self) -> bool:
        self.read_rows(self.sales_table)
        return True

    # --- Operaciones tipadas ---

    def ensure_schema(self) -> List[str]:
        created = []
        if self.ensure_table(self.sales_table, SALES.headers):
            created.append(self.sales_table)
        if self.ensure_table(self.installments_table, INSTALLMENTS.headers):
            created.append(self.installments_table)
        return created

    def _read_sales(self) -> Tuple[List[Sale], Dict[str, int]]:
        """Ventas de la hoja y el índice de columnas resuelto contra su encabezado."""
        rows = self.read_rows(self.sales_table)
        index = SALES.locate(rows[0] if rows else [])
        sales = [
            row_to_sale(values, row=i + 1, index=index)
            for i, values in enumerate(rows)
            if i >= HEADER_ROW and _has_data(values)
        ]
        return sales, index

    def _read_installments(self) -> Tuple[List[Installment], Dict[str, int]]:
        rows = self.read_rows(self.installments_table)
        index = INSTALLMENTS.locate(rows[0] if rows else [])
        installments = [
            row_to_installment(values, row=i + 1, index=index)
            for i, values in enumerate(rows)
            if i >= HEADER_ROW and _has_data(values)
        ]
        return installments, index

    def list_sales(self) -> List[Sale]:
        return self._read_sales()[0]

    def list_installments(self) -> List[Installment]:
        return self._read_installments()[0]

    def installments_for(self, sale_id: str) -> List[Installment]:
        return [i for i in self.list_installments() if i.sale_id == sale_id]

    def find_sale(self, sale_id: str) -> Optional[Sale]:
        for sale in self.list_sales():
            if sale.sale_id == sale_id:
                return sale
        return None

    def sale_at(self, row: int) -> Optional[Sale]:
        for sale in self.list_sales():
            if sale.row == row:
                return sale
        return None

    def _header_index(self, table: str, schema) -> Dict[str, int]:
        rows = self.read_rows(table)
        return schema.locate(rows[0] if rows else [])

    def append_sale(self, sale: Sale) -> int:
        index = self._header_index(self.sales_table, SALES)
        row = self.append_rows(self.sales_table, [sale_to_row(sale, index)])
        sale.row = row
        return row

    def append_installments(self, installments: Sequence[Installment]) -> None:
        if not installments:
            return
        index = self._header_index(self.installments_table, INSTALLMENTS)
        first = self.append_rows(self.installments_table, [installment_to_row(i, index) for i in installments])
        for offset, inst in enumerate(installments):
            inst.row = first + offset

    def update_sale(self, sale: Sale) -> Optional[int]:
        """Sobrescribe la fila completa de la venta ``sale.sale_id``."""
        sales, index = self._read_sales()
        current = next((s for s in sales if s.sale_id == sale.sale_id), None)
        if current is None:
            return None
        self.write_row(self.sales_table, current.row, sale_to_row(sale, index))
        sale.row = current.row
        return current.row

    def update_sale_status(self, sale_id: str, status: str) -> Optional[int]:
        sales, index = self._read_sales()
        current = next((s for s in sales if s.sale_id == sale_id), None)
        if current is None:
            return None
        self.write_cells(self.sales_table, current.row, {index["payment_status"]: to_cell(status)})
        return current.row

    def update_installment(self, sale_id: str, number: int, **fields: Any) -> Optional[Installment]:
        """Escritura puntual de celdas sobre la primera parcela (sale_id, number)."""
        installments, index = self._read_installments()
        for inst in installments:
            if inst.sale_id == sale_id and inst.number == number:
                cells = {index[k]: to_cell(v) for k, v in fields.items()}
                self.write_cells(self.installments_table, inst.row, cells)
                for k, v in fields.items():
                    setattr(inst, k, v)
                return inst
        return None

    def delete_sale(self, sale_id: str) -> bool:
        current = self.find_sale(sale_id)
        if current is None:
            return False
        self.delete_row(self.sales_table, current.row)
        return True


def _has_data(values: Sequence[Any]) -> bool:
    return any(str(v).strip() for v in values if v is not None)
