# NG-HEADER: Nombre de archivo: memory.py
# NG-HEADER: Ubicación: store/memory.py
# NG-HEADER: Descripción: Almacenamiento por filas en memoria (tests y demo local).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Implementación en memoria de :class:`store.base.RowStore`.

Replica la semántica de una planilla: filas como listas, fila 1 = encabezado,
las filas vacías intermedias se conservan.
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Sequence

from .base import RowStore, StoreError


class MemoryRowStore(RowStore):
    def __init__(self, sales_table: str = "Vendas", installments_table: str = "Parcelas"):
        super().__init__(sales_table, installments_table)
        self._tables: Dict[str, List[List[Any]]] = {}
        self._lock = threading.Lock()

    def _table(self, table: str) -> List[List[Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise StoreError(f"Hoja inexistente: {table}") from None

    def read_rows(self, table: str) -> List[List[Any]]:
        with self._lock:
            return [list(r) for r in self._table(table)]

    def append_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> int:
        with self._lock:
            data = self._table(table)
            first = len(data) + 1
            data.extend(list(r) for r in rows)
            return first

    def write_row(self, table: str, row: int, values: Sequence[Any]) -> None:
        with self._lock:
            data = self._table(table)
            self._check_row(table, data, row)
            data[row - 1] = list(values)

    def write_cells(self, table: str, row: int, cells: Dict[int, Any]) -> None:
        with self._lock:
            data = self._table(table)
            self._check_row(table, data, row)
            current = data[row - 1]
            width = max(cells) + 1 if cells else 0
            if len(current) < width:
                current.extend([""] * (width - len(current)))
            for col, value in cells.items():
                current[col] = value

    def delete_row(self, table: str, row: int) -> None:
        with self._lock:
            data = self._table(table)
            self._check_row(table, data, row)
            del data[row - 1]

    def ensure_table(self, table: str, headers: Sequence[str]) -> bool:
        with self._lock:
            data = self._tables.setdefault(table, [])
            if data and any(str(h).strip() for h in data[0]):
                return False
            if data:
                data[0] = list(headers)
            else:
                data.append(list(headers))
            return True

    @staticmethod
    def _check_row(table: str, data: List[List[Any]], row: int) -> None:
        if row < 1 or row > len(data):
            raise StoreError(f"Fila {row} fuera de rango en {table}")
