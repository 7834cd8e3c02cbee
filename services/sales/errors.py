# NG-HEADER: Nombre de archivo: errors.py
# NG-HEADER: Ubicación: services/sales/errors.py
# NG-HEADER: Descripción: Excepciones del dominio de ventas.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Excepciones del dominio de ventas y parcelas."""
from typing import Any


class SalesError(Exception):
    """Excepción base del dominio."""

    status_code = 400


class InvalidRequestError(SalesError):
    """Acción desconocida o cuerpo de la solicitud mal formado."""

    status_code = 400


class SaleNotFoundError(SalesError):
    status_code = 404

    def __init__(self, sale_id: str | None = None, row: int | None = None):
        self.sale_id = sale_id
        self.row = row
        ref = f"id={sale_id}" if sale_id else f"fila={row}"
        super().__init__(f"Venta no encontrada ({ref})")


class InstallmentNotFoundError(SalesError):
    status_code = 404

    def __init__(self, sale_id: str, number: Any):
        self.sale_id = sale_id
        self.number = number
        super().__init__(f"Parcela {number} de la venta {sale_id} no encontrada")
