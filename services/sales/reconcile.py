# NG-HEADER: Nombre de archivo: reconcile.py
# NG-HEADER: Ubicación: services/sales/reconcile.py
# NG-HEADER: Descripción: Cálculo del estado de pago de una venta a partir de sus parcelas.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Conciliación del estado de una venta."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .models import SaleStatus


@dataclass(frozen=True)
class Reconciliation:
    paid_count: int
    total_count: int
    status: SaleStatus

    def to_dict(self) -> Dict[str, object]:
        return {
            "paidCount": self.paid_count,
            "totalCount": self.total_count,
            "newStatus": self.status.value,
        }


def compute_status(paid_count: int, total_count: int) -> SaleStatus:
    # Venta sin parcelas: se considera en aberto
    if total_count <= 0 or paid_count <= 0:
        return SaleStatus.PENDING
    if paid_count >= total_count:
        return SaleStatus.PAID
    return SaleStatus.PARTIAL


def reconcile(store, sale_id: str) -> Reconciliation:
    """Relee las parcelas de ``sale_id`` y calcula su estado. No escribe nada."""
    installments = store.installments_for(sale_id)
    paid = sum(1 for i in installments if i.is_paid)
    total = len(installments)
    return Reconciliation(paid, total, compute_status(paid, total))
