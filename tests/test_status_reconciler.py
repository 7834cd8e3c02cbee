# NG-HEADER: Nombre de archivo: test_status_reconciler.py
# NG-HEADER: Ubicación: tests/test_status_reconciler.py
# NG-HEADER: Descripción: Tests de la conciliación de estado de venta.
# NG-HEADER: Lineamientos: Ver AGENTS.md
import pytest

from services.sales.installments import generate_installments
from services.sales.models import SaleStatus
from services.sales.reconcile import compute_status, reconcile


@pytest.mark.parametrize(
    "paid,total,expected",
    [
        (0, 3, SaleStatus.PENDING),
        (1, 3, SaleStatus.PARTIAL),
        (2, 3, SaleStatus.PARTIAL),
        (3, 3, SaleStatus.PAID),
        (0, 0, SaleStatus.PENDING),
    ],
)
def test_compute_status(paid, total, expected):
    assert compute_status(paid, total) == expected


def test_reconcile_relee_el_store(store):
    generate_installments(store, "v1", 3, 100, "2024-01-15")
    generate_installments(store, "otra", 2, 50, "2024-01-15")
    assert reconcile(store, "v1").to_dict() == {"paidCount": 0, "totalCount": 3, "newStatus": "Em aberto"}

    store.update_installment("v1", 1, status="Pago", payment_date="2024-01-20 10:00:00")
    result = reconcile(store, "v1")
    assert (result.paid_count, result.total_count, result.status) == (1, 3, SaleStatus.PARTIAL)


def test_reconcile_venta_sin_parcelas(store):
    result = reconcile(store, "inexistente")
    assert (result.paid_count, result.total_count, result.status) == (0, 0, SaleStatus.PENDING)
