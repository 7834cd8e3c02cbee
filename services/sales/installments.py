# NG-HEADER: Nombre de archivo: installments.py
# NG-HEADER: Ubicación: services/sales/installments.py
# NG-HEADER: Descripción: Generación del cronograma de parcelas de una venta.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Generación de parcelas.

El valor de cada parcela lo resuelve quien llama (valor explícito o
total/cantidad); no se redistribuye el resto del redondeo.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional

from .coercion import add_months, format_date, now_timestamp, parse_date, to_decimal
from .models import Installment, InstallmentStatus

logger = logging.getLogger(__name__)


def build_installments(
    sale_id: str,
    count: int,
    value: Any,
    start_date: Any = None,
    forced_status: Optional[InstallmentStatus] = None,
) -> List[Installment]:
    """Arma ``count`` parcelas con vencimiento mensual desde ``start_date``.

    - ``count < 1`` -> lista vacía.
    - Fecha ausente o ilegible -> hoy.
    - ``forced_status=PAID`` marca todas como pagadas con fecha de pago actual.
    """
    if count < 1:
        return []
    start = parse_date(start_date) or date.today()
    amount = to_decimal(value)
    status = forced_status or InstallmentStatus.PENDING
    paid_at = now_timestamp() if status == InstallmentStatus.PAID else ""
    return [
        Installment(
            sale_id=sale_id,
            number=n,
            value=amount,
            due_date=format_date(add_months(start, n - 1)),
            status=status.value,
            payment_date=paid_at,
        )
        for n in range(1, count + 1)
    ]


def generate_installments(
    store,
    sale_id: str,
    count: int,
    value: Any,
    start_date: Any = None,
    forced_status: Optional[InstallmentStatus] = None,
) -> List[Installment]:
    """Construye las parcelas y las agrega a la hoja en una sola escritura."""
    installments = build_installments(sale_id, count, value, start_date, forced_status)
    if installments:
        store.append_installments(installments)
        logger.info(
            "Venta %s: %d parcelas generadas (%s c/u, estado %s)",
            sale_id,
            len(installments),
            installments[0].value,
            installments[0].status,
        )
    return installments
