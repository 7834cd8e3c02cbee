# NG-HEADER: Nombre de archivo: service.py
# NG-HEADER: Ubicación: services/sales/service.py
# NG-HEADER: Descripción: Orquestación de alta/edición de ventas y pago de parcelas sobre el almacenamiento.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Servicio de ventas y parcelas.

Objetivos:
- Alta de venta + generación de parcelas (con borrado compensatorio si falla).
- Edición de venta por clave primaria sin tocar las parcelas.
- Pago de parcela y reconciliación del estado de la venta.

Todas las operaciones son síncronas; la API las corre en un hilo.
"""
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping

from store.base import RowStore, StoreError

from .coercion import (
    coerce_count,
    coerce_numeric,
    now_timestamp,
    parse_decimal,
    quantize_money,
    to_decimal,
    to_exact_int,
    to_int,
)
from .errors import InstallmentNotFoundError, InvalidRequestError, SaleNotFoundError
from .installments import generate_installments
from .models import InstallmentStatus, Sale, SaleStatus
from .reconcile import compute_status, reconcile

logger = logging.getLogger(__name__)

# Tope de parcelas por venta si no se configura MAX_INSTALLMENTS
DEFAULT_MAX_INSTALLMENTS = 120

TEXT_FIELDS = (
    "payment_status",
    "customer_name",
    "city_state",
    "phone",
    "purchase_date",
    "payment_method",
    "litter",
    "sex",
    "color",
    "delivery_date",
    "responsible",
)


def new_sale_id() -> str:
    return uuid.uuid4().hex[:12]


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


class SalesService:
    def __init__(
        self,
        store: RowStore,
        strict_not_found: bool = False,
        max_installments: int = DEFAULT_MAX_INSTALLMENTS,
    ):
        self.store = store
        self.strict_not_found = strict_not_found
        self.max_installments = max_installments
        # sale_id -> [lock, usuarios]; la entrada se descarta cuando nadie la usa
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _sale_lock(self, sale_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(sale_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[sale_id]

    # --- Lecturas ---

    def setup(self) -> Dict[str, Any]:
        created = self.store.ensure_schema()
        logger.info("Setup de planilla: %s", created or "sin cambios")
        return {"success": True, "created": created}

    def list_sales(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.store.list_sales()]

    def list_installments(self) -> List[Dict[str, Any]]:
        return [i.to_dict() for i in self.store.list_installments()]

    def summary(self) -> Dict[str, Any]:
        """Totales por estado, vendido, cobrado y pendiente."""
        sales = self.store.list_sales()
        installments = self.store.list_installments()
        by_status = {s.value: 0 for s in SaleStatus}
        for sale in sales:
            by_status[sale.payment_status] = by_status.get(sale.payment_status, 0) + 1
        sold = sum((to_decimal(s.total_value) for s in sales), Decimal("0"))
        received = sum((to_decimal(i.value) for i in installments if i.is_paid), Decimal("0"))
        outstanding = sum((to_decimal(i.value) for i in installments if not i.is_paid), Decimal("0"))
        return {
            "success": True,
            "salesCount": len(sales),
            "installmentsCount": len(installments),
            "byStatus": by_status,
            "totalSold": float(sold),
            "totalReceived": float(received),
            "totalOutstanding": float(outstanding),
        }

    # --- Alta / edición ---

    def save_sale(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, Mapping):
            raise InvalidRequestError("El campo 'sale' debe ser un objeto")
        row_ref = fields.get("row")
        sale_id = _text(fields.get("sale_id"))
        if sale_id or row_ref not in (None, ""):
            return self._update_sale(fields, sale_id, row_ref)
        return self._create_sale(fields)

    def _apply_fields(self, sale: Sale, fields: Mapping[str, Any]) -> Sale:
        for name in TEXT_FIELDS:
            if name in fields:
                setattr(sale, name, _text(fields[name]))
        if "total_value" in fields:
            sale.total_value = coerce_numeric(fields["total_value"])
        if "installment_count" in fields:
            sale.installment_count = coerce_count(fields["installment_count"])
        if "installment_value" in fields:
            raw = fields["installment_value"]
            sale.installment_value = None if raw in (None, "") else coerce_numeric(raw)
        return sale

    def _update_sale(self, fields: Mapping[str, Any], sale_id: str, row_ref: Any) -> Dict[str, Any]:
        if sale_id:
            current = self.store.find_sale(sale_id)
        else:
            row = to_int(row_ref, 0)
            current = self.store.sale_at(row) if row > 1 else None
        if current is None:
            raise SaleNotFoundError(sale_id=sale_id or None, row=None if sale_id else to_int(row_ref, 0))
        # El ID es inmutable y el estado se deriva de las parcelas: ambos se ignoran del payload
        editable = {k: v for k, v in fields.items() if k not in ("sale_id", "payment_status", "row")}
        updated = self._apply_fields(current, editable)
        self.store.update_sale(updated)
        logger.info("Venta %s actualizada (fila %s)", updated.sale_id, updated.row)
        return {"success": True, "saleId": updated.sale_id}

    def _create_sale(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        sale = self._apply_fields(Sale(sale_id=new_sale_id()), fields)
        count = to_int(sale.installment_count, 1)
        if count < 1:
            count = 1
        if count > self.max_installments:
            raise InvalidRequestError(
                f"Cantidad de parcelas {count} supera el máximo permitido ({self.max_installments})"
            )
        total = to_decimal(sale.total_value)
        explicit = parse_decimal(sale.installment_value)
        declared = _text(fields.get("payment_status"))

        forced = None
        if count > 1:
            value = explicit if explicit is not None and explicit > 0 else quantize_money(total / count)
        else:
            value = total
            forced = InstallmentStatus.PAID if declared == SaleStatus.PAID.value else InstallmentStatus.PENDING

        # La fila guarda lo que efectivamente se generó
        sale.installment_count = count
        sale.installment_value = value

        paid_at_creation = count if forced == InstallmentStatus.PAID else 0
        sale.payment_status = compute_status(paid_at_creation, count).value

        self.store.append_sale(sale)
        try:
            generate_installments(self.store, sale.sale_id, count, value, sale.purchase_date, forced)
        except Exception:
            logger.exception("Venta %s: falló la generación de parcelas; se revierte la fila de venta", sale.sale_id)
            self._rollback_sale(sale.sale_id)
            raise
        logger.info("Venta %s creada: %d parcela(s), estado %s", sale.sale_id, count, sale.payment_status)
        return {"success": True, "saleId": sale.sale_id}

    def _rollback_sale(self, sale_id: str) -> None:
        try:
            if not self.store.delete_sale(sale_id):
                logger.error("Venta %s: no se encontró la fila a revertir", sale_id)
        except StoreError:
            logger.error("Venta %s: no se pudo revertir la fila; revisar la planilla a mano", sale_id, exc_info=True)

    # --- Pago ---

    def pay_installment(self, sale_id: Any, installment_number: Any) -> Dict[str, Any]:
        sale_id = _text(sale_id)
        # Un número no entero ("2.7") no coincide con ninguna parcela
        number = to_exact_int(installment_number)
        if not sale_id:
            raise InvalidRequestError("saleId es obligatorio")
        with self._sale_lock(sale_id):
            target = None
            if number is not None:
                target = next((i for i in self.store.installments_for(sale_id) if i.number == number), None)
            if target is None:
                if self.strict_not_found:
                    raise InstallmentNotFoundError(sale_id, installment_number)
                logger.warning("Pago ignorado: parcela %s de la venta %s no existe", installment_number, sale_id)
            elif target.is_paid:
                logger.info("Parcela %s de la venta %s ya estaba paga", number, sale_id)
            else:
                self.store.update_installment(
                    sale_id,
                    number,
                    status=InstallmentStatus.PAID.value,
                    payment_date=now_timestamp(),
                )
                logger.info("Parcela %s de la venta %s marcada como paga", number, sale_id)

            result = reconcile(self.store, sale_id)
            if self.store.update_sale_status(sale_id, result.status.value) is None:
                logger.warning("Venta %s no encontrada al actualizar su estado", sale_id)
        return {"success": True, **result.to_dict()}
