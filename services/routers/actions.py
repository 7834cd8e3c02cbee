# NG-HEADER: Nombre de archivo: actions.py
# NG-HEADER: Ubicación: services/routers/actions.py
# NG-HEADER: Descripción: Despacho de acciones (getSales, saveSale, payInstallment, ...).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Endpoint único direccionado por acción.

- ``GET /api?action=getSales|getInstallments|getSummary|setup``
- ``POST /api`` con cuerpo JSON ``{"action": "saveSale", "sale": {...}}`` o
  ``{"action": "payInstallment", "saleId": "...", "installmentNumber": 2}``
"""
from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from app_core.config import settings
from services.sales.errors import InvalidRequestError
from services.sales.service import SalesService
from store import get_store

router = APIRouter(prefix="/api", tags=["actions"])

READ_ACTIONS = ("getSales", "getInstallments", "getSummary", "setup")
WRITE_ACTIONS = ("saveSale", "payInstallment")


@lru_cache(maxsize=1)
def get_service() -> SalesService:
    # Instancia compartida: los locks por venta deben vivir entre requests
    return SalesService(
        get_store(),
        strict_not_found=settings.pay_not_found_strict,
        max_installments=settings.max_installments,
    )


@router.get("")
async def read_action(
    action: Optional[str] = Query(None), service: SalesService = Depends(get_service)
) -> Dict[str, Any]:
    if not action:
        raise InvalidRequestError("Parámetro 'action' obligatorio")
    if action == "getSales":
        return {"success": True, "sales": await asyncio.to_thread(service.list_sales)}
    if action == "getInstallments":
        return {"success": True, "installments": await asyncio.to_thread(service.list_installments)}
    if action == "getSummary":
        return await asyncio.to_thread(service.summary)
    if action == "setup":
        return await asyncio.to_thread(service.setup)
    raise InvalidRequestError(f"Acción desconocida: {action} (disponibles: {', '.join(READ_ACTIONS)})")


@router.post("")
async def write_action(request: Request, service: SalesService = Depends(get_service)) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError("Cuerpo JSON ausente o inválido") from None
    if not isinstance(body, dict):
        raise InvalidRequestError("El cuerpo debe ser un objeto JSON")
    action = body.get("action")
    if not action:
        raise InvalidRequestError("Campo 'action' obligatorio")

    if action == "saveSale":
        sale = body.get("sale")
        if not isinstance(sale, dict):
            raise InvalidRequestError("Campo 'sale' obligatorio (objeto)")
        return await asyncio.to_thread(service.save_sale, sale)
    if action == "payInstallment":
        sale_id = body.get("saleId")
        number = body.get("installmentNumber")
        if sale_id in (None, "") or number in (None, ""):
            raise InvalidRequestError("Campos 'saleId' e 'installmentNumber' obligatorios")
        return await asyncio.to_thread(service.pay_installment, sale_id, number)
    raise InvalidRequestError(f"Acción desconocida: {action} (disponibles: {', '.join(WRITE_ACTIONS)})")
