# NG-HEADER: Nombre de archivo: __init__.py
# NG-HEADER: Ubicación: store/__init__.py
# NG-HEADER: Descripción: Selección del backend de almacenamiento configurado.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Fábrica del almacenamiento por filas según ``STORE_BACKEND``."""
from __future__ import annotations

import logging
from functools import lru_cache

from app_core.config import settings

from .base import RowStore, StoreError

logger = logging.getLogger(__name__)

__all__ = ["RowStore", "StoreError", "get_store"]


@lru_cache(maxsize=1)
def get_store() -> RowStore:
    """Instancia única del backend; se usa como dependencia de FastAPI y desde la CLI."""
    if settings.store_backend == "memory":
        from .memory import MemoryRowStore

        store: RowStore = MemoryRowStore(settings.sales_sheet, settings.installments_sheet)
        store.ensure_schema()
        logger.info("Almacenamiento en memoria inicializado")
        return store
    from .sheets import GoogleSheetsRowStore

    logger.info("Almacenamiento Google Sheets: %s", settings.spreadsheet_id)
    return GoogleSheetsRowStore(
        settings.spreadsheet_id,
        settings.google_credentials_path,
        settings.sales_sheet,
        settings.installments_sheet,
    )
