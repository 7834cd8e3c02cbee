# NG-HEADER: Nombre de archivo: health.py
# NG-HEADER: Ubicación: services/routers/health.py
# NG-HEADER: Descripción: Endpoints de healthcheck y estado del almacenamiento.
# NG-HEADER: Lineamientos: Ver AGENTS.md
from __future__ import annotations

"""Endpoints de health.

- Liveness básico (`/health`)
- Conectividad con la planilla (`/health/store`)
"""

import asyncio
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app_core.config import settings
from store import RowStore, get_store


router = APIRouter(prefix="/health", tags=["health"])
START_TIME = time.monotonic()


def _status(ok: bool, detail: str | None = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"ok": ok}
    if detail:
        out["detail"] = detail
    return out


@router.get("")
async def health_root() -> Dict[str, Any]:
    """Liveness simple del backend (si responde, está vivo)."""
    return {"status": "ok", "uptime_s": round(time.monotonic() - START_TIME, 1)}


@router.get("/store")
async def health_store(store: RowStore = Depends(get_store)) -> Dict[str, Any]:
    """Verifica que la planilla (o el store en memoria) responda."""
    start = time.perf_counter()
    try:
        await asyncio.to_thread(store.ping)
    except Exception as e:
        return {"backend": settings.store_backend, **_status(False, str(e))}
    ms = round((time.perf_counter() - start) * 1000, 1)
    return {"backend": settings.store_backend, "latency_ms": ms, **_status(True)}
