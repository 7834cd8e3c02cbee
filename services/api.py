# NG-HEADER: Nombre de archivo: api.py
# NG-HEADER: Ubicación: services/api.py
# NG-HEADER: Descripción: Aplicación FastAPI, logging, middleware de requests y manejadores de error.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Aplicación FastAPI principal del backend de ventas."""

import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi import HTTPException as FastHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from app_core.config import settings
from services.routers import actions, health
from services.sales.errors import SalesError
from store.base import StoreError

raw_level = settings.log_level or "INFO"
level_name = raw_level.strip().upper()
if level_name not in logging._nameToLevel:
    level_name = "INFO"
logger = logging.getLogger("vendas")
LOG_DIR = Path(__file__).resolve().parents[1] / "logs"
try:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
except Exception:
    pass
fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(fmt)

file_handler = None
log_path = LOG_DIR / "backend.log"
try:
    # Probar permiso de append antes de crear el handler
    with open(log_path, "a", encoding="utf-8"):
        pass
    file_handler = RotatingFileHandler(
        str(log_path), maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8", delay=True
    )
    file_handler.setFormatter(fmt)
except Exception:
    # Sin permisos o archivo bloqueado: continuar solo con consola
    file_handler = None

handlers = [h for h in (file_handler, stream_handler) if h is not None]
# Loggers propios (por paquete) + uvicorn comparten handlers y nivel
for name in ("vendas", "services", "store", "app_core", "uvicorn", "uvicorn.error", "uvicorn.access"):
    lg = logging.getLogger(name)
    lg.handlers = handlers
    lg.setLevel(level_name)
    lg.propagate = False

app = FastAPI(title="Vendas e Parcelas", redirect_slashes=False)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Registra cada solicitud y captura excepciones con un correlation-id."""
    start = time.perf_counter()
    corr = request.headers.get("x-correlation-id") or request.headers.get("x-request-id")
    if not corr:
        corr = f"req-{int(time.time()*1000):x}-{os.getpid():x}"
    try:
        resp = await call_next(request)
    except (FastHTTPException, StarletteHTTPException):
        raise
    except Exception as exc:
        dur = (time.perf_counter() - start) * 1000
        logger.exception("EXC %s %s cid=%s (%.2fms)", request.method, request.url.path, corr, dur)
        return JSONResponse(
            {"success": False, "error": f"{type(exc).__name__}: {exc}"},
            status_code=500,
            headers={"X-Correlation-Id": corr},
        )
    dur = (time.perf_counter() - start) * 1000
    resp.headers["X-Correlation-Id"] = corr
    logger.info("%s %s -> %s cid=%s (%.2fms)", request.method, request.url.path, resp.status_code, corr, dur)
    return resp


# --- Exception Handlers Específicos ---
@app.exception_handler(SalesError)
async def sales_error_handler(request: Request, exc: SalesError):  # type: ignore[override]
    """Errores del dominio: 400 (solicitud inválida) o 404 (venta/parcela inexistente)."""
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse({"success": False, "error": str(exc)}, status_code=exc.status_code)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):  # type: ignore[override]
    """La planilla no respondió o rechazó la operación."""
    logger.error("Error de almacenamiento en %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"success": False, "error": str(exc)}, status_code=502)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
    """Registra detalles de validación por campo y responde 400 con el formato común."""
    flat = []
    for e in exc.errors():
        loc = ".".join([str(p) for p in e.get("loc", [])])
        flat.append(f"{loc}: {e.get('msg', '')}")
    logger.warning("Validación fallida %s %s: %s", request.method, request.url.path, flat)
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(flat)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=bool(settings.allowed_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(actions.router)
app.include_router(health.router)

logger.info("Backend de ventas listo (store=%s, env=%s)", settings.store_backend, settings.env)
