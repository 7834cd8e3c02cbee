# NG-HEADER: Nombre de archivo: config.py
# NG-HEADER: Ubicación: app_core/config.py
# NG-HEADER: Descripción: Constantes y configuración central del backend de ventas.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Configuración central del backend de ventas y parcelas."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Carga automática de variables definidas en .env
load_dotenv()

STORE_BACKENDS = ("sheets", "memory")


def _expand_local(origins: list[str]) -> list[str]:
    """Duplica ``localhost``/``127.0.0.1`` para evitar errores de CORS en desarrollo."""
    out: set[str] = set()
    for o in origins:
        o = o.strip()
        if not o:
            continue
        out.add(o)
        if o.startswith("http://localhost:"):
            out.add(o.replace("http://localhost:", "http://127.0.0.1:"))
        if o.startswith("http://127.0.0.1:"):
            out.add(o.replace("http://127.0.0.1:", "http://localhost:"))
    return list(out)


def _env_bool(name: str, default: str = "false") -> bool:
    return (os.getenv(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Parámetros de configuración leídos de variables de entorno."""

    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Backend de almacenamiento: planilla de Google o memoria (tests / demo local)
    store_backend: str = os.getenv("STORE_BACKEND", "sheets")
    spreadsheet_id: str = os.getenv("SPREADSHEET_ID", "")
    google_credentials_path: str = os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials/service_account.json")
    sales_sheet: str = os.getenv("SALES_SHEET", "Vendas")
    installments_sheet: str = os.getenv("INSTALLMENTS_SHEET", "Parcelas")
    # Si es True, pagar una parcela inexistente devuelve 404 en vez de no-op
    pay_not_found_strict: bool = _env_bool("PAY_NOT_FOUND_STRICT")
    # Máximo de parcelas aceptado al crear una venta
    max_installments: int = int(os.getenv("MAX_INSTALLMENTS", "120"))
    app_host: str = os.getenv("APP_HOST", "127.0.0.1")
    app_port: int = int(os.getenv("APP_PORT", "8000"))
    allowed_origins: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.store_backend = (self.store_backend or "sheets").strip().lower()
        if self.store_backend not in STORE_BACKENDS:
            raise RuntimeError(
                f"STORE_BACKEND inválido: {self.store_backend!r} (opciones: {', '.join(STORE_BACKENDS)})"
            )
        if self.store_backend == "sheets" and not self.spreadsheet_id:
            if self.env == "dev":
                # Fallback amigable para no bloquear el arranque local sin planilla
                logging.getLogger("vendas.config").warning(
                    "SPREADSHEET_ID no definido; usando almacenamiento en memoria (solo dev)"
                )
                self.store_backend = "memory"
            else:
                raise RuntimeError("SPREADSHEET_ID debe definirse en el entorno")

        raw = os.getenv("ALLOWED_ORIGINS", "").split(",")
        origins = [o.strip() for o in raw if o.strip()]
        if self.env == "dev":
            if not origins:
                origins = ["http://localhost:5173"]
            origins = _expand_local(origins)
        self.allowed_origins = origins


settings = Settings()
