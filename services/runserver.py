# NG-HEADER: Nombre de archivo: runserver.py
# NG-HEADER: Ubicación: services/runserver.py
# NG-HEADER: Descripción: Runner local de desarrollo con Uvicorn.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Local development server runner."""

from __future__ import annotations

import uvicorn

from app_core.config import settings


def main() -> None:
    uvicorn.run(
        "services.api:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.env == "dev",
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
