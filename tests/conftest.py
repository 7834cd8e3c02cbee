#!/usr/bin/env python
# NG-HEADER: Nombre de archivo: conftest.py
# NG-HEADER: Ubicación: tests/conftest.py
# NG-HEADER: Descripción: Fixtures y configuración compartida de Pytest.
# NG-HEADER: Lineamientos: Ver AGENTS.md
import os
import sys
from pathlib import Path

import pytest

# Asegurar path del proyecto antes de importar módulos internos
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.append(str(project_root))

# -------- Entorno base de tests --------
# Store en memoria; nunca tocar una planilla real desde la suite
os.environ["STORE_BACKEND"] = "memory"
os.environ["ENV"] = "dev"
os.environ.setdefault("PAY_NOT_FOUND_STRICT", "false")

from fastapi.testclient import TestClient  # noqa: E402

from services.sales.service import SalesService  # noqa: E402
from store.memory import MemoryRowStore  # noqa: E402


@pytest.fixture
def store() -> MemoryRowStore:
    """Store limpio por test, con encabezados ya creados."""
    s = MemoryRowStore()
    s.ensure_schema()
    return s


@pytest.fixture
def service(store) -> SalesService:
    return SalesService(store)


@pytest.fixture
def client(service):
    """Cliente HTTP con el servicio del test inyectado en las dependencias."""
    from services.api import app
    from services.routers.actions import get_service
    from store import get_store

    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_store] = lambda: service.store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_sale(service):
    """Fábrica: crea una venta con valores por defecto razonables y devuelve su ID."""

    def _make(**fields) -> str:
        payload = {
            "customer_name": "Maria Souza",
            "city_state": "Campinas/SP",
            "phone": "19999990000",
            "purchase_date": "2024-01-15",
            "total_value": "1200",
            "payment_method": "Pix",
            "installment_count": "3",
            "litter": "N-07",
            "sex": "F",
            "color": "Caramelo",
            "responsible": "Ana",
        }
        payload.update(fields)
        return service.save_sale(payload)["saleId"]

    return _make
