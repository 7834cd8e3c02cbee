# NG-HEADER: Nombre de archivo: test_actions.py
# NG-HEADER: Ubicación: tests/routers/test_actions.py
# NG-HEADER: Descripción: Tests del endpoint de acciones (getSales, saveSale, payInstallment...).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Tests del despacho de acciones sobre el store en memoria."""

import pytest
from httpx import ASGITransport, AsyncClient

from services.api import app
from services.routers.actions import get_service
from store.base import StoreError


def _new_sale(client, **fields):
    sale = {
        "customer_name": "Pedro Alves",
        "purchase_date": "2024-01-15",
        "total_value": "1200",
        "installment_count": 3,
    }
    sale.update(fields)
    resp = client.post("/api", json={"action": "saveSale", "sale": sale})
    assert resp.status_code == 200
    return resp.json()["saleId"]


class TestReadActions:
    def test_get_sales_vacio(self, client):
        resp = client.get("/api", params={"action": "getSales"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "sales": []}

    def test_get_installments(self, client):
        sale_id = _new_sale(client)
        data = client.get("/api", params={"action": "getInstallments"}).json()
        assert data["success"] is True
        assert [(i["sale_id"], i["number"], i["due_date"]) for i in data["installments"]] == [
            (sale_id, 1, "2024-01-15"),
            (sale_id, 2, "2024-02-15"),
            (sale_id, 3, "2024-03-15"),
        ]
        assert {i["value"] for i in data["installments"]} == {400.0}

    def test_setup(self, client):
        assert client.get("/api?action=setup").json() == {"success": True, "created": []}

    def test_summary(self, client):
        _new_sale(client)
        data = client.get("/api?action=getSummary").json()
        assert data["salesCount"] == 1
        assert data["totalOutstanding"] == 1200.0

    def test_sin_accion(self, client):
        resp = client.get("/api")
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_accion_desconocida(self, client):
        resp = client.get("/api", params={"action": "dropTables"})
        assert resp.status_code == 400
        assert "dropTables" in resp.json()["error"]


class TestWriteActions:
    def test_save_sale_nueva(self, client):
        resp = client.post(
            "/api",
            json={"action": "saveSale", "sale": {"total_value": "500", "installment_count": 1, "payment_status": "Pago"}},
        )
        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True and body["saleId"]
        sales = client.get("/api?action=getSales").json()["sales"]
        assert sales[0]["payment_status"] == "Pago"
        assert sales[0]["row"] == 2

    def test_save_sale_edicion(self, client):
        sale_id = _new_sale(client)
        resp = client.post(
            "/api", json={"action": "saveSale", "sale": {"row": 2, "customer_name": "Pedro A."}}
        )
        assert resp.json() == {"success": True, "saleId": sale_id}
        assert client.get("/api?action=getSales").json()["sales"][0]["customer_name"] == "Pedro A."

    def test_save_sale_edicion_inexistente(self, client):
        resp = client.post("/api", json={"action": "saveSale", "sale": {"sale_id": "nope"}})
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    def test_pay_installment(self, client):
        sale_id = _new_sale(client)
        client.post("/api", json={"action": "payInstallment", "saleId": sale_id, "installmentNumber": 1})
        resp = client.post("/api", json={"action": "payInstallment", "saleId": sale_id, "installmentNumber": "2"})
        assert resp.json() == {"success": True, "paidCount": 2, "totalCount": 3, "newStatus": "Parcial"}
        assert client.get("/api?action=getSales").json()["sales"][0]["payment_status"] == "Parcial"

    def test_save_sale_demasiadas_parcelas(self, client):
        resp = client.post("/api", json={"action": "saveSale", "sale": {"total_value": "10", "installment_count": "1e30"}})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert client.get("/api?action=getSales").json()["sales"] == []

    def test_pay_installment_numero_fraccionario(self, client):
        sale_id = _new_sale(client)
        resp = client.post("/api", json={"action": "payInstallment", "saleId": sale_id, "installmentNumber": 2.7})
        assert resp.json() == {"success": True, "paidCount": 0, "totalCount": 3, "newStatus": "Em aberto"}

    def test_pay_installment_desconocida(self, client):
        resp = client.post("/api", json={"action": "payInstallment", "saleId": "x", "installmentNumber": 1})
        assert resp.json() == {"success": True, "paidCount": 0, "totalCount": 0, "newStatus": "Em aberto"}

    @pytest.mark.parametrize(
        "body",
        [
            {"action": "saveSale"},
            {"action": "payInstallment", "saleId": "x"},
            {"action": "payInstallment", "installmentNumber": 1},
            {"action": "getSales"},
            {"sale": {}},
            ["saveSale"],
        ],
    )
    def test_cuerpo_invalido(self, client, body):
        resp = client.post("/api", json=body)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_sin_cuerpo(self, client):
        resp = client.post("/api", content=b"", headers={"content-type": "application/json"})
        assert resp.status_code == 400


class TestErrores:
    def test_error_de_store_es_502(self, client, service, monkeypatch):
        def down():
            raise StoreError("planilla no disponible")

        monkeypatch.setattr(service, "list_sales", down)
        resp = client.get("/api?action=getSales")
        assert resp.status_code == 502
        assert resp.json() == {"success": False, "error": "planilla no disponible"}

    def test_falla_inesperada_es_500(self, client, service, monkeypatch):
        def boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(service, "list_installments", boom)
        resp = client.get("/api?action=getInstallments")
        assert resp.status_code == 500
        assert resp.json()["success"] is False
        assert "boom" in resp.json()["error"]

    def test_correlation_id(self, client):
        resp = client.get("/api?action=getSales", headers={"X-Correlation-Id": "abc-123"})
        assert resp.headers["X-Correlation-Id"] == "abc-123"


@pytest.mark.asyncio
async def test_flujo_completo_async(service):
    app.dependency_overrides[get_service] = lambda: service
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.post(
                "/api",
                json={"action": "saveSale", "sale": {"total_value": "300", "installment_count": 2, "purchase_date": "2024-05-10"}},
            )
            sale_id = resp.json()["saleId"]
            for n in (1, 2):
                resp = await ac.post("/api", json={"action": "payInstallment", "saleId": sale_id, "installmentNumber": n})
            assert resp.json() == {"success": True, "paidCount": 2, "totalCount": 2, "newStatus": "Pago"}
    finally:
        app.dependency_overrides.clear()
