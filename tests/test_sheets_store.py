# NG-HEADER: Nombre de archivo: test_sheets_store.py
# NG-HEADER: Ubicación: tests/test_sheets_store.py
# NG-HEADER: Descripción: Tests unitarios del store sobre Google Sheets (cliente mockeado).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Tests del store de Google Sheets con el recurso de googleapiclient mockeado."""

from unittest.mock import MagicMock, Mock

import pytest
from googleapiclient.errors import HttpError

from store.base import StoreError
from store.schema import INSTALLMENTS, SALES
from store.sheets import GoogleSheetsRowStore, column_letter


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def sheets(api, tmp_path):
    return GoogleSheetsRowStore("sid", str(tmp_path / "creds.json"), service=api)


def _values(api):
    return api.spreadsheets.return_value.values.return_value


class TestColumnLetter:
    def test_letras(self):
        assert column_letter(0) == "A"
        assert column_letter(14) == "O"
        assert column_letter(25) == "Z"
        assert column_letter(26) == "AA"
        assert column_letter(27) == "AB"


class TestGoogleSheetsRowStore:
    def test_read_rows(self, sheets, api):
        _values(api).get.return_value.execute.return_value = {"values": [SALES.headers, ["v1", "Pago"]]}
        assert sheets.read_rows("Vendas") == [SALES.headers, ["v1", "Pago"]]
        _values(api).get.assert_called_with(
            spreadsheetId="sid",
            range="'Vendas'",
            valueRenderOption="UNFORMATTED_VALUE",
            dateTimeRenderOption="FORMATTED_STRING",
        )

    def test_hoja_vacia(self, sheets, api):
        _values(api).get.return_value.execute.return_value = {}
        assert sheets.read_rows("Vendas") == []
        assert sheets.list_sales() == []

    def test_append_devuelve_primera_fila(self, sheets, api):
        _values(api).append.return_value.execute.return_value = {
            "updates": {"updatedRange": "'Parcelas'!A5:F7"}
        }
        assert sheets.append_rows("Parcelas", [["v1", 1], ["v1", 2], ["v1", 3]]) == 5
        kwargs = _values(api).append.call_args.kwargs
        assert kwargs["valueInputOption"] == "RAW"
        assert kwargs["insertDataOption"] == "INSERT_ROWS"
        assert kwargs["body"] == {"values": [["v1", 1], ["v1", 2], ["v1", 3]]}

    def test_append_respuesta_inesperada(self, sheets, api):
        _values(api).append.return_value.execute.return_value = {"updates": {}}
        with pytest.raises(StoreError):
            sheets.append_rows("Vendas", [["x"]])

    def test_write_cells_usa_batch(self, sheets, api):
        sheets.write_cells("Parcelas", 4, {5: "2024-01-20 10:00:00", 4: "Pago"})
        body = _values(api).batchUpdate.call_args.kwargs["body"]
        assert body["valueInputOption"] == "RAW"
        assert body["data"] == [
            {"range": "'Parcelas'!E4", "values": [["Pago"]]},
            {"range": "'Parcelas'!F4", "values": [["2024-01-20 10:00:00"]]},
        ]

    def test_write_row(self, sheets, api):
        sheets.write_row("Vendas", 3, ["v1", "Pago"])
        kwargs = _values(api).update.call_args.kwargs
        assert kwargs["range"] == "'Vendas'!A3"
        assert kwargs["body"] == {"values": [["v1", "Pago"]]}

    def test_delete_row_por_sheet_id(self, sheets, api):
        api.spreadsheets.return_value.get.return_value.execute.return_value = {
            "sheets": [{"properties": {"title": "Vendas", "sheetId": 0}}, {"properties": {"title": "Parcelas", "sheetId": 77}}]
        }
        sheets.delete_row("Parcelas", 5)
        body = api.spreadsheets.return_value.batchUpdate.call_args.kwargs["body"]
        assert body["requests"][0]["deleteDimension"]["range"] == {
            "sheetId": 77,
            "dimension": "ROWS",
            "startIndex": 4,
            "endIndex": 5,
        }

    def test_ensure_table_crea_hoja_y_encabezado(self, sheets, api):
        api.spreadsheets.return_value.get.return_value.execute.side_effect = [
            {"sheets": [{"properties": {"title": "Vendas", "sheetId": 0}}]},
            {"sheets": [{"properties": {"title": "Vendas", "sheetId": 0}}, {"properties": {"title": "Parcelas", "sheetId": 9}}]},
        ]
        _values(api).get.return_value.execute.return_value = {}
        assert sheets.ensure_table("Parcelas", INSTALLMENTS.headers) is True
        add = api.spreadsheets.return_value.batchUpdate.call_args.kwargs["body"]
        assert add == {"requests": [{"addSheet": {"properties": {"title": "Parcelas"}}}]}
        assert _values(api).update.call_args.kwargs["body"] == {"values": [INSTALLMENTS.headers]}

    def test_ensure_table_existente_no_escribe(self, sheets, api):
        api.spreadsheets.return_value.get.return_value.execute.return_value = {
            "sheets": [{"properties": {"title": "Vendas", "sheetId": 0}}]
        }
        _values(api).get.return_value.execute.return_value = {"values": [SALES.headers]}
        assert sheets.ensure_table("Vendas", SALES.headers) is False
        _values(api).update.assert_not_called()
        api.spreadsheets.return_value.batchUpdate.assert_not_called()

    def test_http_error_se_envuelve(self, sheets, api):
        err = HttpError(Mock(status=403, reason="Forbidden"), b"permission denied")
        _values(api).get.return_value.execute.side_effect = err
        with pytest.raises(StoreError) as exc:
            sheets.read_rows("Vendas")
        assert exc.value.__cause__ is err

    def test_credenciales_inexistentes(self, tmp_path):
        store = GoogleSheetsRowStore("sid", str(tmp_path / "missing.json"))
        with pytest.raises(StoreError):
            store.authenticate()

    def test_spreadsheet_id_obligatorio(self, tmp_path):
        with pytest.raises(StoreError):
            GoogleSheetsRowStore("", str(tmp_path / "creds.json"))
