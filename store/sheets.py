# NG-HEADER: Nombre de archivo: sheets.py
# NG-HEADER: Ubicación: store/sheets.py
# NG-HEADER: Descripción: Almacenamiento por filas sobre Google Sheets API (Service Account).
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Cliente de Google Sheets que implementa :class:`store.base.RowStore`.

Lecturas con ``UNFORMATTED_VALUE`` (números como números, fechas con formato
como número de serie) y escrituras ``RAW`` para que la planilla guarde
exactamente lo que enviamos.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .base import RowStore, StoreError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_UPDATED_ROW_RE = re.compile(r"![A-Z]+(\d+)")


def column_letter(index: int) -> str:
    """Índice 0-based -> letra de columna (0 -> A, 25 -> Z, 26 -> AA)."""
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def _quote(table: str) -> str:
    return "'" + table.replace("'", "''") + "'"


class GoogleSheetsRowStore(RowStore):
    """Planilla de Google con una hoja por tabla."""

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_path: str,
        sales_table: str = "Vendas",
        installments_table: str = "Parcelas",
        service: Optional[object] = None,
    ):
        """Inicializa el cliente.

        Args:
            spreadsheet_id: ID de la planilla (el tramo largo de la URL).
            credentials_path: Ruta al JSON de Service Account; relativa a la raíz del proyecto.
            service: Recurso ya construido de ``googleapiclient`` (tests).
        """
        super().__init__(sales_table, installments_table)
        if not spreadsheet_id:
            raise StoreError("SPREADSHEET_ID vacío")
        creds_path = Path(credentials_path)
        if not creds_path.is_absolute():
            project_root = Path(__file__).resolve().parent.parent
            creds_path = project_root / creds_path
        self.credentials_path = creds_path
        self.spreadsheet_id = spreadsheet_id
        self.service = service
        self._sheet_ids: Dict[str, int] = {}

    def authenticate(self) -> None:
        """Autentica con Service Account y construye el cliente ``sheets v4``."""
        if not self.credentials_path.is_file():
            raise StoreError(f"Archivo de credenciales no encontrado: {self.credentials_path}")
        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(self.credentials_path), scopes=SCOPES
            )
            self.service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            logger.info("Autenticación con Google Sheets exitosa")
        except Exception as e:
            logger.error(f"Error al autenticar con Google Sheets: {e}")
            raise StoreError(f"Error de autenticación: {e}") from e

    def _spreadsheets(self):
        if self.service is None:
            self.authenticate()
        return self.service.spreadsheets()

    def _execute(self, request, what: str) -> dict:
        try:
            return request.execute() or {}
        except HttpError as e:
            logger.error(f"Error de Google Sheets al {what}: {e}")
            raise StoreError(f"Error al {what}: {e}") from e

    # --- Metadatos de hojas ---

    def _load_sheet_ids(self) -> Dict[str, int]:
        meta = self._execute(
            self._spreadsheets().get(
                spreadsheetId=self.spreadsheet_id, fields="sheets.properties(sheetId,title)"
            ),
            "leer metadatos de la planilla",
        )
        self._sheet_ids = {
            s["properties"]["title"]: s["properties"]["sheetId"] for s in meta.get("sheets", [])
        }
        return self._sheet_ids

    def _sheet_id(self, table: str) -> int:
        if table not in self._sheet_ids:
            self._load_sheet_ids()
        try:
            return self._sheet_ids[table]
        except KeyError:
            raise StoreError(f"Hoja inexistente: {table}") from None

    # --- Primitivas ---

    def read_rows(self, table: str) -> List[List[Any]]:
        result = self._execute(
            self._spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=_quote(table),
                valueRenderOption="UNFORMATTED_VALUE",
                dateTimeRenderOption="FORMATTED_STRING",
            ),
            f"leer {table}",
        )
        rows = result.get("values", [])
        logger.debug(f"{table}: {len(rows)} filas leídas")
        return rows

    def append_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> int:
        result = self._execute(
            self._spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=f"{_quote(table)}!A1",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(r) for r in rows]},
            ),
            f"agregar filas en {table}",
        )
        updated = (result.get("updates") or {}).get("updatedRange", "")
        m = _UPDATED_ROW_RE.search(updated)
        if not m:
            raise StoreError(f"Respuesta inesperada al agregar filas en {table}: {updated!r}")
        first = int(m.group(1))
        logger.info(f"{table}: {len(rows)} filas agregadas desde la fila {first}")
        return first

    def write_row(self, table: str, row: int, values: Sequence[Any]) -> None:
        self._execute(
            self._spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{_quote(table)}!A{row}",
                valueInputOption="RAW",
                body={"values": [list(values)]},
            ),
            f"escribir fila {row} de {table}",
        )

    def write_cells(self, table: str, row: int, cells: Dict[int, Any]) -> None:
        if not cells:
            return
        data = [
            {"range": f"{_quote(table)}!{column_letter(col)}{row}", "values": [[value]]}
            for col, value in sorted(cells.items())
        ]
        self._execute(
            self._spreadsheets().values().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"valueInputOption": "RAW", "data": data},
            ),
            f"escribir celdas de la fila {row} en {table}",
        )

    def delete_row(self, table: str, row: int) -> None:
        request = {
            "deleteDimension": {
                "range": {
                    "sheetId": self._sheet_id(table),
                    "dimension": "ROWS",
                    "startIndex": row - 1,
                    "endIndex": row,
                }
            }
        }
        self._execute(
            self._spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id, body={"requests": [request]}
            ),
            f"borrar fila {row} de {table}",
        )
        logger.info(f"{table}: fila {row} borrada")

    def ensure_table(self, table: str, headers: Sequence[str]) -> bool:
        created = False
        if table not in self._load_sheet_ids():
            self._execute(
                self._spreadsheets().batchUpdate(
                    spreadsheetId=self.spreadsheet_id,
                    body={"requests": [{"addSheet": {"properties": {"title": table}}}]},
                ),
                f"crear hoja {table}",
            )
            self._load_sheet_ids()
            created = True
            logger.info(f"Hoja {table} creada")
        first = self._execute(
            self._spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id, range=f"{_quote(table)}!1:1"
            ),
            f"leer encabezado de {table}",
        ).get("values", [])
        if not first or not any(str(h).strip() for h in first[0]):
            self.write_row(table, 1, list(headers))
            created = True
            logger.info(f"Encabezado de {table} inicializado")
        return created

    def ping(self) -> bool:
        self._execute(
            self._spreadsheets().get(spreadsheetId=self.spreadsheet_id, fields="spreadsheetId"),
            "verificar conexión",
        )
        return True
