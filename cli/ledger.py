# NG-HEADER: Nombre de archivo: ledger.py
# NG-HEADER: Ubicación: cli/ledger.py
# NG-HEADER: Descripción: CLI para inicializar la planilla, listar ventas/parcelas y registrar pagos.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""CLI de ventas y parcelas usando Typer."""
from __future__ import annotations

import json
from typing import Optional

import typer

from app_core.config import settings
from services.sales.service import SalesService
from store import StoreError, get_store

app = typer.Typer(help="Herramientas de línea de comandos para ventas y parcelas")


def _service() -> SalesService:
    return SalesService(
        get_store(),
        strict_not_found=settings.pay_not_found_strict,
        max_installments=settings.max_installments,
    )


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


@app.command()
def setup() -> None:
    """Crea las hojas Vendas/Parcelas y sus encabezados si faltan."""
    try:
        result = _service().setup()
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    created = result["created"]
    typer.echo("Creado: " + ", ".join(created) if created else "Nada que crear")


@app.command()
def sales(status: Optional[str] = typer.Option(None, help="Filtra por estado (Em aberto, Parcial, Pago)")) -> None:
    """Lista las ventas en JSON."""
    rows = _service().list_sales()
    if status:
        rows = [r for r in rows if r.get("payment_status") == status]
    _echo_json(rows)


@app.command()
def installments(sale_id: Optional[str] = typer.Argument(None, help="ID de la venta")) -> None:
    """Lista las parcelas (todas o las de una venta)."""
    rows = _service().list_installments()
    if sale_id:
        rows = [r for r in rows if r.get("sale_id") == sale_id]
    _echo_json(rows)


@app.command()
def pay(sale_id: str, number: int) -> None:
    """Marca la parcela NUMBER de SALE_ID como paga y reconcilia la venta."""
    _echo_json(_service().pay_installment(sale_id, number))


@app.command()
def summary() -> None:
    """Totales por estado, vendido y cobrado."""
    _echo_json(_service().summary())


if __name__ == "__main__":
    app()
