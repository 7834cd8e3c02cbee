# NG-HEADER: Nombre de archivo: models.py
# NG-HEADER: Ubicación: services/sales/models.py
# NG-HEADER: Descripción: Registros tipados de venta y parcela y sus estados.
# NG-HEADER: Lineamientos: Ver AGENTS.md
"""Registros tipados de venta y parcela.

Los valores de los enums son los textos que viven en la planilla, por eso
quedan en portugués (``Em aberto``, ``Parcial``, ``Pago``, ``Pendente``).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union


class SaleStatus(str, Enum):
    PENDING = "Em aberto"
    PARTIAL = "Parcial"
    PAID = "Pago"


class InstallmentStatus(str, Enum):
    PENDING = "Pendente"
    PAID = "Pago"


# Columnas numéricas pueden quedar como texto si no se pudieron interpretar
Money = Union[Decimal, str]


@dataclass
class Sale:
    sale_id: str = ""
    payment_status: str = SaleStatus.PENDING.value
    customer_name: str = ""
    city_state: str = ""
    phone: str = ""
    purchase_date: str = ""
    total_value: Money = Decimal("0")
    payment_method: str = ""
    installment_count: Union[int, str] = 1
    installment_value: Optional[Money] = None
    litter: str = ""
    sex: str = ""
    color: str = ""
    delivery_date: str = ""
    responsible: str = ""
    # Fila de la planilla (1 = encabezado); None si aún no fue persistida
    row: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class Installment:
    sale_id: str
    number: int
    value: Money = Decimal("0")
    due_date: str = ""
    status: str = InstallmentStatus.PENDING.value
    payment_date: str = ""
    row: Optional[int] = field(default=None, compare=False)

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID.value

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


def _jsonable(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in data.items():
        if isinstance(v, Decimal):
            out[k] = float(v)
        elif isinstance(v, Enum):
            out[k] = v.value
        else:
            out[k] = v
    return out
