from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from cooperatives.models import Cooperative
from inventory.services import StockService
from materials.models import Material
from sales.models import Sale


class InsufficientStockError(Exception):
    def __init__(self, available: Decimal) -> None:
        self.available = available
        super().__init__(insufficient_stock_message(available))


def insufficient_stock_message(available: Decimal) -> str:
    return f"Estoque insuficiente! Disponível: {available:.2f} kg"


def summarize_sales(sales: Iterable[Sale]) -> dict[str, float | int]:
    total_sales = 0
    total_weight = Decimal("0")
    total_value = Decimal("0")
    for sale in sales:
        total_sales += 1
        total_weight += sale.weight_kg
        total_value += sale.total_value
    return {
        "totalSales": total_sales,
        "totalWeight": float(round(total_weight, 2)),
        "totalValue": float(round(total_value, 2)),
    }


def available_for_sale(
    material: Material,
    cooperative: Cooperative,
    *,
    instance: Optional[Sale] = None,
    lock: bool = False,
) -> Decimal:
    """Stock that a sale of ``material`` from ``cooperative`` may draw on.

    When editing a sale that already consumed stock from the same material and
    cooperative, its original weight counts as available again. With ``lock``
    the balance rows stay locked until the surrounding transaction ends.
    """
    available = max(StockService().available_for(material, cooperative, lock=lock), Decimal("0"))
    if (
        instance is not None
        and instance.pk
        and instance.material_id == material.pk
        and instance.cooperative_id == cooperative.pk
    ):
        available += instance.weight_kg
    return available
