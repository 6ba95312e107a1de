from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Sum

from cooperatives.models import Cooperative
from materials.models import Material

from .models import MaterialStock


ZERO = Decimal("0.00")


def _pk(value) -> Optional[int]:
    if value is None:
        return None
    return getattr(value, "pk", value)


class StockService:
    """Keep ``MaterialStock`` balances in step with collections and sales."""

    def register_collection(
        self,
        *,
        material: Material | int,
        cooperative: Cooperative | int | None,
        quantity: Decimal,
    ) -> MaterialStock | None:
        if quantity == 0:
            return None
        with transaction.atomic():
            return self._apply_delta(
                material=material,
                cooperative=cooperative,
                collected_delta=quantity,
                sold_delta=ZERO,
            )

    def register_sale(
        self,
        *,
        material: Material | int,
        cooperative: Cooperative | int | None,
        quantity: Decimal,
    ) -> MaterialStock | None:
        if quantity == 0:
            return None
        with transaction.atomic():
            return self._apply_delta(
                material=material,
                cooperative=cooperative,
                collected_delta=ZERO,
                sold_delta=quantity,
            )

    def available_for(
        self,
        material: Material | int,
        cooperative: Cooperative | int | None,
        *,
        lock: bool = False,
    ) -> Decimal:
        balances = MaterialStock.objects.filter(
            material_id=_pk(material),
            cooperative_id=_pk(cooperative),
        )
        if lock:
            return sum((balance.current_stock_kg for balance in balances.select_for_update()), ZERO)
        stock = balances.aggregate(total=Sum("current_stock_kg"))["total"]
        return stock or ZERO

    def _apply_delta(
        self,
        *,
        material: Material | int,
        cooperative: Cooperative | int | None,
        collected_delta: Decimal,
        sold_delta: Decimal,
    ) -> MaterialStock:
        balance = self._get_balance(material, cooperative, lock=True)
        balance.total_collected_kg += collected_delta
        balance.total_sold_kg += sold_delta
        balance.current_stock_kg = balance.total_collected_kg - balance.total_sold_kg
        balance.save(
            update_fields=("total_collected_kg", "total_sold_kg", "current_stock_kg", "updated_at")
        )
        return balance

    def _get_balance(
        self,
        material: Material | int,
        cooperative: Cooperative | int | None,
        *,
        lock: bool = False,
    ) -> MaterialStock:
        qs = MaterialStock.objects
        if lock:
            qs = qs.select_for_update()
        balance, _ = qs.get_or_create(
            material_id=_pk(material),
            cooperative_id=_pk(cooperative),
            defaults={
                "total_collected_kg": ZERO,
                "total_sold_kg": ZERO,
                "current_stock_kg": ZERO,
            },
        )
        return balance
