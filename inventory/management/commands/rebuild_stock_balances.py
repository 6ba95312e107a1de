from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from django.core.management.base import BaseCommand, CommandParser
from django.db import transaction
from django.db.models import Sum

from inventory.models import MaterialStock
from measurements.models import Measurement
from sales.models import Sale


StockKey = tuple[int, Optional[int]]


class Command(BaseCommand):
    help = (
        "Recalcula os saldos de estoque de cada material/cooperativa a partir das "
        "coletas e vendas registradas."
    )

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--material",
            type=int,
            help="ID do material a recalcular. Se omitido, todos são processados.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        material_id: int | None = options.get("material")
        updated = self._rebuild(material_id)
        self.stdout.write(self.style.SUCCESS(f"Saldos atualizados: {updated}"))

    def _totals(self, queryset, material_id: int | None) -> dict[StockKey, Decimal]:
        if material_id:
            queryset = queryset.filter(material_id=material_id)
        rows = queryset.values("material_id", "cooperative_id").annotate(total=Sum("weight_kg")).order_by()
        return {(row["material_id"], row["cooperative_id"]): row["total"] or Decimal("0.00") for row in rows}

    def _rebuild(self, material_id: int | None) -> int:
        collected = self._totals(Measurement.objects.all(), material_id)
        sold = self._totals(Sale.objects.all(), material_id)
        targets: dict[StockKey, tuple[Decimal, Decimal]] = {
            key: (collected.get(key, Decimal("0.00")), sold.get(key, Decimal("0.00")))
            for key in set(collected) | set(sold)
        }

        balances = MaterialStock.objects.all()
        if material_id:
            balances = balances.filter(material_id=material_id)

        updated = 0
        with transaction.atomic():
            for balance in balances.select_for_update():
                key = (balance.material_id, balance.cooperative_id)
                if key not in targets:
                    targets[key] = (Decimal("0.00"), Decimal("0.00"))
            for (material, cooperative), (total_collected, total_sold) in targets.items():
                current = total_collected - total_sold
                balance, created = MaterialStock.objects.get_or_create(
                    material_id=material,
                    cooperative_id=cooperative,
                    defaults={
                        "total_collected_kg": total_collected,
                        "total_sold_kg": total_sold,
                        "current_stock_kg": current,
                    },
                )
                if created:
                    updated += 1
                    continue
                if (
                    balance.total_collected_kg != total_collected
                    or balance.total_sold_kg != total_sold
                    or balance.current_stock_kg != current
                ):
                    balance.total_collected_kg = total_collected
                    balance.total_sold_kg = total_sold
                    balance.current_stock_kg = current
                    balance.save(
                        update_fields=("total_collected_kg", "total_sold_kg", "current_stock_kg", "updated_at")
                    )
                    updated += 1
        return updated
