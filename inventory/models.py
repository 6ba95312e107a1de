from __future__ import annotations

from decimal import Decimal

from django.db import models


class MaterialStock(models.Model):
    cooperative = models.ForeignKey(
        "cooperatives.Cooperative",
        on_delete=models.PROTECT,
        related_name="stock_balances",
        null=True,
        blank=True,
        verbose_name="Cooperativa",
    )
    material = models.ForeignKey(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="stock_balances",
        verbose_name="Material",
    )
    total_collected_kg = models.DecimalField(
        "Total coletado (kg)",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    total_sold_kg = models.DecimalField(
        "Total vendido (kg)",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    current_stock_kg = models.DecimalField(
        "Estoque atual (kg)",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Estoque de material"
        verbose_name_plural = "Estoques de materiais"
        ordering = ("material__name", "cooperative__name")
        constraints = [
            models.UniqueConstraint(
                fields=("cooperative", "material"),
                name="unique_stock_per_cooperative_material",
            )
        ]

    def __str__(self) -> str:
        cooperative = self.cooperative.name if self.cooperative_id else "Sem cooperativa"
        return f"{self.material} @ {cooperative}: {self.current_stock_kg} kg"
