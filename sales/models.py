from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from cooperatives.models import TimeStampedModel


class BuyerQuerySet(models.QuerySet):
    def resolve(self, name: str) -> tuple["Buyer", bool]:
        """Return the buyer named ``name`` case-insensitively, creating it when absent."""

        cleaned = name.strip()
        buyer = self.filter(name__iexact=cleaned).first()
        if buyer is not None:
            return buyer, False
        return self.create(name=cleaned), True


class Buyer(models.Model):
    name = models.CharField("Nome", max_length=150, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = BuyerQuerySet.as_manager()

    class Meta:
        verbose_name = "Comprador"
        verbose_name_plural = "Compradores"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Sale(TimeStampedModel):
    date = models.DateField("Data da venda", db_index=True)
    material = models.ForeignKey(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="sales",
        verbose_name="Material",
    )
    cooperative = models.ForeignKey(
        "cooperatives.Cooperative",
        on_delete=models.PROTECT,
        related_name="sales",
        verbose_name="Cooperativa",
    )
    weight_kg = models.DecimalField(
        "Peso vendido (kg)",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    price_per_kg = models.DecimalField(
        "Preço por kg",
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    buyer = models.ForeignKey(
        Buyer,
        on_delete=models.PROTECT,
        related_name="sales",
        verbose_name="Comprador",
    )
    responsible = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales_recorded",
        null=True,
        blank=True,
        verbose_name="Responsável",
    )
    legacy_id = models.CharField("ID legado", max_length=64, blank=True, db_index=True)

    class Meta:
        verbose_name = "Venda"
        verbose_name_plural = "Vendas"
        ordering = ("-date", "-id")

    def __str__(self) -> str:
        return f"{self.date:%d/%m/%Y} - {self.material} ({self.weight_kg} kg)"

    @property
    def total_value(self) -> Decimal:
        return (self.weight_kg or Decimal("0")) * (self.price_per_kg or Decimal("0"))
