from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from cooperatives.models import TimeStampedModel


class MaterialGroupQuerySet(models.QuerySet):
    def resolve(self, name: str) -> "MaterialGroup":
        """Return the group matching ``name`` case-insensitively, creating it when absent."""

        cleaned = name.strip()
        group = self.filter(name__iexact=cleaned).first()
        if group is None:
            group = self.create(name=cleaned)
        return group


class MaterialGroup(models.Model):
    name = models.CharField("Nome", max_length=100, unique=True)

    objects = MaterialGroupQuerySet.as_manager()

    class Meta:
        verbose_name = "Grupo de material"
        verbose_name_plural = "Grupos de material"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Material(TimeStampedModel):
    name = models.CharField("Nome", max_length=150)
    group = models.ForeignKey(
        MaterialGroup,
        on_delete=models.PROTECT,
        related_name="materials",
        verbose_name="Grupo",
    )
    price_per_kg = models.DecimalField(
        "Preço por kg",
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    legacy_id = models.CharField("ID legado", max_length=64, blank=True, db_index=True)

    class Meta:
        verbose_name = "Material"
        verbose_name_plural = "Materiais"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name

    def is_in_use(self) -> bool:
        return (
            self.measurements.exists()
            or self.sales.exists()
            or self.stock_balances.exists()
            or self.contributions.exists()
        )
