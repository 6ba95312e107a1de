from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Measurement(models.Model):
    wastepicker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="measurements",
        verbose_name="Catador",
    )
    material = models.ForeignKey(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="measurements",
        verbose_name="Material",
    )
    device = models.ForeignKey(
        "cooperatives.Device",
        on_delete=models.SET_NULL,
        related_name="measurements",
        null=True,
        blank=True,
        verbose_name="Balança",
    )
    cooperative = models.ForeignKey(
        "cooperatives.Cooperative",
        on_delete=models.PROTECT,
        related_name="measurements",
        null=True,
        blank=True,
        verbose_name="Cooperativa",
    )
    weight_kg = models.DecimalField(
        "Peso (kg)",
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    timestamp = models.DateTimeField("Registrado em", default=timezone.now, db_index=True)
    bag_filled = models.BooleanField("Bag cheio", default=False)
    legacy_id = models.CharField("ID legado", max_length=64, blank=True, db_index=True)

    class Meta:
        verbose_name = "Coleta"
        verbose_name_plural = "Coletas"
        ordering = ("-timestamp", "-id")

    def __str__(self) -> str:
        return f"{self.wastepicker} - {self.material} ({self.weight_kg} kg)"

    def save(self, *args, **kwargs):
        if self.cooperative_id is None and self.wastepicker_id:
            self.cooperative_id = self.wastepicker.cooperative_id
        super().save(*args, **kwargs)

    @property
    def local_date(self):
        return timezone.localtime(self.timestamp).date()


class WorkerContribution(models.Model):
    wastepicker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="contributions",
        verbose_name="Catador",
    )
    material = models.ForeignKey(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="contributions",
        verbose_name="Material",
    )
    cooperative = models.ForeignKey(
        "cooperatives.Cooperative",
        on_delete=models.SET_NULL,
        related_name="contributions",
        null=True,
        blank=True,
        verbose_name="Cooperativa",
    )
    iso_year = models.PositiveSmallIntegerField("Ano ISO")
    iso_week = models.PositiveSmallIntegerField("Semana ISO")
    period_start = models.DateField("Início da semana")
    period_end = models.DateField("Fim da semana")
    weight_kg = models.DecimalField("Peso (kg)", max_digits=12, decimal_places=2, default=Decimal("0"))
    earnings = models.DecimalField("Ganhos", max_digits=12, decimal_places=2, default=Decimal("0"))
    daily_breakdown = models.JSONField("Detalhe diário", default=list, blank=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Contribuição semanal"
        verbose_name_plural = "Contribuições semanais"
        ordering = ("-iso_year", "-iso_week", "wastepicker__full_name")
        constraints = [
            models.UniqueConstraint(
                fields=("wastepicker", "material", "iso_year", "iso_week"),
                name="unique_contribution_per_worker_material_week",
            )
        ]
        indexes = [
            models.Index(fields=("iso_year", "iso_week"), name="contribution_period_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.wastepicker} - {self.material} ({self.iso_year}W{self.iso_week:02d})"
