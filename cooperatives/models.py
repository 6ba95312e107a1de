from __future__ import annotations

from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Cooperative(TimeStampedModel):
    name = models.CharField("Nome", max_length=150)
    contact = models.CharField("Contato", max_length=150, blank=True)
    address = models.CharField("Endereço", max_length=255, blank=True)
    legacy_id = models.CharField("ID legado", max_length=64, blank=True, db_index=True)

    class Meta:
        verbose_name = "Cooperativa"
        verbose_name_plural = "Cooperativas"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Device(TimeStampedModel):
    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.CASCADE,
        related_name="devices",
        verbose_name="Cooperativa",
    )
    label = models.CharField("Identificação", max_length=64, blank=True)
    is_active = models.BooleanField("Ativo", default=True)

    class Meta:
        verbose_name = "Balança"
        verbose_name_plural = "Balanças"
        ordering = ("cooperative__name", "id")

    def __str__(self) -> str:
        return self.label or f"Balança #{self.pk}"
