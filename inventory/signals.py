from __future__ import annotations

from decimal import Decimal

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from measurements.models import Measurement
from sales.models import Sale

from .services import StockService


def _previous_state(model, instance, weight_field: str):
    if not instance.pk:
        return None
    return (
        model.objects.filter(pk=instance.pk)
        .values("material_id", "cooperative_id", weight_field)
        .first()
    )


@receiver(pre_save, sender=Measurement)
def cache_previous_measurement(sender, instance: Measurement, **kwargs) -> None:
    instance._previous_stock_state = _previous_state(Measurement, instance, "weight_kg")


@receiver(post_save, sender=Measurement)
def sync_stock_on_measurement_save(sender, instance: Measurement, created: bool, **kwargs) -> None:
    service = StockService()
    previous = getattr(instance, "_previous_stock_state", None)
    if previous:
        service.register_collection(
            material=previous["material_id"],
            cooperative=previous["cooperative_id"],
            quantity=previous["weight_kg"] * Decimal("-1"),
        )
    service.register_collection(
        material=instance.material_id,
        cooperative=instance.cooperative_id,
        quantity=Decimal(instance.weight_kg),
    )


@receiver(post_delete, sender=Measurement)
def restore_stock_on_measurement_delete(sender, instance: Measurement, **kwargs) -> None:
    if instance.weight_kg:
        StockService().register_collection(
            material=instance.material_id,
            cooperative=instance.cooperative_id,
            quantity=Decimal(instance.weight_kg) * Decimal("-1"),
        )


@receiver(pre_save, sender=Sale)
def cache_previous_sale(sender, instance: Sale, **kwargs) -> None:
    instance._previous_stock_state = _previous_state(Sale, instance, "weight_kg")


@receiver(post_save, sender=Sale)
def sync_stock_on_sale_save(sender, instance: Sale, created: bool, **kwargs) -> None:
    service = StockService()
    previous = getattr(instance, "_previous_stock_state", None)
    if previous:
        service.register_sale(
            material=previous["material_id"],
            cooperative=previous["cooperative_id"],
            quantity=previous["weight_kg"] * Decimal("-1"),
        )
    service.register_sale(
        material=instance.material_id,
        cooperative=instance.cooperative_id,
        quantity=Decimal(instance.weight_kg),
    )


@receiver(post_delete, sender=Sale)
def restore_stock_on_sale_delete(sender, instance: Sale, **kwargs) -> None:
    if instance.weight_kg:
        StockService().register_sale(
            material=instance.material_id,
            cooperative=instance.cooperative_id,
            quantity=Decimal(instance.weight_kg) * Decimal("-1"),
        )
