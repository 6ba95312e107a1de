from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from materials.models import Material
from measurements.models import Measurement, WorkerContribution


logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class DailyContribution:
    worker_id: int
    material_id: int
    cooperative_id: Optional[int]
    day: date
    net_weight: Decimal


@dataclass
class _WeeklyBucket:
    worker_id: int
    material_id: int
    cooperative_id: Optional[int]
    iso_year: int
    iso_week: int
    total_weight: Decimal = Decimal("0")
    daily_breakdown: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class RecalculationResult:
    processed: int
    statistics: dict[str, Any]


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_daily_contributions(measurements: Iterable[Measurement]) -> list[DailyContribution]:
    """Collapse the scale readings of a day into one net weight per worker and material.

    A day with a filled bag counts the weight of the first filled reading. Any
    other day counts its heaviest reading.
    """
    grouped: dict[tuple[int, int, date], list[Measurement]] = defaultdict(list)
    for measurement in measurements:
        key = (measurement.wastepicker_id, measurement.material_id, measurement.local_date)
        grouped[key].append(measurement)

    contributions: list[DailyContribution] = []
    for (worker_id, material_id, day), readings in sorted(grouped.items(), key=lambda item: item[0]):
        readings.sort(key=lambda reading: (reading.timestamp, reading.pk or 0))
        filled = next((reading for reading in readings if reading.bag_filled), None)
        if filled is not None:
            net_weight = Decimal(filled.weight_kg)
        else:
            net_weight = max(Decimal(reading.weight_kg) for reading in readings)
        if net_weight <= 0:
            continue
        contributions.append(
            DailyContribution(
                worker_id=worker_id,
                material_id=material_id,
                cooperative_id=readings[-1].cooperative_id,
                day=day,
                net_weight=net_weight,
            )
        )
    return contributions


def _bucket_by_week(daily: Iterable[DailyContribution]) -> list[_WeeklyBucket]:
    buckets: dict[tuple[int, int, int, int], _WeeklyBucket] = {}
    for contribution in daily:
        iso_year, iso_week, _ = contribution.day.isocalendar()
        key = (contribution.worker_id, contribution.material_id, iso_year, iso_week)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = _WeeklyBucket(
                worker_id=contribution.worker_id,
                material_id=contribution.material_id,
                cooperative_id=contribution.cooperative_id,
                iso_year=iso_year,
                iso_week=iso_week,
            )
            buckets[key] = bucket
        bucket.total_weight += contribution.net_weight
        bucket.daily_breakdown.append(
            {"date": contribution.day.isoformat(), "weight": float(_quantize(contribution.net_weight))}
        )
    return list(buckets.values())


def _material_prices(material_ids: Iterable[int]) -> dict[int, Decimal]:
    default_price = Decimal(settings.DMS_DEFAULT_PRICE_PER_KG)
    prices: dict[int, Decimal] = {}
    for material_id, price in Material.objects.filter(pk__in=set(material_ids)).values_list("pk", "price_per_kg"):
        prices[material_id] = price if price else default_price
    return prices


def recalculate_contributions() -> RecalculationResult:
    """Rebuild every weekly contribution from the raw measurements."""
    measurements = list(
        Measurement.objects.only(
            "pk",
            "wastepicker_id",
            "material_id",
            "cooperative_id",
            "weight_kg",
            "timestamp",
            "bag_filled",
        )
    )
    if not measurements:
        logger.info("No measurements found; contributions left untouched")
        return RecalculationResult(processed=0, statistics={})

    daily = calculate_daily_contributions(measurements)
    buckets = _bucket_by_week(daily)
    prices = _material_prices(bucket.material_id for bucket in buckets)
    default_price = Decimal(settings.DMS_DEFAULT_PRICE_PER_KG)
    now = timezone.now()

    rows: list[WorkerContribution] = []
    for bucket in buckets:
        period_start = date.fromisocalendar(bucket.iso_year, bucket.iso_week, 1)
        weight = _quantize(bucket.total_weight)
        price = prices.get(bucket.material_id, default_price)
        rows.append(
            WorkerContribution(
                wastepicker_id=bucket.worker_id,
                material_id=bucket.material_id,
                cooperative_id=bucket.cooperative_id,
                iso_year=bucket.iso_year,
                iso_week=bucket.iso_week,
                period_start=period_start,
                period_end=period_start + timedelta(days=6),
                weight_kg=weight,
                earnings=_quantize(bucket.total_weight * price),
                daily_breakdown=bucket.daily_breakdown,
                last_updated=now,
            )
        )

    with transaction.atomic():
        WorkerContribution.objects.all().delete()
        WorkerContribution.objects.bulk_create(rows)

    total_weight = sum((row.weight_kg for row in rows), Decimal("0"))
    total_earnings = sum((row.earnings for row in rows), Decimal("0"))
    statistics = {
        "totalMeasurements": len(measurements),
        "dailyContributions": len(daily),
        "weeklyContributions": len(rows),
        "totalWorkers": len({item.worker_id for item in daily}),
        "totalMaterials": len({item.material_id for item in daily}),
        "totalWeight": float(_quantize(total_weight)),
        "totalEarnings": float(_quantize(total_earnings)),
    }
    logger.info(
        "Recalculated %s weekly contributions from %s measurements",
        len(rows),
        len(measurements),
    )
    return RecalculationResult(processed=len(rows), statistics=statistics)
