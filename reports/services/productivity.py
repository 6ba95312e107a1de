from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from django.utils import timezone

from measurements.models import Measurement
from users.models import Worker

from .periods import br_date, day_end, day_start, iso_week_bounds, iso_week_key, parse_week_key


DEFAULT_WEEKS = 12
MAX_WEEKS = 520
TOP_MATERIALS = 5


@dataclass(frozen=True)
class NetReading:
    day: date
    material_id: int
    weight: Decimal
    bag_filled: bool
    timestamp: datetime
    net_weight: Decimal


def _round(value: Decimal) -> float:
    return float(round(value, 2))


def calculate_net_readings(measurements: Iterable[Measurement]) -> list[NetReading]:
    """Turn cumulative scale readings into the weight each reading added.

    Readings are grouped per local day and material. The first reading of a
    group counts in full and the following ones count the increase over the
    previous reading. A filled bag counts its weight minus the first reading
    of the day. Negative results count as zero.
    """
    grouped: dict[tuple[date, int], list[Measurement]] = defaultdict(list)
    for measurement in measurements:
        grouped[(measurement.local_date, measurement.material_id)].append(measurement)

    readings: list[NetReading] = []
    for (day, material_id), items in grouped.items():
        items.sort(key=lambda item: (item.timestamp, item.pk or 0))
        first_weight = Decimal(items[0].weight_kg)
        previous_weight = Decimal("0")
        for index, item in enumerate(items):
            weight = Decimal(item.weight_kg)
            net = weight if index == 0 else weight - previous_weight
            if item.bag_filled:
                net = weight - (first_weight if index > 0 else Decimal("0"))
            readings.append(
                NetReading(
                    day=day,
                    material_id=material_id,
                    weight=weight,
                    bag_filled=item.bag_filled,
                    timestamp=item.timestamp,
                    net_weight=max(net, Decimal("0")),
                )
            )
            previous_weight = weight
    readings.sort(key=lambda reading: reading.timestamp)
    return readings


def _empty_result() -> dict[str, Any]:
    return {
        "weeklyContributions": [],
        "stats": {
            "totalWeeks": 0,
            "totalWeight": 0,
            "averageWeekly": 0,
            "bestWeek": {"week": "", "weight": 0},
            "topMaterials": [],
        },
    }


def worker_productivity(
    worker: Worker,
    weeks: int = DEFAULT_WEEKS,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """Weekly net collection totals of ``worker`` over the last ``weeks`` weeks."""
    today = today or timezone.localdate()
    weeks = min(weeks, MAX_WEEKS)
    start = today - timedelta(days=weeks * 7)
    measurements = list(
        Measurement.objects.filter(
            wastepicker=worker,
            timestamp__gte=day_start(start),
            timestamp__lte=day_end(today),
        ).select_related("material")
    )
    if not measurements:
        return _empty_result()

    material_names = {item.material_id: item.material.name for item in measurements}
    weekly: dict[str, list[NetReading]] = defaultdict(list)
    for reading in calculate_net_readings(measurements):
        weekly[iso_week_key(reading.day)].append(reading)

    contributions: list[dict[str, Any]] = []
    material_totals: dict[str, Decimal] = defaultdict(Decimal)
    for week_key in sorted(weekly):
        materials: dict[str, dict[str, Any]] = {}
        week_total = Decimal("0")
        for reading in weekly[week_key]:
            key = str(reading.material_id)
            entry = materials.setdefault(
                key,
                {
                    "materialName": material_names.get(reading.material_id, f"Material {key}"),
                    "weight": Decimal("0"),
                    "measurements": [],
                },
            )
            entry["weight"] += reading.net_weight
            entry["measurements"].append(
                {
                    "date": br_date(reading.day),
                    "weight": _round(reading.weight),
                    "bag_filled": "S" if reading.bag_filled else "N",
                    "timestamp": reading.timestamp.isoformat(),
                }
            )
            week_total += reading.net_weight

        for entry in materials.values():
            material_totals[entry["materialName"]] += entry["weight"]
            entry["weight"] = _round(entry["weight"])

        week_start, week_end = iso_week_bounds(*parse_week_key(week_key))
        contributions.append(
            {
                "week": week_key,
                "weekStart": br_date(week_start),
                "weekEnd": br_date(week_end),
                "materials": materials,
                "totalWeight": _round(week_total),
            }
        )

    total_weight = sum(Decimal(str(week["totalWeight"])) for week in contributions)
    best_week = max(contributions, key=lambda week: week["totalWeight"])
    top_materials = sorted(material_totals.items(), key=lambda item: item[1], reverse=True)[:TOP_MATERIALS]

    contributions.reverse()
    return {
        "weeklyContributions": contributions,
        "stats": {
            "totalWeeks": len(contributions),
            "totalWeight": _round(total_weight),
            "averageWeekly": _round(total_weight / len(contributions)),
            "bestWeek": {"week": best_week["week"], "weight": best_week["totalWeight"]},
            "topMaterials": [
                {"materialName": name, "totalWeight": _round(total)} for name, total in top_materials
            ],
        },
    }
