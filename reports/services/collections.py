from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from django.db.models import Sum
from django.utils import timezone

from materials.models import Material
from measurements.models import WorkerContribution
from users.models import Worker

from .periods import month_bounds


# The materials list labels groups "group-<name>"; older clients send "group_<name>".
GROUP_PREFIXES = ("group_", "group-")
TOP_WORKERS = 10

PERIOD_PHRASES = {
    "weekly": "esta semana",
    "monthly": "este mês",
    "yearly": "este ano",
}


def _no_data(message: str) -> dict[str, Any]:
    return {"noData": True, "message": message}


def _period_queryset(period_type: str, today: date):
    queryset = WorkerContribution.objects.all()
    if period_type == "weekly":
        iso_year, iso_week, _ = today.isocalendar()
        return queryset.filter(iso_year=iso_year, iso_week=iso_week)
    if period_type == "yearly":
        return queryset.filter(iso_year=today.year)
    first_day, last_day = month_bounds(today)
    return queryset.filter(period_start__lte=last_day, period_end__gte=first_day)


def _worker_labels(worker_ids) -> dict[int, tuple[str, str]]:
    return {
        worker.pk: (worker.display_code, worker.full_name)
        for worker in Worker.objects.filter(pk__in=set(worker_ids))
    }


def worker_collections(
    period_type: str,
    worker: Optional[Worker] = None,
    material_filter: Optional[str] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """Rank the workers by the weight they collected in the current period.

    ``material_filter`` is either a material id or ``group_<name>`` (also
    ``group-<name>``) to cover every material of a group.
    """
    if not WorkerContribution.objects.exists():
        return _no_data("Dados de contribuição não calculados. Execute o recálculo primeiro.")

    if period_type not in PERIOD_PHRASES:
        period_type = "monthly"
    today = today or timezone.localdate()
    queryset = _period_queryset(period_type, today)
    if worker is not None:
        queryset = queryset.filter(wastepicker=worker)

    if material_filter:
        if material_filter.startswith(GROUP_PREFIXES):
            group_name = material_filter[len("group_"):]
            material_ids = list(Material.objects.filter(group__name__iexact=group_name).values_list("pk", flat=True))
            if not material_ids:
                return _no_data("Não há materiais neste grupo")
            queryset = queryset.filter(material_id__in=material_ids)
        elif material_filter.isdigit():
            queryset = queryset.filter(material_id=int(material_filter))
        else:
            queryset = queryset.none()

    phrase = PERIOD_PHRASES[period_type]
    if period_type == "yearly" and not material_filter:
        return _stacked_by_material(queryset, phrase)

    rows = list(
        queryset.values("wastepicker_id")
        .annotate(total=Sum("weight_kg"))
        .order_by("-total", "wastepicker_id")[:TOP_WORKERS]
    )
    if not rows:
        if material_filter:
            return _no_data(f"Não há coletas deste material em {phrase}")
        return _no_data(f"Não há coletas disponíveis para {phrase}")

    labels = _worker_labels(row["wastepicker_id"] for row in rows)
    data = []
    for row in rows:
        code, name = labels.get(row["wastepicker_id"], (str(row["wastepicker_id"]), ""))
        data.append({"wastepicker_id": code, "worker_name": name, "totalWeight": float(round(row["total"], 2))})
    return {"grouped": False, "data": data}


def _stacked_by_material(queryset, phrase: str) -> dict[str, Any]:
    rows = list(
        queryset.values("wastepicker_id", "material_id", "material__name")
        .annotate(total=Sum("weight_kg"))
        .order_by("-total", "wastepicker_id", "material_id")
    )
    if not rows:
        return _no_data(f"Não há coletas disponíveis para {phrase}")

    per_worker: dict[int, dict[int, Decimal]] = defaultdict(dict)
    material_names: dict[int, str] = {}
    for row in rows:
        per_worker[row["wastepicker_id"]][row["material_id"]] = row["total"]
        material_names[row["material_id"]] = row["material__name"]

    ranked = sorted(
        per_worker.items(),
        key=lambda item: (-sum(item[1].values()), item[0]),
    )[:TOP_WORKERS]

    material_ids: list[int] = []
    for _, weights in ranked:
        for material_id in weights:
            if material_id not in material_ids:
                material_ids.append(material_id)

    labels = _worker_labels(worker_id for worker_id, _ in ranked)
    workers = []
    for worker_id, weights in ranked:
        code, name = labels.get(worker_id, (str(worker_id), ""))
        entry: dict[str, Any] = {
            "wastepicker_id": code,
            "worker_name": name,
            "totalWeight": float(round(sum(weights.values()), 2)),
        }
        for material_id in material_ids:
            entry[str(material_id)] = float(round(weights.get(material_id, Decimal("0")), 2))
        workers.append(entry)

    return {
        "grouped": True,
        "workers": workers,
        "materials": [{"id": str(material_id), "name": material_names[material_id]} for material_id in material_ids],
    }
