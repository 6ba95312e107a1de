from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from django.db.models import DecimalField, ExpressionWrapper, F, Max, Sum
from django.utils import timezone

from materials.models import Material
from sales.models import Sale

from .periods import local_midnight_ms, month_bounds, month_label, shift_month, short_date_label


HISTORY_SIZE = 10
RECENT_MATERIALS = 5
COMPARISON_PERIODS = 6


def _recent_sales(material_id: int) -> list[Sale]:
    sales = list(Sale.objects.filter(material_id=material_id).order_by("-date", "-pk")[:HISTORY_SIZE])
    sales.reverse()
    return sales


def _price_point(sale: Sale) -> dict[str, Any]:
    return {
        "date": sale.date.isoformat(),
        "price": float(sale.price_per_kg),
        "dateLabel": short_date_label(sale.date),
        "timestamp": local_midnight_ms(sale.date),
    }


def price_fluctuation(material: Optional[Material] = None) -> Any:
    """Price history of the latest sales, for one material or the most recently sold ones."""
    if material is not None:
        sales = _recent_sales(material.pk)
        if not sales:
            return {"noData": True, "message": "Não há histórico de preços para este material"}
        return [{**_price_point(sale), "material": material.name} for sale in sales]

    recent = list(
        Sale.objects.values("material_id", "material__name")
        .annotate(last_sale=Max("date"))
        .order_by("-last_sale", "material_id")[:RECENT_MATERIALS]
    )
    if not recent:
        return {"noData": True, "message": "Não há histórico de preços disponível"}

    points: dict[str, dict[str, Any]] = {}
    for row in recent:
        name = row["material__name"]
        for sale in _recent_sales(row["material_id"]):
            point = _price_point(sale)
            merged = points.setdefault(
                point["dateLabel"],
                {"weekLabel": point["dateLabel"], "date": point["date"], "timestamp": point["timestamp"], "materials": {}},
            )
            merged["materials"].setdefault(name, point["price"])

    price_data = []
    for merged in sorted(points.values(), key=lambda item: item["timestamp"]):
        price_data.append({"weekLabel": merged["weekLabel"], "date": merged["date"], "materials": merged["materials"]})
    return {"materials": [row["material__name"] for row in recent], "priceData": price_data}


def _period_ranges(period_type: str, today: date) -> list[tuple[str, date, date]]:
    periods: list[tuple[str, date, date]] = []
    for offset in range(COMPARISON_PERIODS):
        if period_type == "weekly":
            end = today - timedelta(days=offset * 7)
            start = end - timedelta(days=6)
            periods.append((f"{start:%d/%m} - {end:%d/%m}", start, end))
        elif period_type == "yearly":
            year = today.year - offset
            periods.append((str(year), date(year, 1, 1), date(year, 12, 31)))
        else:
            start, end = month_bounds(shift_month(today, -offset))
            periods.append((month_label(start), start, end))
    periods.reverse()
    return periods


def earnings_comparison(
    period_type: str,
    material: Optional[Material] = None,
    today: Optional[date] = None,
) -> Any:
    """Sales revenue of the last six weeks, months or years in chronological order."""
    today = today or timezone.localdate()
    sales = Sale.objects.all()
    if material is not None:
        sales = sales.filter(material=material)
    revenue = ExpressionWrapper(
        F("weight_kg") * F("price_per_kg"),
        output_field=DecimalField(max_digits=20, decimal_places=4),
    )

    results = []
    for label, start, end in _period_ranges(period_type, today):
        total = sales.filter(date__gte=start, date__lte=end).aggregate(total=Sum(revenue))["total"]
        results.append({"period": label, "earnings": float(round(total or Decimal("0"), 2))})

    if all(item["earnings"] == 0 for item in results):
        message = (
            "Não há vendas registradas para este material"
            if material is not None
            else "Não há dados de vendas disponíveis"
        )
        return {"noData": True, "message": message}
    return results
