from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views import View

from dms.api import decimal_to_float, parse_int_param
from dms.mixins import ApiLoginRequiredMixin

from .models import MaterialStock


class StockView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        balances = MaterialStock.objects.select_related("material")

        material_id = parse_int_param(request.GET.get("material_id"))
        if material_id is not None:
            balances = balances.filter(material_id=material_id)
        cooperative_id = parse_int_param(request.GET.get("cooperative_id"))
        if cooperative_id is not None:
            balances = balances.filter(cooperative_id=cooperative_id)

        totals: dict[str, Decimal] = defaultdict(Decimal)
        for balance in balances.order_by("material__name", "pk"):
            totals[balance.material.name] += balance.current_stock_kg

        if material_id is not None and not totals:
            return JsonResponse({"noData": True, "message": "Não há estoque deste material"})

        stock = {name: decimal_to_float(max(total, Decimal("0"))) for name, total in totals.items()}
        return JsonResponse(stock)
