from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views import View

from dms.api import json_error, parse_int_param
from dms.mixins import ApiLoginRequiredMixin
from materials.models import Material
from users.services import resolve_worker

from .services.collections import worker_collections
from .services.prices import earnings_comparison, price_fluctuation
from .services.productivity import DEFAULT_WEEKS, MAX_WEEKS, worker_productivity


def _material_from_request(request: HttpRequest) -> tuple[bool, Material | None]:
    """Return whether a material filter was sent and the material it names."""
    raw = (request.GET.get("material_id") or "").strip()
    if not raw:
        return False, None
    material_id = parse_int_param(raw)
    if material_id is None:
        return True, None
    return True, Material.objects.filter(pk=material_id).first()


class WorkerProductivityView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        raw_worker = request.GET.get("worker_id")
        if not raw_worker:
            return json_error("Worker ID is required")
        worker = resolve_worker(raw_worker)
        if worker is None:
            return json_error("Invalid worker ID")

        weeks = parse_int_param(request.GET.get("weeks"), DEFAULT_WEEKS)
        if weeks is None or weeks <= 0:
            weeks = DEFAULT_WEEKS
        weeks = min(weeks, MAX_WEEKS)
        return JsonResponse(worker_productivity(worker, weeks=weeks))


class WorkerCollectionsView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        worker = None
        raw_worker = request.GET.get("worker_id")
        if raw_worker:
            worker = resolve_worker(raw_worker)
            if worker is None:
                return json_error("Invalid worker ID")

        result = worker_collections(
            request.GET.get("period_type") or "monthly",
            worker=worker,
            material_filter=(request.GET.get("material_id") or "").strip() or None,
        )
        return JsonResponse(result)


class PriceFluctuationView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        filtered, material = _material_from_request(request)
        if filtered and material is None:
            return JsonResponse({"noData": True, "message": "Não há histórico de preços para este material"})
        return JsonResponse(price_fluctuation(material), safe=False)


class EarningsComparisonView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        filtered, material = _material_from_request(request)
        if filtered and material is None:
            return JsonResponse({"noData": True, "message": "Não há vendas registradas para este material"})
        period_type = request.GET.get("period_type") or "monthly"
        return JsonResponse(earnings_comparison(period_type, material), safe=False)
