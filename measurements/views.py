from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views import View

from dms.api import (
    decimal_to_float,
    first_form_error,
    form_errors,
    json_error,
    load_json_body,
    parse_date_param,
    parse_int_param,
)
from dms.mixins import ApiLoginRequiredMixin, ManagerRequiredMixin
from users.services import resolve_worker

from .forms import MeasurementForm
from .models import Measurement
from .services.contributions import recalculate_contributions


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


def measurement_payload(measurement: Measurement) -> dict[str, Any]:
    return {
        "id": str(measurement.pk),
        "wastepicker_id": measurement.wastepicker.display_code,
        "worker_id": str(measurement.wastepicker_id),
        "worker_name": measurement.wastepicker.full_name,
        "material_id": str(measurement.material_id),
        "material_name": measurement.material.name,
        "device_id": str(measurement.device_id) if measurement.device_id else None,
        "cooperative_id": str(measurement.cooperative_id) if measurement.cooperative_id else None,
        "Weight": decimal_to_float(measurement.weight_kg),
        "timestamp": timezone.localtime(measurement.timestamp).isoformat(),
        "bag_filled": "S" if measurement.bag_filled else "N",
    }


def _day_start(value) -> datetime:
    return timezone.make_aware(datetime.combine(value, time.min))


class MeasurementCollectionView(ApiLoginRequiredMixin, View):
    http_method_names = ["get", "post"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        queryset = Measurement.objects.select_related("wastepicker", "material")

        worker_param = request.GET.get("worker_id")
        if worker_param:
            worker = resolve_worker(worker_param)
            if worker is None:
                return JsonResponse([], safe=False)
            queryset = queryset.filter(wastepicker=worker)

        material_id = parse_int_param(request.GET.get("material_id"))
        if material_id is not None:
            queryset = queryset.filter(material_id=material_id)

        start_date = parse_date_param(request.GET.get("start_date"))
        if start_date:
            queryset = queryset.filter(timestamp__gte=_day_start(start_date))
        end_date = parse_date_param(request.GET.get("end_date"))
        if end_date:
            queryset = queryset.filter(timestamp__lt=_day_start(end_date + timedelta(days=1)))

        limit = parse_int_param(request.GET.get("limit"), DEFAULT_LIMIT)
        if limit is None or limit <= 0:
            limit = DEFAULT_LIMIT

        measurements = queryset.order_by("-timestamp", "-pk")[:limit]
        return JsonResponse([measurement_payload(item) for item in measurements], safe=False)

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = MeasurementForm(payload, user=request.user)
        if not form.is_valid():
            status = 403 if form.has_error("worker_id", code="forbidden") else 400
            return json_error(
                first_form_error(form, "Dados inválidos para a coleta"),
                status=status,
                errors=form_errors(form),
            )

        data = form.cleaned_data
        device = data.get("device_id")
        measurement = Measurement.objects.create(
            wastepicker=data["worker_id"],
            material=data["material_id"],
            device=device,
            cooperative_id=device.cooperative_id if device else None,
            weight_kg=data["weight_kg"],
            timestamp=data["timestamp"],
            bag_filled=data["bag_filled"],
        )
        return JsonResponse(
            {
                "success": True,
                "message": "Coleta registrada com sucesso",
                "measurement": measurement_payload(measurement),
            },
            status=201,
        )


class RecalculateContributionsView(ManagerRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        result = recalculate_contributions()
        if not result.processed and not result.statistics:
            return JsonResponse({"message": "Nenhuma coleta encontrada", "processed": 0})
        return JsonResponse(
            {
                "message": "Contribuições recalculadas com sucesso",
                "statistics": result.statistics,
                "processed": result.processed,
            }
        )
