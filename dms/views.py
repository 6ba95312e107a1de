from __future__ import annotations

from typing import Any

from django.conf import settings
from django.http import Http404, HttpRequest, JsonResponse
from django.middleware.csrf import get_token
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie

from materials.models import Material
from measurements.models import Measurement, WorkerContribution
from users.models import Worker

from .mixins import ManagerRequiredMixin


SAMPLE_SIZE = 3


@method_decorator(ensure_csrf_cookie, name="dispatch")
class CsrfTokenView(View):
    """Hand the dashboard the CSRF token it must echo in ``X-CSRFToken``."""

    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        return JsonResponse({"csrfToken": get_token(request)})


class CheckDataView(ManagerRequiredMixin, View):
    """Counts and samples of the main tables, available only while ``DEBUG`` is on."""

    http_method_names = ["get"]

    def dispatch(self, request: HttpRequest, *args: Any, **kwargs: Any):
        if not settings.DEBUG:
            raise Http404
        return super().dispatch(request, *args, **kwargs)

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        wastepickers = Worker.objects.wastepickers()
        total_workers = wastepickers.count()
        without_code = wastepickers.without_code().count()
        measurements = Measurement.objects.select_related("wastepicker", "material")
        contributions = WorkerContribution.objects.select_related("wastepicker", "material")

        return JsonResponse(
            {
                "timestamp": timezone.now().isoformat(),
                "workers": {
                    "total": total_workers,
                    "withWastepickerId": total_workers - without_code,
                    "withoutWastepickerId": without_code,
                    "sample": [
                        {
                            "id": worker.pk,
                            "full_name": worker.full_name,
                            "user_type": worker.user_type,
                            "wastepicker_id": worker.wastepicker_code or "MISSING",
                        }
                        for worker in wastepickers.order_by("pk")[:SAMPLE_SIZE]
                    ],
                },
                "measurements": {
                    "total": Measurement.objects.count(),
                    "sample": [
                        {
                            "id": measurement.pk,
                            "weight": float(measurement.weight_kg),
                            "wastepicker_id": measurement.wastepicker.display_code,
                            "material_id": measurement.material_id,
                            "timestamp": measurement.timestamp.isoformat(),
                            "bag_filled": measurement.bag_filled,
                        }
                        for measurement in measurements[:SAMPLE_SIZE]
                    ],
                },
                "worker_contributions": {
                    "total": WorkerContribution.objects.count(),
                    "sample": [
                        {
                            "id": contribution.pk,
                            "wastepicker_id": contribution.wastepicker.display_code,
                            "material_id": contribution.material_id,
                            "weight": float(contribution.weight_kg),
                            "period": {"year": contribution.iso_year, "week": contribution.iso_week},
                        }
                        for contribution in contributions[:SAMPLE_SIZE]
                    ],
                },
                "materials": {
                    "total": Material.objects.count(),
                    "sample": [
                        {"id": material.pk, "name": material.name}
                        for material in Material.objects.order_by("pk")[:SAMPLE_SIZE]
                    ],
                },
            }
        )


check_data_view = CheckDataView.as_view()
