from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views import View

from dms.api import first_form_error, form_errors, json_error, load_json_body
from dms.mixins import ManagerWriteMixin

from .forms import CooperativeForm
from .models import Cooperative


def cooperative_payload(cooperative: Cooperative) -> dict[str, Any]:
    return {
        "id": cooperative.pk,
        "cooperative_id": str(cooperative.pk),
        "name": cooperative.name,
        "contact": cooperative.contact,
        "address": cooperative.address,
    }


class CooperativeCollectionView(ManagerWriteMixin, View):
    http_method_names = ["get", "post"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        cooperatives = Cooperative.objects.order_by("name", "pk")
        return JsonResponse([cooperative_payload(item) for item in cooperatives], safe=False)

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = CooperativeForm(payload)
        if not form.is_valid():
            return json_error(
                first_form_error(form, "Dados inválidos para a cooperativa."),
                errors=form_errors(form),
            )

        cooperative = form.save()
        return JsonResponse(
            {
                "success": True,
                "message": "Cooperativa criada com sucesso",
                "cooperative": cooperative_payload(cooperative),
            },
            status=201,
        )
