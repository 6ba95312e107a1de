from __future__ import annotations

from typing import Any

from django.db import transaction
from django.http import HttpRequest, JsonResponse
from django.views import View

from dms.api import decimal_to_float, first_form_error, form_errors, json_error, load_json_body
from dms.mixins import ManagerRequiredMixin, ManagerWriteMixin

from .forms import MaterialForm
from .models import Material, MaterialGroup


def material_payload(material: Material) -> dict[str, Any]:
    return {
        "id": str(material.pk),
        "material_id": material.pk,
        "material": material.name,
        "name": material.name,
        "group": material.group.name,
        "price_per_kg": decimal_to_float(material.price_per_kg) if material.price_per_kg is not None else None,
    }


class MaterialCollectionView(ManagerWriteMixin, View):
    http_method_names = ["get", "post"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        materials = list(Material.objects.select_related("group").order_by("name", "pk"))
        group_names = (
            MaterialGroup.objects.filter(materials__isnull=False)
            .order_by("name")
            .values_list("name", flat=True)
            .distinct()
        )
        groups = [{"id": f"group-{name}", "group": name, "isGroup": True} for name in group_names]
        return JsonResponse(groups + [material_payload(item) for item in materials], safe=False)

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = MaterialForm(payload)
        if not form.is_valid():
            return json_error(first_form_error(form, "Dados inválidos para o material"), errors=form_errors(form))

        with transaction.atomic():
            material = form.save()
        return JsonResponse(
            {
                "success": True,
                "message": "Material criado com sucesso",
                "materialId": material.pk,
                "material": material_payload(material),
            },
            status=201,
        )


class MaterialDetailView(ManagerRequiredMixin, View):
    http_method_names = ["put", "delete"]

    def _get_material(self, pk: int) -> Material | None:
        return Material.objects.select_related("group").filter(pk=pk).first()

    def put(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        material = self._get_material(pk)
        if material is None:
            return json_error("Material não encontrado", status=404)

        form = MaterialForm(payload, instance=material)
        if not form.is_valid():
            return json_error(first_form_error(form, "Dados inválidos para o material"), errors=form_errors(form))

        with transaction.atomic():
            material = form.save()
        return JsonResponse(
            {
                "success": True,
                "message": "Material atualizado com sucesso",
                "material": material_payload(material),
            }
        )

    def delete(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        material = self._get_material(pk)
        if material is None:
            return json_error("Material não encontrado", status=404)

        if material.is_in_use():
            return json_error(
                "Este material não pode ser excluído pois está sendo usado em medições, vendas, estoque ou contribuições"
            )

        material.delete()
        return JsonResponse({"success": True, "message": "Material excluído com sucesso"})
