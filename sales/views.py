from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.http import HttpRequest, JsonResponse
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
from dms.mixins import ManagerRequiredMixin, ManagerWriteMixin

from .forms import BuyerForm, SaleForm, normalize_sale_payload
from .models import Buyer, Sale
from .services.sales import InsufficientStockError, summarize_sales


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


def sale_payload(sale: Sale) -> dict[str, Any]:
    return {
        "id": str(sale.pk),
        "material_id": str(sale.material_id),
        "material_name": sale.material.name,
        "cooperative_id": str(sale.cooperative_id),
        "cooperative_name": sale.cooperative.name,
        "price/kg": decimal_to_float(sale.price_per_kg),
        "weight_sold": decimal_to_float(sale.weight_kg),
        "total_value": decimal_to_float(sale.total_value),
        "date": sale.date.isoformat(),
        "Buyer": sale.buyer.name,
        "responsible_id": str(sale.responsible_id) if sale.responsible_id else None,
    }


def _sale_form_error(form: SaleForm) -> JsonResponse:
    return json_error(first_form_error(form, "Dados inválidos para a venda"), errors=form_errors(form))


def _insufficient_stock(exc: InsufficientStockError) -> JsonResponse:
    return json_error(str(exc), errors={"__all__": [str(exc)]})


class SaleCollectionView(ManagerWriteMixin, View):
    http_method_names = ["get", "post"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        queryset = Sale.objects.select_related("material", "cooperative", "buyer")

        material_id = parse_int_param(request.GET.get("material_id"))
        if material_id is not None:
            queryset = queryset.filter(material_id=material_id)
        cooperative_id = parse_int_param(request.GET.get("cooperative_id"))
        if cooperative_id is not None:
            queryset = queryset.filter(cooperative_id=cooperative_id)
        start_date = parse_date_param(request.GET.get("start_date"))
        if start_date:
            queryset = queryset.filter(date__gte=start_date)
        end_date = parse_date_param(request.GET.get("end_date"))
        if end_date:
            queryset = queryset.filter(date__lte=end_date)

        limit = parse_int_param(request.GET.get("limit"), DEFAULT_LIMIT)
        if limit is None or limit <= 0:
            limit = DEFAULT_LIMIT

        sales = list(queryset.order_by("-date", "-pk")[:limit])
        return JsonResponse(
            {
                "sales": [sale_payload(sale) for sale in sales],
                "summary": summarize_sales(sales),
            }
        )

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = SaleForm(normalize_sale_payload(payload))
        if not form.is_valid():
            return _sale_form_error(form)

        try:
            sale = form.save(responsible=request.user)
        except InsufficientStockError as exc:
            return _insufficient_stock(exc)
        logger.info("Sale %s registered by %s", sale.pk, request.user.pk)
        return JsonResponse(
            {
                "success": True,
                "message": "Venda registrada com sucesso",
                "saleId": str(sale.pk),
                "sale": sale_payload(sale),
            },
            status=201,
        )


class SaleDetailView(ManagerRequiredMixin, View):
    http_method_names = ["put", "delete"]

    def _get_sale(self, pk: int) -> Sale | None:
        return Sale.objects.select_related("material", "cooperative", "buyer").filter(pk=pk).first()

    def put(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        sale = self._get_sale(pk)
        if sale is None:
            return json_error("Venda não encontrada", status=404)

        form = SaleForm(normalize_sale_payload(payload), instance=sale)
        if not form.is_valid():
            return _sale_form_error(form)

        try:
            sale = form.save()
        except InsufficientStockError as exc:
            return _insufficient_stock(exc)
        return JsonResponse(
            {
                "success": True,
                "message": "Venda atualizada com sucesso",
                "sale": sale_payload(sale),
            }
        )

    def delete(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        sale = self._get_sale(pk)
        if sale is None:
            return json_error("Venda não encontrada", status=404)

        with transaction.atomic():
            sale.delete()
        logger.info("Sale %s deleted by %s", pk, request.user.pk)
        return JsonResponse({"success": True, "message": "Venda excluída com sucesso"})


class BuyerCollectionView(ManagerWriteMixin, View):
    http_method_names = ["get", "post"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        names = list(Buyer.objects.order_by("name").values_list("name", flat=True))
        return JsonResponse({"buyers": names, "count": len(names)})

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = BuyerForm(normalize_sale_payload(payload))
        if not form.is_valid():
            return json_error(first_form_error(form, "Nome do comprador é obrigatório"), errors=form_errors(form))

        buyer = Buyer.objects.create(name=form.cleaned_data["buyer"])
        return JsonResponse(
            {"success": True, "message": "Comprador cadastrado com sucesso", "buyer": buyer.name},
            status=201,
        )
