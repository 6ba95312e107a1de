from __future__ import annotations

from typing import Any, Optional

from django import forms
from django.db import transaction

from cooperatives.models import Cooperative
from dms.api import parse_date_param
from materials.models import Material

from .models import Buyer, Sale
from .services.sales import InsufficientStockError, available_for_sale, insufficient_stock_message


# Keys used by older dashboard clients.
PAYLOAD_ALIASES = {
    "price/kg": "price_per_kg",
    "Buyer": "buyer",
}


def normalize_sale_payload(payload: dict[str, Any]) -> dict[str, Any]:
    data = dict(payload)
    for alias, field_name in PAYLOAD_ALIASES.items():
        if alias in data and data.get(field_name) in (None, ""):
            data[field_name] = data.pop(alias)
    return data


def _required(field_name: str) -> dict[str, str]:
    return {"required": f"Campo obrigatório: {field_name}"}


class SaleForm(forms.Form):
    material_id = forms.ModelChoiceField(
        queryset=Material.objects.all(),
        error_messages={**_required("material_id"), "invalid_choice": "Material não encontrado"},
    )
    cooperative_id = forms.ModelChoiceField(
        queryset=Cooperative.objects.all(),
        error_messages={**_required("cooperative_id"), "invalid_choice": "Cooperativa não encontrada"},
    )
    price_per_kg = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        error_messages={**_required("price/kg"), "invalid": "Preço por kg inválido"},
    )
    weight_sold = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        error_messages={**_required("weight_sold"), "invalid": "Peso vendido inválido"},
    )
    date = forms.CharField(error_messages=_required("date"))
    buyer = forms.CharField(max_length=150, error_messages=_required("Buyer"))

    def __init__(self, *args, instance: Optional[Sale] = None, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)

    def clean_price_per_kg(self):
        price = self.cleaned_data["price_per_kg"]
        if price <= 0:
            raise forms.ValidationError("Preço por kg deve ser maior que zero")
        return price

    def clean_weight_sold(self):
        weight = self.cleaned_data["weight_sold"]
        if weight <= 0:
            raise forms.ValidationError("Peso vendido deve ser maior que zero")
        return weight

    def clean_date(self):
        parsed = parse_date_param(self.cleaned_data["date"])
        if parsed is None:
            raise forms.ValidationError("Data inválida")
        return parsed

    def clean_buyer(self):
        buyer = self.cleaned_data["buyer"].strip()
        if not buyer:
            raise forms.ValidationError("Campo obrigatório: Buyer")
        return buyer

    def clean(self):
        cleaned_data = super().clean()
        material = cleaned_data.get("material_id")
        cooperative = cleaned_data.get("cooperative_id")
        weight = cleaned_data.get("weight_sold")
        if material is None or cooperative is None or weight is None:
            return cleaned_data

        available = available_for_sale(material, cooperative, instance=self.instance)
        if weight > available:
            self.add_error(None, insufficient_stock_message(available))
        return cleaned_data

    def save(self, *, responsible=None) -> Sale:
        """Persist the sale, checking the stock again while its balance is locked.

        Raises ``InsufficientStockError`` when another sale consumed the stock
        after ``clean`` ran.
        """
        data = self.cleaned_data
        with transaction.atomic():
            available = available_for_sale(
                data["material_id"],
                data["cooperative_id"],
                instance=self.instance,
                lock=True,
            )
            if data["weight_sold"] > available:
                raise InsufficientStockError(available)

            sale = self.instance or Sale()
            buyer, _ = Buyer.objects.resolve(data["buyer"])
            sale.material = data["material_id"]
            sale.cooperative = data["cooperative_id"]
            sale.price_per_kg = data["price_per_kg"]
            sale.weight_kg = data["weight_sold"]
            sale.date = data["date"]
            sale.buyer = buyer
            if responsible is not None and sale.responsible_id is None:
                sale.responsible = responsible
            sale.save()
        return sale


class BuyerForm(forms.Form):
    buyer = forms.CharField(max_length=150, error_messages={"required": "Nome do comprador é obrigatório"})

    def clean_buyer(self):
        name = self.cleaned_data["buyer"].strip()
        if not name:
            raise forms.ValidationError("Nome do comprador é obrigatório")
        if Buyer.objects.filter(name__iexact=name).exists():
            raise forms.ValidationError("Este comprador já existe", code="duplicate")
        return name
