from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django import forms

from .models import Material, MaterialGroup


REQUIRED_MESSAGE = "Nome do material e grupo são obrigatórios"


class MaterialForm(forms.Form):
    material = forms.CharField(max_length=150, error_messages={"required": REQUIRED_MESSAGE})
    group = forms.CharField(max_length=100, error_messages={"required": REQUIRED_MESSAGE})
    price_per_kg = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        error_messages={
            "invalid": "Preço por kg inválido",
            "min_value": "Preço por kg inválido",
        },
    )

    def __init__(self, *args, instance: Optional[Material] = None, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)

    def clean_material(self):
        name = self.cleaned_data["material"].strip()
        duplicates = Material.objects.filter(name__iexact=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
            message = "Já existe outro material com este nome"
        else:
            message = "Este material já existe"
        if duplicates.exists():
            raise forms.ValidationError(message, code="duplicate")
        return name

    def clean_group(self):
        return self.cleaned_data["group"].strip()

    def save(self) -> Material:
        material = self.instance or Material()
        material.name = self.cleaned_data["material"]
        material.group = MaterialGroup.objects.resolve(self.cleaned_data["group"])
        if self.instance is None or "price_per_kg" in self.data:
            material.price_per_kg = self.cleaned_data.get("price_per_kg")
        material.save()
        return material
