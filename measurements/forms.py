from __future__ import annotations

from decimal import Decimal

from django import forms
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from cooperatives.models import Device
from materials.models import Material
from users.services import resolve_worker


class MeasurementForm(forms.Form):
    """Validate a scale reading sent by the dashboard or a device."""

    worker_id = forms.CharField(required=False)
    material_id = forms.ModelChoiceField(
        queryset=Material.objects.all(),
        error_messages={
            "required": "Material é obrigatório",
            "invalid_choice": "Material não encontrado",
        },
    )
    weight_kg = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        error_messages={
            "required": "Peso é obrigatório",
            "invalid": "Peso inválido",
        },
    )
    timestamp = forms.CharField(required=False)
    bag_filled = forms.CharField(required=False)
    device_id = forms.ModelChoiceField(
        queryset=Device.objects.all(),
        required=False,
        error_messages={"invalid_choice": "Balança não encontrada"},
    )

    def __init__(self, *args, user=None, **kwargs):
        self.user = user
        super().__init__(*args, **kwargs)

    def clean_worker_id(self):
        raw = self.cleaned_data.get("worker_id")
        if not raw:
            return self.user
        worker = resolve_worker(raw)
        if worker is None:
            raise forms.ValidationError("Catador não encontrado")
        if self.user is not None and not self.user.is_manager and worker.pk != self.user.pk:
            raise forms.ValidationError("Você só pode registrar coletas para você mesmo", code="forbidden")
        return worker

    def clean_weight_kg(self):
        weight = self.cleaned_data["weight_kg"]
        if weight <= Decimal("0"):
            raise forms.ValidationError("O peso deve ser maior que zero")
        return weight

    def clean_timestamp(self):
        raw = self.cleaned_data.get("timestamp")
        if not raw:
            return timezone.now()
        try:
            parsed = parse_datetime(raw)
        except ValueError:
            parsed = None
        if parsed is None:
            raise forms.ValidationError("Data e hora inválidas")
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed

    def clean_bag_filled(self):
        raw = self.cleaned_data.get("bag_filled")
        return (raw or "").strip().upper() in {"Y", "S", "SIM", "TRUE", "1"}
