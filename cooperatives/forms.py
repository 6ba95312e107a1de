from __future__ import annotations

from django import forms

from .models import Cooperative


class CooperativeForm(forms.ModelForm):
    class Meta:
        model = Cooperative
        fields = ["name", "contact", "address"]
        error_messages = {
            "name": {"required": "Nome da cooperativa é obrigatório"},
        }

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Nome da cooperativa é obrigatório")
        return name

    def clean_contact(self):
        return (self.cleaned_data.get("contact") or "").strip()

    def clean_address(self):
        return (self.cleaned_data.get("address") or "").strip()
