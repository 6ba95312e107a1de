from __future__ import annotations

from typing import Any, Optional

from django import forms
from django.contrib.auth.forms import ReadOnlyPasswordHashField

from cooperatives.models import Cooperative
from dms.api import parse_date_param

from .models import UserType, Worker
from .services import sanitize_digits, save_with_wastepicker_code


DEFAULT_EMAIL = "sem-email@coop.local"
REQUIRED_MESSAGE = "Nome, CPF, senha, datas, cooperativa, PIS e RG são obrigatórios"

# Keys sent by the dashboard that do not follow the form field names.
PAYLOAD_ALIASES = {
    "CPF": "cpf",
    "PIS": "pis",
    "RG": "rg",
}


def _check_length(field_name: str, digits: str) -> str:
    model_field = Worker._meta.get_field(field_name)
    if len(digits) > model_field.max_length:
        raise forms.ValidationError(
            f"{model_field.verbose_name} deve ter no máximo {model_field.max_length} dígitos",
            code="max_length",
        )
    return digits


def normalize_worker_payload(payload: dict[str, Any]) -> dict[str, Any]:
    data = dict(payload)
    for alias, field_name in PAYLOAD_ALIASES.items():
        if alias in data and field_name not in data:
            data[field_name] = data.pop(alias)
    return data


class WorkerAccountForm(forms.Form):
    """Validate the manager's create and update payloads for a worker."""

    full_name = forms.CharField(max_length=150, error_messages={"required": REQUIRED_MESSAGE})
    cpf = forms.CharField(max_length=32, required=False)
    password = forms.CharField(required=False, strip=False)
    birth_date = forms.CharField(error_messages={"required": REQUIRED_MESSAGE})
    enter_date = forms.CharField(error_messages={"required": REQUIRED_MESSAGE})
    exit_date = forms.CharField(required=False)
    cooperative_id = forms.ModelChoiceField(
        queryset=Cooperative.objects.all(),
        error_messages={
            "required": REQUIRED_MESSAGE,
            "invalid_choice": "Cooperativa inválida",
        },
    )
    pis = forms.CharField(max_length=32, error_messages={"required": REQUIRED_MESSAGE})
    rg = forms.CharField(max_length=32, error_messages={"required": REQUIRED_MESSAGE})
    email = forms.EmailField(required=False, error_messages={"invalid": "E-mail inválido"})
    gender = forms.CharField(max_length=32, required=False)
    user_type = forms.TypedChoiceField(
        choices=UserType.choices,
        coerce=int,
        required=False,
        empty_value=int(UserType.WASTEPICKER),
        error_messages={"invalid_choice": "Tipo de usuário inválido"},
    )

    def __init__(self, *args, instance: Optional[Worker] = None, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)
        if instance is None:
            self.fields["cpf"].required = True
            self.fields["cpf"].error_messages["required"] = REQUIRED_MESSAGE
            self.fields["password"].required = True
            self.fields["password"].error_messages["required"] = REQUIRED_MESSAGE

    def clean_cpf(self):
        raw = self.cleaned_data.get("cpf")
        if not raw:
            return ""
        cpf = sanitize_digits(raw)
        if not cpf:
            raise forms.ValidationError("CPF, PIS e RG devem conter apenas números")
        _check_length("cpf", cpf)
        duplicates = Worker.objects.filter(cpf=cpf)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise forms.ValidationError("Já existe um usuário com este CPF", code="duplicate")
        return cpf

    def _clean_digits(self, field_name: str) -> str:
        digits = sanitize_digits(self.cleaned_data.get(field_name))
        if not digits:
            raise forms.ValidationError("CPF, PIS e RG devem conter apenas números")
        return _check_length(field_name, digits)

    def clean_pis(self):
        return self._clean_digits("pis")

    def clean_rg(self):
        return self._clean_digits("rg")

    def _clean_date(self, field_name: str, message: str):
        raw = self.cleaned_data.get(field_name)
        if not raw:
            return None
        parsed = parse_date_param(raw)
        if parsed is None:
            raise forms.ValidationError(message)
        return parsed

    def clean_birth_date(self):
        return self._clean_date("birth_date", "Datas inválidas")

    def clean_enter_date(self):
        return self._clean_date("enter_date", "Datas inválidas")

    def clean_exit_date(self):
        return self._clean_date("exit_date", "Data de saída inválida")

    def clean_full_name(self):
        name = self.cleaned_data["full_name"].strip()
        if not name:
            raise forms.ValidationError(REQUIRED_MESSAGE)
        return name

    def save(self) -> Worker:
        data = self.cleaned_data
        worker = self.instance or Worker()

        worker.full_name = data["full_name"]
        if data.get("cpf"):
            worker.cpf = data["cpf"]
        worker.cooperative = data["cooperative_id"]
        worker.user_type = data["user_type"]
        worker.birth_date = data["birth_date"]
        worker.enter_date = data["enter_date"]
        worker.exit_date = data.get("exit_date")
        worker.pis = data["pis"]
        worker.rg = data["rg"]
        worker.gender = (data.get("gender") or "").strip()

        email = (data.get("email") or "").strip()
        if email:
            worker.email = email
        elif not worker.email:
            worker.email = DEFAULT_EMAIL

        if data.get("password"):
            worker.set_password(data["password"])

        if worker.user_type == UserType.WASTEPICKER and not worker.wastepicker_code:
            return save_with_wastepicker_code(worker)

        worker.save()
        return worker


class ProfileUpdateForm(forms.Form):
    """Partial update of the profile fields a worker may edit."""

    full_name = forms.CharField(max_length=150, required=False)
    email = forms.EmailField(required=False, error_messages={"invalid": "E-mail inválido"})
    phone = forms.CharField(max_length=32, required=False)
    pis = forms.CharField(max_length=32, required=False)
    rg = forms.CharField(max_length=32, required=False)

    def clean_pis(self):
        return _check_length("pis", sanitize_digits(self.cleaned_data.get("pis")))

    def clean_rg(self):
        return _check_length("rg", sanitize_digits(self.cleaned_data.get("rg")))

    def apply(self, worker: Worker) -> list[str]:
        changed: list[str] = []
        for field_name in ("full_name", "email", "phone", "pis", "rg"):
            value = self.cleaned_data.get(field_name)
            if value and getattr(worker, field_name) != value:
                setattr(worker, field_name, value)
                changed.append(field_name)
        if changed:
            worker.save(update_fields=[*changed, "last_update"])
        return changed


class PasswordChangeForm(forms.Form):
    currentPassword = forms.CharField(strip=False, error_messages={"required": "Todos os campos são obrigatórios"})
    newPassword = forms.CharField(
        strip=False,
        min_length=6,
        error_messages={
            "required": "Todos os campos são obrigatórios",
            "min_length": "A nova senha deve ter pelo menos 6 caracteres",
        },
    )


class WorkerAdminCreationForm(forms.ModelForm):
    password1 = forms.CharField(label="Senha", widget=forms.PasswordInput, strip=False)
    password2 = forms.CharField(label="Confirmar senha", widget=forms.PasswordInput, strip=False)

    class Meta:
        model = Worker
        fields = ["cpf", "full_name", "cooperative", "user_type", "wastepicker_code", "is_active"]

    def clean_cpf(self):
        cpf = sanitize_digits(self.cleaned_data["cpf"])
        if not cpf:
            raise forms.ValidationError("Informe um CPF válido.")
        if Worker.objects.filter(cpf=cpf).exists():
            raise forms.ValidationError("Este CPF já está cadastrado.")
        return cpf

    def clean_password2(self):
        password1 = self.cleaned_data.get("password1")
        password2 = self.cleaned_data.get("password2")
        if password1 and password2 and password1 != password2:
            raise forms.ValidationError("As senhas não coincidem.")
        return password2

    def save(self, commit: bool = True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        if commit:
            user.save()
            self.save_m2m()
        return user


class WorkerAdminChangeForm(forms.ModelForm):
    password = ReadOnlyPasswordHashField(
        label="Senha",
        help_text="As senhas não são armazenadas em texto puro.",
    )

    class Meta:
        model = Worker
        fields = "__all__"

    def clean_password(self):
        return self.initial.get("password")
