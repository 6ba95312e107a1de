from __future__ import annotations

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _

from .forms import WorkerAdminChangeForm, WorkerAdminCreationForm
from .models import Worker
from .services import assign_missing_wastepicker_codes


@admin.action(description="Ativar trabalhadores selecionados")
def ativar_trabalhadores(modeladmin, request, queryset):
    atualizados = queryset.update(is_active=True)
    messages.success(request, f"{atualizados} trabalhadores ativados.")


@admin.action(description="Desativar trabalhadores selecionados")
def desativar_trabalhadores(modeladmin, request, queryset):
    atualizados = queryset.update(is_active=False)
    messages.success(request, f"{atualizados} trabalhadores desativados.")


@admin.action(description="Atribuir códigos de catador pendentes")
def atribuir_codigos(modeladmin, request, queryset):
    assignments = assign_missing_wastepicker_codes()
    messages.info(request, f"{len(assignments)} códigos atribuídos.")


@admin.register(Worker)
class WorkerAdmin(UserAdmin):
    add_form = WorkerAdminCreationForm
    form = WorkerAdminChangeForm
    model = Worker

    list_display = ("cpf", "full_name", "display_code", "user_type", "cooperative", "is_active")
    list_filter = ("user_type", "cooperative", "is_active", "is_staff")
    search_fields = ("cpf", "full_name", "wastepicker_code", "email")
    ordering = ("full_name",)

    fieldsets = (
        (_("Credenciais"), {"fields": ("cpf", "password")}),
        (
            _("Informações pessoais"),
            {
                "fields": (
                    "full_name",
                    "cooperative",
                    "user_type",
                    "wastepicker_code",
                    "birth_date",
                    "enter_date",
                    "exit_date",
                    "pis",
                    "rg",
                    "gender",
                    "email",
                    "phone",
                )
            },
        ),
        (_("Permissões"), {"fields": ("is_active", "is_staff", "is_superuser", "groups")}),
        (_("Datas"), {"fields": ("last_login", "date_joined", "last_update", "legacy_id")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "cpf",
                    "full_name",
                    "cooperative",
                    "user_type",
                    "wastepicker_code",
                    "is_active",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    filter_horizontal = ("groups", "user_permissions")
    readonly_fields = ("last_login", "date_joined", "last_update", "legacy_id")
    actions = (ativar_trabalhadores, desativar_trabalhadores, atribuir_codigos)

    @admin.display(description="Código")
    def display_code(self, obj: Worker) -> str:
        return obj.display_code
