from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.db.models import ProtectedError
from django.db.models.functions import ExtractDay
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views import View

from dms.api import first_form_error, form_errors, json_error, load_json_body, parse_int_param
from dms.mixins import ApiLoginRequiredMixin, ManagerRequiredMixin

from .forms import PasswordChangeForm, ProfileUpdateForm, WorkerAccountForm, normalize_worker_payload
from .models import UserType, Worker
from .services import assign_missing_wastepicker_codes, sanitize_digits


logger = logging.getLogger(__name__)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def worker_payload(worker: Worker) -> dict[str, Any]:
    return {
        "id": str(worker.pk),
        "wastepicker_id": worker.display_code,
        "full_name": worker.full_name,
        "CPF": worker.cpf,
        "email": worker.email,
        "phone": worker.phone,
        "PIS": worker.pis,
        "RG": worker.rg,
        "gender": worker.gender,
        "user_type": worker.user_type,
        "cooperative_id": str(worker.cooperative_id) if worker.cooperative_id else None,
        "cooperative_name": worker.cooperative.name if worker.cooperative_id else None,
        "Birth date": _iso(worker.birth_date),
        "Entry date": _iso(worker.enter_date),
        "Exit date": _iso(worker.exit_date),
        "is_active": worker.is_active,
        "last_update": _iso(worker.last_update),
    }


def _target_worker(request: HttpRequest, raw_id: Any) -> tuple[Worker | None, JsonResponse | None]:
    """Return the worker addressed by ``raw_id`` or the current user when it is absent."""

    if raw_id in (None, ""):
        return request.user, None
    worker_id = parse_int_param(raw_id)
    if worker_id is None:
        return None, json_error("ID inválido")
    if worker_id != request.user.pk and not request.user.is_manager:
        return None, JsonResponse({"message": "Forbidden"}, status=403)
    worker = Worker.objects.select_related("cooperative").filter(pk=worker_id).first()
    if worker is None:
        return None, json_error("Usuário não encontrado", status=404)
    return worker, None


class LoginView(View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        cpf = sanitize_digits(payload.get("cpf"))
        password = payload.get("password") or ""
        if not cpf or not password:
            return json_error("CPF e senha são obrigatórios")

        user = authenticate(request, cpf=cpf, password=password)
        if user is None:
            logger.info("Failed login attempt for CPF ending in %s", cpf[-4:])
            return json_error("CPF ou senha inválidos", status=401)

        login(request, user)
        return JsonResponse(
            {
                "message": "Login realizado com sucesso",
                "user": {
                    "id": str(user.pk),
                    "name": user.full_name,
                    "full_name": user.full_name,
                    "userType": user.user_type,
                },
            }
        )


class LogoutView(View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        logout(request)
        return JsonResponse({"message": "Logout realizado com sucesso"})


class UserProfileView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        worker, error = _target_worker(request, request.GET.get("id"))
        if error:
            return error
        return JsonResponse(worker_payload(worker))


class UserProfileUpdateView(ApiLoginRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        worker, error = _target_worker(request, payload.get("id"))
        if error:
            return error

        form = ProfileUpdateForm(normalize_worker_payload(payload))
        if not form.is_valid():
            return json_error(first_form_error(form, "Dados inválidos"), errors=form_errors(form))

        changed = form.apply(worker)
        return JsonResponse({"message": "Perfil atualizado com sucesso", "updated": bool(changed)})


class PasswordChangeView(ApiLoginRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = PasswordChangeForm(payload)
        if not form.is_valid():
            return json_error(first_form_error(form, "Todos os campos são obrigatórios"), errors=form_errors(form))

        worker, error = _target_worker(request, payload.get("id"))
        if error:
            return error

        if not worker.has_usable_password():
            return json_error("Senha não configurada")
        if not worker.check_password(form.cleaned_data["currentPassword"]):
            return json_error("Senha atual incorreta", status=401)

        worker.set_password(form.cleaned_data["newPassword"])
        worker.save(update_fields=["password", "last_update"])
        if worker.pk == request.user.pk:
            update_session_auth_hash(request, worker)
        return JsonResponse({"message": "Senha atualizada com sucesso"})


class WastepickerListView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        workers = Worker.objects.wastepickers().select_related("cooperative").order_by("full_name", "pk")
        return JsonResponse([worker_payload(worker) for worker in workers], safe=False)


class WorkerListView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        workers = Worker.objects.select_related("cooperative").order_by("full_name", "pk")
        return JsonResponse([worker_payload(worker) for worker in workers], safe=False)


def _account_form_response(form: WorkerAccountForm) -> JsonResponse:
    status = 409 if form.has_error("cpf", code="duplicate") else 400
    return json_error(first_form_error(form, "Dados inválidos"), status=status, errors=form_errors(form))


class WorkerCreateView(ManagerRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        form = WorkerAccountForm(normalize_worker_payload(payload))
        if not form.is_valid():
            return _account_form_response(form)

        worker = form.save()
        logger.info("Worker %s created by %s", worker.pk, request.user.pk)
        message = (
            "Catador criado com sucesso!"
            if worker.user_type == UserType.WASTEPICKER
            else "Usuário de gerência criado com sucesso!"
        )
        return JsonResponse(
            {
                "message": message,
                "user": {
                    "id": str(worker.pk),
                    "full_name": worker.full_name,
                    "cpf": worker.cpf,
                    "cooperative_id": str(worker.cooperative_id),
                    "user_type": worker.user_type,
                    "wastepicker_id": worker.wastepicker_code,
                },
            },
            status=201,
        )


class WorkerUpdateView(ManagerRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        if payload.get("id") in (None, ""):
            return json_error("ID, nome, datas, cooperativa, PIS e RG são obrigatórios")
        worker_id = parse_int_param(payload.get("id"))
        if worker_id is None:
            return json_error("ID inválido")
        worker = Worker.objects.filter(pk=worker_id).first()
        if worker is None:
            return json_error("Usuário não encontrado", status=404)

        form = WorkerAccountForm(normalize_worker_payload(payload), instance=worker)
        if not form.is_valid():
            return _account_form_response(form)

        form.save()
        return JsonResponse({"message": "Usuário atualizado com sucesso"})


class WorkerDeleteView(ManagerRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error

        if payload.get("id") in (None, ""):
            return json_error("ID do usuário é obrigatório")
        worker_id = parse_int_param(payload.get("id"))
        worker = Worker.objects.filter(pk=worker_id).first() if worker_id is not None else None
        if worker is None:
            return json_error("Usuário não encontrado", status=404)
        if worker.pk == request.user.pk:
            return json_error("Você não pode excluir a própria conta")

        try:
            worker.delete()
        except ProtectedError:
            return json_error(
                "Este usuário possui coletas ou vendas registradas e não pode ser excluído",
                status=409,
            )
        logger.info("Worker %s deleted by %s", worker_id, request.user.pk)
        return JsonResponse({"message": "Usuário excluído com sucesso"})


class AssignWastepickerCodesView(ManagerRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        assignments = assign_missing_wastepicker_codes()
        if not assignments:
            return JsonResponse({"message": "Todos os catadores já possuem wastepicker_id", "updated": 0})
        return JsonResponse(
            {
                "message": f"Wastepicker IDs atribuídos com sucesso para {len(assignments)} catadores",
                "updated": len(assignments),
                "assignments": assignments,
            }
        )


class BirthdayListView(ApiLoginRequiredMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        month = timezone.localdate().month
        workers = (
            Worker.objects.wastepickers()
            .filter(birth_date__month=month)
            .annotate(birth_day=ExtractDay("birth_date"))
            .order_by("birth_day", "full_name")
        )
        birthdays = [
            {"name": worker.full_name, "date": worker.birth_date.strftime("%d/%m")}
            for worker in workers
        ]
        return JsonResponse(birthdays, safe=False)
