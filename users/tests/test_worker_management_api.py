from __future__ import annotations

import json
from datetime import date
from unittest import mock

from django.db.models import ProtectedError
from django.test import TestCase
from django.urls import reverse

from cooperatives.models import Cooperative
from users.models import UserType, Worker


class WorkerManagementApiTests(TestCase):
    def setUp(self):
        self.cooperative = Cooperative.objects.create(name="Recicla")
        self.manager = Worker.objects.create_user(
            cpf="99988877766",
            password="segredo123",
            full_name="Gestora",
            user_type=UserType.MANAGER,
            cooperative=self.cooperative,
        )
        self.client.force_login(self.manager)

    def _post(self, name, payload):
        return self.client.post(reverse(name), data=json.dumps(payload), content_type="application/json")

    def _payload(self, **overrides):
        payload = {
            "full_name": "Carlos Pereira",
            "CPF": "321.654.987-00",
            "password": "segredo123",
            "birth_date": "1985-06-15",
            "enter_date": "2020-01-10",
            "cooperative_id": str(self.cooperative.pk),
            "PIS": "123.45678.90-1",
            "RG": "12.345.678-9",
            "user_type": 1,
        }
        payload.update(overrides)
        return payload

    def test_create_wastepicker_assigns_code(self):
        Worker.objects.create_user(cpf="1", full_name="Existente", wastepicker_code="WP001")

        response = self._post("users:create", self._payload())

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "Catador criado com sucesso!")
        worker = Worker.objects.get(cpf="32165498700")
        self.assertEqual(worker.wastepicker_code, "WP002")
        self.assertEqual(worker.pis, "12345678901")
        self.assertEqual(worker.rg, "123456789")
        self.assertEqual(worker.email, "sem-email@coop.local")
        self.assertEqual(worker.birth_date, date(1985, 6, 15))
        self.assertTrue(worker.check_password("segredo123"))

    def test_create_manager(self):
        response = self._post("users:create", self._payload(user_type=0, email="gestor@coop.org"))

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"], "Usuário de gerência criado com sucesso!")
        worker = Worker.objects.get(cpf="32165498700")
        self.assertTrue(worker.is_staff)
        self.assertIsNone(worker.wastepicker_code)

    def test_create_rejects_duplicate_cpf_with_conflict(self):
        Worker.objects.create_user(cpf="32165498700", full_name="Duplicado")

        response = self._post("users:create", self._payload())

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "Já existe um usuário com este CPF")

    def test_create_validations(self):
        missing = self._post("users:create", self._payload(RG=""))
        bad_type = self._post("users:create", self._payload(user_type=5))
        bad_date = self._post("users:create", self._payload(birth_date="15/06/1985"))
        bad_cooperative = self._post("users:create", self._payload(cooperative_id="999"))

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(bad_type.status_code, 400)
        self.assertEqual(bad_type.json()["error"], "Tipo de usuário inválido")
        self.assertEqual(bad_date.json()["error"], "Datas inválidas")
        self.assertEqual(bad_cooperative.json()["error"], "Cooperativa inválida")
        self.assertFalse(Worker.objects.filter(cpf="32165498700").exists())

    def test_create_rejects_numbers_longer_than_the_columns(self):
        long_cpf = self._post("users:create", self._payload(CPF="1" * 15))
        long_pis = self._post("users:create", self._payload(PIS="2" * 21))
        long_rg = self._post("users:create", self._payload(RG="3" * 21))

        self.assertEqual(long_cpf.status_code, 400)
        self.assertEqual(long_cpf.json()["error"], "CPF deve ter no máximo 14 dígitos")
        self.assertEqual(long_pis.status_code, 400)
        self.assertEqual(long_pis.json()["error"], "PIS deve ter no máximo 20 dígitos")
        self.assertEqual(long_rg.status_code, 400)
        self.assertEqual(long_rg.json()["error"], "RG deve ter no máximo 20 dígitos")
        self.assertEqual(Worker.objects.count(), 1)

    def test_wastepicker_cannot_create(self):
        wastepicker = Worker.objects.create_user(cpf="555", password="segredo123", full_name="Catador")
        self.client.force_login(wastepicker)

        response = self._post("users:create", self._payload())

        self.assertEqual(response.status_code, 403)

    def test_update_keeps_password_when_absent(self):
        worker = Worker.objects.create_user(
            cpf="32165498700",
            password="original1",
            full_name="Carlos",
            cooperative=self.cooperative,
        )

        response = self._post(
            "users:update",
            self._payload(id=worker.pk, full_name="Carlos Atualizado", password="", CPF=""),
        )

        self.assertEqual(response.status_code, 200)
        worker.refresh_from_db()
        self.assertEqual(worker.full_name, "Carlos Atualizado")
        self.assertTrue(worker.check_password("original1"))
        self.assertEqual(worker.cpf, "32165498700")

    def test_update_unknown_worker(self):
        response = self._post("users:update", self._payload(id=99999))

        self.assertEqual(response.status_code, 404)

    def test_delete_worker(self):
        worker = Worker.objects.create_user(cpf="111", full_name="Removível")

        response = self._post("users:delete", {"id": worker.pk})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Worker.objects.filter(pk=worker.pk).exists())

    def test_delete_errors(self):
        missing_id = self._post("users:delete", {})
        unknown = self._post("users:delete", {"id": 99999})
        own = self._post("users:delete", {"id": self.manager.pk})

        self.assertEqual(missing_id.status_code, 400)
        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(own.status_code, 400)

    def test_delete_protected_worker_returns_conflict(self):
        worker = Worker.objects.create_user(cpf="111", full_name="Com coletas")
        with mock.patch.object(Worker, "delete", side_effect=ProtectedError("protegido", set())):
            response = self._post("users:delete", {"id": worker.pk})

        self.assertEqual(response.status_code, 409)

    def test_assign_wastepicker_ids(self):
        worker = Worker.objects.create_user(cpf="111", full_name="Sem código")

        response = self._post("users:assign-wastepicker-ids", {})
        again = self._post("users:assign-wastepicker-ids", {})

        self.assertEqual(response.json()["updated"], 1)
        self.assertEqual(response.json()["assignments"][0]["userId"], str(worker.pk))
        self.assertEqual(again.json()["updated"], 0)

    def test_lists(self):
        Worker.objects.create_user(cpf="111", full_name="Zeca")
        Worker.objects.create_user(cpf="222", full_name="Alice")

        wastepickers = self.client.get(reverse("users:wastepickers")).json()
        everyone = self.client.get(reverse("users:all")).json()

        self.assertEqual([item["full_name"] for item in wastepickers], ["Alice", "Zeca"])
        self.assertEqual(len(everyone), 3)
        self.assertTrue(all("password" not in item for item in everyone))


class BirthdayApiTests(TestCase):
    def test_lists_current_month_birthdays_by_day(self):
        viewer = Worker.objects.create_user(cpf="1", full_name="Leitor")
        Worker.objects.create_user(cpf="2", full_name="Dia Vinte", birth_date=date(1990, 3, 20))
        Worker.objects.create_user(cpf="3", full_name="Dia Cinco", birth_date=date(1985, 3, 5))
        Worker.objects.create_user(cpf="4", full_name="Outro Mês", birth_date=date(1985, 4, 5))
        Worker.objects.create_user(
            cpf="5",
            full_name="Gestor",
            birth_date=date(1980, 3, 1),
            user_type=UserType.MANAGER,
        )
        self.client.force_login(viewer)

        with mock.patch("users.views.timezone.localdate", return_value=date(2024, 3, 10)):
            response = self.client.get(reverse("users:birthdays"))

        self.assertEqual(
            response.json(),
            [{"name": "Dia Cinco", "date": "05/03"}, {"name": "Dia Vinte", "date": "20/03"}],
        )
