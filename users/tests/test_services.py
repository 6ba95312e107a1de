from __future__ import annotations

from unittest import mock

from django.db import IntegrityError
from django.test import TestCase

from cooperatives.models import Cooperative
from users.models import UserType, Worker
from users.services import (
    assign_missing_wastepicker_codes,
    map_user_type,
    next_wastepicker_code,
    resolve_worker,
    sanitize_digits,
    save_with_wastepicker_code,
)


class HelperTests(TestCase):
    def test_sanitize_digits_strips_formatting(self):
        self.assertEqual(sanitize_digits("123.456.789-01"), "12345678901")
        self.assertEqual(sanitize_digits(None), "")
        self.assertEqual(sanitize_digits("abc"), "")

    def test_map_user_type(self):
        self.assertEqual(map_user_type("0"), 0)
        self.assertEqual(map_user_type(" 1 "), 1)
        self.assertEqual(map_user_type("m"), 0)
        self.assertEqual(map_user_type("A"), 0)
        self.assertEqual(map_user_type("w"), 1)
        self.assertEqual(map_user_type("C"), 1)
        self.assertIsNone(map_user_type("X"))
        self.assertIsNone(map_user_type(""))
        self.assertIsNone(map_user_type(None))

    def test_next_code_fills_gaps(self):
        self.assertEqual(next_wastepicker_code([]), "WP001")
        self.assertEqual(next_wastepicker_code(["WP001", "wp003"]), "WP002")
        self.assertEqual(next_wastepicker_code(["WP001", "WP002"]), "WP003")


class WorkerLookupTests(TestCase):
    def setUp(self):
        self.cooperative = Cooperative.objects.create(name="Recicla")
        self.worker = Worker.objects.create_user(
            cpf="123.456.789-01",
            password="segredo123",
            full_name="Ana Souza",
            cooperative=self.cooperative,
            wastepicker_code="WP007",
        )

    def test_create_user_stores_digits_only(self):
        self.assertEqual(self.worker.cpf, "12345678901")
        self.assertTrue(self.worker.check_password("segredo123"))

    def test_resolve_by_code_is_case_insensitive(self):
        self.assertEqual(resolve_worker("wp007"), self.worker)

    def test_resolve_by_numeric_id(self):
        self.assertEqual(resolve_worker(str(self.worker.pk)), self.worker)
        self.assertEqual(resolve_worker(self.worker.pk), self.worker)

    def test_resolve_unknown_returns_none(self):
        self.assertIsNone(resolve_worker("WP999"))
        self.assertIsNone(resolve_worker(""))
        self.assertIsNone(resolve_worker("abc"))

    def test_display_code_falls_back_to_padded_id(self):
        other = Worker.objects.create_user(cpf="999", full_name="Sem Código")
        self.assertEqual(other.display_code, f"WP{other.pk:03d}")
        self.assertEqual(self.worker.display_code, "WP007")

    def test_manager_is_always_staff(self):
        manager = Worker.objects.create_user(cpf="888", full_name="Gestora", user_type=UserType.MANAGER)
        self.assertTrue(manager.is_staff)
        self.assertTrue(manager.is_manager)
        self.assertFalse(self.worker.is_staff)


class AssignCodesTests(TestCase):
    def test_assigns_lowest_free_codes_to_wastepickers_only(self):
        Worker.objects.create_user(cpf="1", full_name="Com Código", wastepicker_code="WP001")
        first = Worker.objects.create_user(cpf="2", full_name="Primeiro")
        second = Worker.objects.create_user(cpf="3", full_name="Segundo")
        manager = Worker.objects.create_user(cpf="4", full_name="Gestor", user_type=UserType.MANAGER)

        assignments = assign_missing_wastepicker_codes()

        self.assertEqual([item["wastepickerId"] for item in assignments], ["WP002", "WP003"])
        first.refresh_from_db()
        second.refresh_from_db()
        manager.refresh_from_db()
        self.assertEqual(first.wastepicker_code, "WP002")
        self.assertEqual(second.wastepicker_code, "WP003")
        self.assertIsNone(manager.wastepicker_code)

    def test_returns_empty_when_nothing_is_missing(self):
        Worker.objects.create_user(cpf="1", full_name="Com Código", wastepicker_code="WP001")

        self.assertEqual(assign_missing_wastepicker_codes(), [])

    def test_save_with_code_retries_when_the_code_was_taken(self):
        Worker.objects.create_user(cpf="1", full_name="Com Código", wastepicker_code="WP001")
        worker = Worker(cpf="2", full_name="Novo")

        with mock.patch("users.services.taken_wastepicker_codes", side_effect=[set(), {"WP001"}]):
            save_with_wastepicker_code(worker)

        worker.refresh_from_db()
        self.assertEqual(worker.wastepicker_code, "WP002")

    def test_save_with_code_gives_up_after_the_last_attempt(self):
        Worker.objects.create_user(cpf="1", full_name="Com Código", wastepicker_code="WP001")
        worker = Worker(cpf="2", full_name="Novo")

        with mock.patch("users.services.taken_wastepicker_codes", return_value=set()):
            with self.assertRaises(IntegrityError):
                save_with_wastepicker_code(worker, attempts=2)

        self.assertFalse(Worker.objects.filter(cpf="2").exists())
