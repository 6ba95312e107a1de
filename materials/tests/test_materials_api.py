from __future__ import annotations

import json
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from cooperatives.models import Cooperative
from materials.models import Material, MaterialGroup
from measurements.models import Measurement
from users.models import UserType, Worker


class MaterialApiTests(TestCase):
    def setUp(self):
        self.cooperative = Cooperative.objects.create(name="Recicla")
        self.manager = Worker.objects.create_user(
            cpf="99988877766",
            password="segredo123",
            full_name="Gestora",
            user_type=UserType.MANAGER,
            cooperative=self.cooperative,
        )
        self.plastics = MaterialGroup.objects.create(name="Plástico")
        self.pet = Material.objects.create(name="PET", group=self.plastics, price_per_kg=Decimal("3.20"))
        self.client.force_login(self.manager)

    def _send(self, method, url, payload):
        return getattr(self.client, method)(url, data=json.dumps(payload), content_type="application/json")

    def test_lists_groups_then_materials(self):
        paper = MaterialGroup.objects.create(name="Papel")
        Material.objects.create(name="Papelão", group=paper)
        MaterialGroup.objects.create(name="Vazio")

        response = self.client.get(reverse("materials:collection"))

        body = response.json()
        self.assertEqual(
            body[:2],
            [
                {"id": "group-Papel", "group": "Papel", "isGroup": True},
                {"id": "group-Plástico", "group": "Plástico", "isGroup": True},
            ],
        )
        self.assertEqual(len(body), 4)
        pet = next(item for item in body if item.get("name") == "PET")
        self.assertEqual(pet["price_per_kg"], 3.2)
        self.assertEqual(pet["group"], "Plástico")

    def test_create_reuses_group_case_insensitively(self):
        response = self._send(
            "post",
            reverse("materials:collection"),
            {"material": " PEAD ", "group": "plástico", "price_per_kg": "2.10"},
        )

        self.assertEqual(response.status_code, 201)
        material = Material.objects.get(name="PEAD")
        self.assertEqual(material.group, self.plastics)
        self.assertEqual(material.price_per_kg, Decimal("2.10"))

    def test_create_creates_missing_group(self):
        response = self._send("post", reverse("materials:collection"), {"material": "Alumínio", "group": "Metal"})

        self.assertEqual(response.status_code, 201)
        self.assertTrue(MaterialGroup.objects.filter(name="Metal").exists())
        self.assertIsNone(Material.objects.get(name="Alumínio").price_per_kg)

    def test_create_rejects_duplicates_and_missing_fields(self):
        duplicate = self._send("post", reverse("materials:collection"), {"material": "pet", "group": "Plástico"})
        missing = self._send("post", reverse("materials:collection"), {"material": "Vidro"})

        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json()["error"], "Este material já existe")
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["error"], "Nome do material e grupo são obrigatórios")

    def test_wastepicker_can_list_but_not_create(self):
        wastepicker = Worker.objects.create_user(cpf="1", password="segredo123", full_name="Catador")
        self.client.force_login(wastepicker)

        listed = self.client.get(reverse("materials:collection"))
        created = self._send("post", reverse("materials:collection"), {"material": "Vidro", "group": "Vidro"})

        self.assertEqual(listed.status_code, 200)
        self.assertEqual(created.status_code, 403)

    def test_update_material(self):
        other = Material.objects.create(name="PP", group=self.plastics)

        response = self._send(
            "put",
            reverse("materials:detail", args=[self.pet.pk]),
            {"material": "PET Cristal", "group": "Plástico Rígido"},
        )
        duplicate = self._send(
            "put",
            reverse("materials:detail", args=[other.pk]),
            {"material": "pet cristal", "group": "Plástico"},
        )
        missing = self._send("put", reverse("materials:detail", args=[9999]), {"material": "X", "group": "Y"})

        self.assertEqual(response.status_code, 200)
        self.pet.refresh_from_db()
        self.assertEqual(self.pet.name, "PET Cristal")
        self.assertEqual(self.pet.group.name, "Plástico Rígido")
        self.assertEqual(self.pet.price_per_kg, Decimal("3.20"))
        self.assertEqual(duplicate.json()["error"], "Já existe outro material com este nome")
        self.assertEqual(missing.status_code, 404)

    def test_delete_unused_material(self):
        response = self.client.delete(reverse("materials:detail", args=[self.pet.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Material.objects.filter(pk=self.pet.pk).exists())

    def test_delete_material_in_use_is_refused(self):
        wastepicker = Worker.objects.create_user(cpf="1", full_name="Catador", cooperative=self.cooperative)
        Measurement.objects.create(wastepicker=wastepicker, material=self.pet, weight_kg=Decimal("5"))

        response = self.client.delete(reverse("materials:detail", args=[self.pet.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Material.objects.filter(pk=self.pet.pk).exists())

    def test_delete_unknown_material(self):
        response = self.client.delete(reverse("materials:detail", args=[9999]))

        self.assertEqual(response.status_code, 404)
