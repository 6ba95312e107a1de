from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from cooperatives.models import Cooperative
from inventory.models import MaterialStock
from inventory.services import StockService
from materials.models import Material, MaterialGroup
from measurements.models import Measurement
from sales.models import Buyer, Sale
from users.models import Worker


class StockServiceTests(TestCase):
    def setUp(self) -> None:
        self.cooperative = Cooperative.objects.create(name="Recicla")
        group = MaterialGroup.objects.create(name="Metal")
        self.aluminium = Material.objects.create(name="Alumínio", group=group)
        self.service = StockService()

    def test_register_collection_and_sale_keep_current_balance(self) -> None:
        self.service.register_collection(material=self.aluminium, cooperative=self.cooperative, quantity=Decimal("25"))
        self.service.register_sale(material=self.aluminium, cooperative=self.cooperative, quantity=Decimal("10"))

        balance = MaterialStock.objects.get(material=self.aluminium, cooperative=self.cooperative)
        self.assertEqual(balance.total_collected_kg, Decimal("25"))
        self.assertEqual(balance.total_sold_kg, Decimal("10"))
        self.assertEqual(balance.current_stock_kg, Decimal("15"))
        self.assertEqual(self.service.available_for(self.aluminium, self.cooperative), Decimal("15"))

    def test_zero_quantity_is_ignored(self) -> None:
        result = self.service.register_collection(
            material=self.aluminium,
            cooperative=self.cooperative,
            quantity=Decimal("0"),
        )

        self.assertIsNone(result)
        self.assertFalse(MaterialStock.objects.exists())

    def test_available_for_unknown_pair_is_zero(self) -> None:
        other = Cooperative.objects.create(name="Outra")

        self.assertEqual(self.service.available_for(self.aluminium, other), Decimal("0.00"))


class StockSignalTests(TestCase):
    def setUp(self) -> None:
        self.cooperative = Cooperative.objects.create(name="Recicla")
        self.other_cooperative = Cooperative.objects.create(name="Aurora")
        group = MaterialGroup.objects.create(name="Papel")
        self.cardboard = Material.objects.create(name="Papelão", group=group)
        self.paper = Material.objects.create(name="Papel branco", group=group)
        self.worker = Worker.objects.create_user(cpf="1", full_name="Ana", cooperative=self.cooperative)
        self.buyer = Buyer.objects.create(name="Aparas Sul")

    def _balance(self, material, cooperative) -> MaterialStock:
        return MaterialStock.objects.get(material=material, cooperative=cooperative)

    def test_measurement_lifecycle_updates_collected_total(self) -> None:
        measurement = Measurement.objects.create(
            wastepicker=self.worker,
            material=self.cardboard,
            weight_kg=Decimal("12"),
        )
        self.assertEqual(self._balance(self.cardboard, self.cooperative).current_stock_kg, Decimal("12"))

        measurement.weight_kg = Decimal("8")
        measurement.save()
        self.assertEqual(self._balance(self.cardboard, self.cooperative).total_collected_kg, Decimal("8"))

        measurement.material = self.paper
        measurement.save()
        self.assertEqual(self._balance(self.cardboard, self.cooperative).current_stock_kg, Decimal("0"))
        self.assertEqual(self._balance(self.paper, self.cooperative).current_stock_kg, Decimal("8"))

        measurement.delete()
        self.assertEqual(self._balance(self.paper, self.cooperative).current_stock_kg, Decimal("0"))

    def test_sale_lifecycle_updates_sold_total(self) -> None:
        Measurement.objects.create(wastepicker=self.worker, material=self.cardboard, weight_kg=Decimal("30"))
        sale = Sale.objects.create(
            date=date(2024, 3, 4),
            material=self.cardboard,
            cooperative=self.cooperative,
            weight_kg=Decimal("10"),
            price_per_kg=Decimal("1.20"),
            buyer=self.buyer,
        )
        self.assertEqual(self._balance(self.cardboard, self.cooperative).current_stock_kg, Decimal("20"))

        sale.cooperative = self.other_cooperative
        sale.save()
        self.assertEqual(self._balance(self.cardboard, self.cooperative).current_stock_kg, Decimal("30"))
        self.assertEqual(self._balance(self.cardboard, self.other_cooperative).current_stock_kg, Decimal("-10"))

        sale.delete()
        self.assertEqual(self._balance(self.cardboard, self.other_cooperative).total_sold_kg, Decimal("0"))


class RebuildStockBalancesCommandTests(TestCase):
    def setUp(self) -> None:
        self.cooperative = Cooperative.objects.create(name="Recicla")
        group = MaterialGroup.objects.create(name="Plástico")
        self.pet = Material.objects.create(name="PET", group=group)
        self.pp = Material.objects.create(name="PP", group=group)
        worker = Worker.objects.create_user(cpf="1", full_name="Ana", cooperative=self.cooperative)
        Measurement.objects.create(wastepicker=worker, material=self.pet, weight_kg=Decimal("40"))
        Measurement.objects.create(wastepicker=worker, material=self.pp, weight_kg=Decimal("5"))
        Sale.objects.create(
            date=date(2024, 3, 4),
            material=self.pet,
            cooperative=self.cooperative,
            weight_kg=Decimal("15"),
            price_per_kg=Decimal("2.00"),
            buyer=Buyer.objects.create(name="Recicladora"),
        )

    def test_rebuild_fixes_drifted_balances(self) -> None:
        MaterialStock.objects.filter(material=self.pet).update(
            total_collected_kg=Decimal("1"),
            total_sold_kg=Decimal("0"),
            current_stock_kg=Decimal("1"),
        )
        output = StringIO()

        call_command("rebuild_stock_balances", stdout=output)

        balance = MaterialStock.objects.get(material=self.pet, cooperative=self.cooperative)
        self.assertEqual(balance.total_collected_kg, Decimal("40"))
        self.assertEqual(balance.total_sold_kg, Decimal("15"))
        self.assertEqual(balance.current_stock_kg, Decimal("25"))
        self.assertIn("Saldos atualizados: 1", output.getvalue())

    def test_rebuild_single_material(self) -> None:
        MaterialStock.objects.update(current_stock_kg=Decimal("999"))

        call_command("rebuild_stock_balances", material=self.pp.pk, stdout=StringIO())

        self.assertEqual(MaterialStock.objects.get(material=self.pp).current_stock_kg, Decimal("5"))
        self.assertEqual(MaterialStock.objects.get(material=self.pet).current_stock_kg, Decimal("999"))
