from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.db import transaction
from django.utils import timezone

from cooperatives.models import Cooperative, Device
from materials.models import Material, MaterialGroup
from measurements.models import Measurement
from measurements.services.contributions import recalculate_contributions
from sales.models import Buyer, Sale
from users.models import UserType, Worker


MANAGER_CPF = "12345678901"
MANAGER_PASSWORD = "manager123"
WORKER_CPF = "98765432100"
WORKER_PASSWORD = "worker123"


def _at(day: str) -> datetime:
    return timezone.make_aware(datetime.fromisoformat(f"{day}T08:00:00"))


class Command(BaseCommand):
    help = "Cria cooperativas, materiais, trabalhadores, coletas e vendas de demonstração."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--force",
            action="store_true",
            help="Permite executar com DEBUG desativado.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        if not settings.DEBUG and not options["force"]:
            raise CommandError("DEBUG está desativado. Use --force para criar os dados de demonstração.")
        if Worker.objects.filter(cpf=MANAGER_CPF).exists():
            self.stdout.write(self.style.WARNING("Os dados de demonstração já foram criados."))
            return

        with transaction.atomic():
            self._seed()
        result = recalculate_contributions()

        self.stdout.write(self.style.SUCCESS("Dados de demonstração criados."))
        self.stdout.write(f"Contribuições semanais calculadas: {result.processed}")
        self.stdout.write("Contas de teste:")
        self.stdout.write(f"- Gerência CPF: {MANAGER_CPF} / Senha: {MANAGER_PASSWORD}")
        self.stdout.write(f"- Catador CPF: {WORKER_CPF} / Senha: {WORKER_PASSWORD}")

    def _seed(self) -> None:
        central = Cooperative.objects.create(name="Cooperativa Central Horizonte")
        leste = Cooperative.objects.create(name="Cooperativa Vale do Leste")

        papers = MaterialGroup.objects.resolve("Papéis")
        plastics = MaterialGroup.objects.resolve("Plásticos")
        cardboard = Material.objects.create(name="Papelão Ondulado", group=papers, price_per_kg=Decimal("0.90"))
        white_paper = Material.objects.create(name="Papel Branco", group=papers, price_per_kg=Decimal("1.10"))
        pet = Material.objects.create(name="Plástico PET Cristal", group=plastics, price_per_kg=Decimal("2.00"))

        scale_1 = Device.objects.create(cooperative=central, label="Balança 1")
        scale_2 = Device.objects.create(cooperative=central, label="Balança 2")

        city_buyer, _ = Buyer.objects.resolve("Recicla Cidades LTDA")
        eco_buyer, _ = Buyer.objects.resolve("Eco Verde Comercial")

        manager = Worker.objects.create_user(
            cpf=MANAGER_CPF,
            password=MANAGER_PASSWORD,
            full_name="Rosa Almeida",
            cooperative=central,
            user_type=UserType.MANAGER,
            birth_date=date(1985, 4, 12),
            enter_date=date(2020, 2, 1),
            pis="12345678900",
            rg="123456789",
            gender="Feminino",
            email="rosa.almeida@coophorizonte.org",
        )
        joao = Worker.objects.create_user(
            cpf=WORKER_CPF,
            password=WORKER_PASSWORD,
            full_name="João Carvalho",
            cooperative=central,
            wastepicker_code="WP001",
            birth_date=date(1991, 7, 19),
            enter_date=date(2021, 5, 10),
            pis="98765432100",
            rg="987654321",
            gender="Masculino",
            email="joao.carvalho@coophorizonte.org",
        )
        maria = Worker.objects.create_user(
            cpf="56473829100",
            password=WORKER_PASSWORD,
            full_name="Maria Oliveira",
            cooperative=central,
            wastepicker_code="WP002",
            birth_date=date(1994, 3, 3),
            enter_date=date(2022, 1, 15),
            pis="56473829100",
            rg="564738291",
            gender="Feminino",
            email="maria.oliveira@coophorizonte.org",
        )
        pedro = Worker.objects.create_user(
            cpf="43210987654",
            password=WORKER_PASSWORD,
            full_name="Pedro Santos",
            cooperative=leste,
            wastepicker_code="WP003",
            birth_date=date(1988, 11, 2),
            enter_date=date(2019, 9, 1),
            pis="43210987650",
            rg="432109876",
            gender="Masculino",
            email="pedro.santos@coopvaleleste.org",
        )

        readings = [
            (joao, cardboard, scale_1, "135.50", "2024-02-05", True),
            (maria, pet, scale_2, "92.40", "2024-02-06", True),
            (joao, white_paper, scale_1, "48.10", "2024-02-07", True),
            (maria, pet, scale_2, "76.35", "2024-02-08", False),
            (pedro, cardboard, None, "88.60", "2024-02-10", True),
        ]
        for worker, material, device, weight, day, bag_filled in readings:
            Measurement.objects.create(
                wastepicker=worker,
                material=material,
                device=device,
                cooperative=worker.cooperative,
                weight_kg=Decimal(weight),
                timestamp=_at(day),
                bag_filled=bag_filled,
            )

        Sale.objects.create(
            date=date(2024, 2, 12),
            material=cardboard,
            cooperative=central,
            weight_kg=Decimal("120.00"),
            price_per_kg=Decimal("1.35"),
            buyer=city_buyer,
            responsible=manager,
        )
        Sale.objects.create(
            date=date(2024, 2, 18),
            material=pet,
            cooperative=central,
            weight_kg=Decimal("85.00"),
            price_per_kg=Decimal("2.40"),
            buyer=eco_buyer,
            responsible=manager,
        )
