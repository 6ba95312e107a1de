from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from materials.models import Material, MaterialGroup
from measurements.models import WorkerContribution
from reports.services.collections import worker_collections
from reports.services.periods import iso_week_bounds
from users.models import Worker


TODAY = date(2024, 3, 13)


class WorkerCollectionsTests(TestCase):
    def setUp(self) -> None:
        self.ana = Worker.objects.create_user(cpf="1", full_name="Ana", wastepicker_code="WP001")
        self.bruno = Worker.objects.create_user(cpf="2", full_name="Bruno", wastepicker_code="WP002")
        paper = MaterialGroup.objects.create(name="Papel")
        metal = MaterialGroup.objects.create(name="Metal")
        self.cardboard = Material.objects.create(name="Papelão", group=paper)
        self.aluminium = Material.objects.create(name="Alumínio", group=metal)

    def _contribution(self, worker, material, week: int, weight: str, year: int = 2024) -> None:
        start, end = iso_week_bounds(year, week)
        WorkerContribution.objects.create(
            wastepicker=worker,
            material=material,
            iso_year=year,
            iso_week=week,
            period_start=start,
            period_end=end,
            weight_kg=Decimal(weight),
        )

    def _seed(self) -> None:
        self._contribution(self.ana, self.cardboard, 11, "20")
        self._contribution(self.ana, self.aluminium, 11, "5")
        self._contribution(self.bruno, self.cardboard, 11, "30")
        self._contribution(self.ana, self.cardboard, 5, "100")

    def test_without_contributions_asks_for_recalculation(self) -> None:
        result = worker_collections("weekly", today=TODAY)

        self.assertEqual(
            result,
            {"noData": True, "message": "Dados de contribuição não calculados. Execute o recálculo primeiro."},
        )

    def test_weekly_ranking(self) -> None:
        self._seed()

        result = worker_collections("weekly", today=TODAY)

        self.assertEqual(
            result,
            {
                "grouped": False,
                "data": [
                    {"wastepicker_id": "WP002", "worker_name": "Bruno", "totalWeight": 30.0},
                    {"wastepicker_id": "WP001", "worker_name": "Ana", "totalWeight": 25.0},
                ],
            },
        )

    def test_monthly_uses_weeks_overlapping_the_month(self) -> None:
        self._seed()
        self._contribution(self.bruno, self.cardboard, 9, "7")

        result = worker_collections("monthly", today=TODAY)

        self.assertEqual(result["data"][0], {"wastepicker_id": "WP002", "worker_name": "Bruno", "totalWeight": 37.0})

    def test_yearly_without_material_is_stacked(self) -> None:
        self._seed()

        result = worker_collections("yearly", today=TODAY)

        cardboard_key, aluminium_key = str(self.cardboard.pk), str(self.aluminium.pk)
        self.assertTrue(result["grouped"])
        self.assertEqual(
            result["materials"],
            [{"id": cardboard_key, "name": "Papelão"}, {"id": aluminium_key, "name": "Alumínio"}],
        )
        self.assertEqual(
            result["workers"][0],
            {
                "wastepicker_id": "WP001",
                "worker_name": "Ana",
                "totalWeight": 125.0,
                cardboard_key: 120.0,
                aluminium_key: 5.0,
            },
        )
        self.assertEqual(result["workers"][1][aluminium_key], 0.0)

    def test_group_filter_covers_group_materials(self) -> None:
        self._seed()

        result = worker_collections("weekly", material_filter="group-Metal", today=TODAY)

        self.assertEqual(result["data"], [{"wastepicker_id": "WP001", "worker_name": "Ana", "totalWeight": 5.0}])

    def test_unknown_group(self) -> None:
        self._seed()

        result = worker_collections("weekly", material_filter="group_vidro", today=TODAY)

        self.assertEqual(result, {"noData": True, "message": "Não há materiais neste grupo"})

    def test_empty_period_messages(self) -> None:
        self._seed()

        by_material = worker_collections("yearly", worker=self.bruno, material_filter=str(self.aluminium.pk), today=TODAY)
        overall = worker_collections("weekly", today=date(2024, 4, 10))

        self.assertEqual(by_material["message"], "Não há coletas deste material em este ano")
        self.assertEqual(overall["message"], "Não há coletas disponíveis para esta semana")


class WorkerCollectionsApiTests(TestCase):
    def setUp(self) -> None:
        self.client.force_login(Worker.objects.create_user(cpf="1", full_name="Ana"))

    def test_unknown_worker_is_rejected(self) -> None:
        response = self.client.get(reverse("reports:worker-collections"), {"worker_id": "WP404"})

        self.assertEqual(response.status_code, 400)

    def test_defaults_to_monthly(self) -> None:
        response = self.client.get(reverse("reports:worker-collections"))

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["noData"])
