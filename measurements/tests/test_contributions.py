from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from cooperatives.models import Cooperative
from materials.models import Material, MaterialGroup
from measurements.models import Measurement, WorkerContribution
from measurements.services.contributions import calculate_daily_contributions, recalculate_contributions
from users.models import Worker


def local_dt(*args) -> datetime:
    return timezone.make_aware(datetime(*args))


class DailyContributionTests(TestCase):
    def _reading(self, weight, when, bag_filled=False, worker_id=1, material_id=1):
        return Measurement(
            wastepicker_id=worker_id,
            material_id=material_id,
            weight_kg=Decimal(weight),
            timestamp=when,
            bag_filled=bag_filled,
        )

    def test_filled_bag_counts_first_filled_reading(self):
        readings = [
            self._reading("3", local_dt(2024, 3, 4, 8)),
            self._reading("12", local_dt(2024, 3, 4, 11), bag_filled=True),
            self._reading("20", local_dt(2024, 3, 4, 15), bag_filled=True),
        ]

        contributions = calculate_daily_contributions(readings)

        self.assertEqual(len(contributions), 1)
        self.assertEqual(contributions[0].net_weight, Decimal("12"))
        self.assertEqual(contributions[0].day, date(2024, 3, 4))

    def test_without_filled_bag_counts_heaviest_reading(self):
        readings = [
            self._reading("7", local_dt(2024, 3, 4, 8)),
            self._reading("9.5", local_dt(2024, 3, 4, 10)),
            self._reading("4", local_dt(2024, 3, 4, 12)),
        ]

        contributions = calculate_daily_contributions(readings)

        self.assertEqual(contributions[0].net_weight, Decimal("9.5"))

    def test_groups_by_worker_material_and_local_day(self):
        readings = [
            self._reading("5", local_dt(2024, 3, 4, 23, 30)),
            self._reading("6", local_dt(2024, 3, 5, 0, 30)),
            self._reading("2", local_dt(2024, 3, 4, 9), material_id=2),
            self._reading("8", local_dt(2024, 3, 4, 9), worker_id=2),
        ]

        contributions = calculate_daily_contributions(readings)

        self.assertEqual(len(contributions), 4)
        days = sorted(item.day for item in contributions if item.worker_id == 1 and item.material_id == 1)
        self.assertEqual(days, [date(2024, 3, 4), date(2024, 3, 5)])


class RecalculateContributionsTests(TestCase):
    def setUp(self):
        self.cooperative = Cooperative.objects.create(name="Recicla")
        group = MaterialGroup.objects.create(name="Plástico")
        self.pet = Material.objects.create(name="PET", group=group, price_per_kg=Decimal("3.00"))
        self.pp = Material.objects.create(name="PP", group=group)
        self.worker = Worker.objects.create_user(cpf="1", full_name="Ana", cooperative=self.cooperative)

    def _measure(self, material, weight, when, bag_filled=False):
        return Measurement.objects.create(
            wastepicker=self.worker,
            material=material,
            weight_kg=Decimal(weight),
            timestamp=when,
            bag_filled=bag_filled,
        )

    def test_returns_empty_result_without_measurements(self):
        result = recalculate_contributions()

        self.assertEqual(result.processed, 0)
        self.assertEqual(result.statistics, {})

    @override_settings(DMS_DEFAULT_PRICE_PER_KG=Decimal("2.50"))
    def test_buckets_days_by_iso_week_and_prices_them(self):
        # 2024-03-04 and 2024-03-06 are in ISO week 10, 2024-03-11 is in week 11.
        self._measure(self.pet, "10", local_dt(2024, 3, 4, 9), bag_filled=True)
        self._measure(self.pet, "4", local_dt(2024, 3, 6, 9))
        self._measure(self.pet, "6", local_dt(2024, 3, 6, 15))
        self._measure(self.pet, "5", local_dt(2024, 3, 11, 9))
        self._measure(self.pp, "2", local_dt(2024, 3, 4, 9))

        result = recalculate_contributions()

        self.assertEqual(result.processed, 3)
        week_10 = WorkerContribution.objects.get(material=self.pet, iso_year=2024, iso_week=10)
        self.assertEqual(week_10.weight_kg, Decimal("16.00"))
        self.assertEqual(week_10.earnings, Decimal("48.00"))
        self.assertEqual(week_10.period_start, date(2024, 3, 4))
        self.assertEqual(week_10.period_end, date(2024, 3, 10))
        self.assertEqual(week_10.cooperative, self.cooperative)
        self.assertEqual(
            week_10.daily_breakdown,
            [{"date": "2024-03-04", "weight": 10.0}, {"date": "2024-03-06", "weight": 6.0}],
        )
        unpriced = WorkerContribution.objects.get(material=self.pp)
        self.assertEqual(unpriced.earnings, Decimal("5.00"))
        self.assertEqual(
            result.statistics,
            {
                "totalMeasurements": 5,
                "dailyContributions": 4,
                "weeklyContributions": 3,
                "totalWorkers": 1,
                "totalMaterials": 2,
                "totalWeight": 23.0,
                "totalEarnings": 68.0,
            },
        )

    def test_replaces_previous_contributions(self):
        self._measure(self.pet, "10", local_dt(2024, 3, 4, 9))
        recalculate_contributions()
        Measurement.objects.all().delete()
        self._measure(self.pet, "3", local_dt(2024, 1, 2, 9))

        recalculate_contributions()

        contribution = WorkerContribution.objects.get()
        self.assertEqual((contribution.iso_year, contribution.iso_week), (2024, 1))
        self.assertEqual(contribution.weight_kg, Decimal("3.00"))

    def test_iso_year_boundary(self):
        # 2024-12-30 belongs to ISO week 1 of 2025.
        self._measure(self.pet, "4", local_dt(2024, 12, 30, 9))

        recalculate_contributions()

        contribution = WorkerContribution.objects.get()
        self.assertEqual((contribution.iso_year, contribution.iso_week), (2025, 1))
        self.assertEqual(contribution.period_start, date(2024, 12, 30))

    def test_management_command_reports_statistics(self):
        self._measure(self.pet, "10", local_dt(2024, 3, 4, 9))
        output = StringIO()

        call_command("recalculate_contributions", stdout=output)

        self.assertIn("weeklyContributions: 1", output.getvalue())
        self.assertEqual(WorkerContribution.objects.count(), 1)
