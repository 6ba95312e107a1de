import decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("cooperatives", "0001_initial"),
        ("materials", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Measurement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "weight_kg",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.01"))],
                        verbose_name="Peso (kg)",
                    ),
                ),
                (
                    "timestamp",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name="Registrado em"),
                ),
                ("bag_filled", models.BooleanField(default=False, verbose_name="Bag cheio")),
                ("legacy_id", models.CharField(blank=True, db_index=True, max_length=64, verbose_name="ID legado")),
                (
                    "cooperative",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="measurements",
                        to="cooperatives.cooperative",
                        verbose_name="Cooperativa",
                    ),
                ),
                (
                    "device",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="measurements",
                        to="cooperatives.device",
                        verbose_name="Balança",
                    ),
                ),
                (
                    "material",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="measurements",
                        to="materials.material",
                        verbose_name="Material",
                    ),
                ),
                (
                    "wastepicker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="measurements",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Catador",
                    ),
                ),
            ],
            options={
                "verbose_name": "Coleta",
                "verbose_name_plural": "Coletas",
                "ordering": ("-timestamp", "-id"),
            },
        ),
        migrations.CreateModel(
            name="WorkerContribution",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("iso_year", models.PositiveSmallIntegerField(verbose_name="Ano ISO")),
                ("iso_week", models.PositiveSmallIntegerField(verbose_name="Semana ISO")),
                ("period_start", models.DateField(verbose_name="Início da semana")),
                ("period_end", models.DateField(verbose_name="Fim da semana")),
                (
                    "weight_kg",
                    models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=12, verbose_name="Peso (kg)"),
                ),
                (
                    "earnings",
                    models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=12, verbose_name="Ganhos"),
                ),
                ("daily_breakdown", models.JSONField(blank=True, default=list, verbose_name="Detalhe diário")),
                ("last_updated", models.DateTimeField(auto_now=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="contributions",
                        to="cooperatives.cooperative",
                        verbose_name="Cooperativa",
                    ),
                ),
                (
                    "material",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="contributions",
                        to="materials.material",
                        verbose_name="Material",
                    ),
                ),
                (
                    "wastepicker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contributions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Catador",
                    ),
                ),
            ],
            options={
                "verbose_name": "Contribuição semanal",
                "verbose_name_plural": "Contribuições semanais",
                "ordering": ("-iso_year", "-iso_week", "wastepicker__full_name"),
            },
        ),
        migrations.AddConstraint(
            model_name="workercontribution",
            constraint=models.UniqueConstraint(
                fields=("wastepicker", "material", "iso_year", "iso_week"),
                name="unique_contribution_per_worker_material_week",
            ),
        ),
        migrations.AddIndex(
            model_name="workercontribution",
            index=models.Index(fields=["iso_year", "iso_week"], name="contribution_period_idx"),
        ),
    ]
