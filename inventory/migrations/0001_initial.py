import decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("cooperatives", "0001_initial"),
        ("materials", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MaterialStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "total_collected_kg",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=14,
                        verbose_name="Total coletado (kg)",
                    ),
                ),
                (
                    "total_sold_kg",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=14,
                        verbose_name="Total vendido (kg)",
                    ),
                ),
                (
                    "current_stock_kg",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=14,
                        verbose_name="Estoque atual (kg)",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_balances",
                        to="cooperatives.cooperative",
                        verbose_name="Cooperativa",
                    ),
                ),
                (
                    "material",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_balances",
                        to="materials.material",
                        verbose_name="Material",
                    ),
                ),
            ],
            options={
                "verbose_name": "Estoque de material",
                "verbose_name_plural": "Estoques de materiais",
                "ordering": ("material__name", "cooperative__name"),
            },
        ),
        migrations.AddConstraint(
            model_name="materialstock",
            constraint=models.UniqueConstraint(
                fields=("cooperative", "material"),
                name="unique_stock_per_cooperative_material",
            ),
        ),
    ]
