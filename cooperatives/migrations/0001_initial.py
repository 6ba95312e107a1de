from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Cooperative",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=150, verbose_name="Nome")),
                ("contact", models.CharField(blank=True, max_length=150, verbose_name="Contato")),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="Endereço")),
                ("legacy_id", models.CharField(blank=True, db_index=True, max_length=64, verbose_name="ID legado")),
            ],
            options={
                "verbose_name": "Cooperativa",
                "verbose_name_plural": "Cooperativas",
                "ordering": ("name",),
            },
        ),
        migrations.CreateModel(
            name="Device",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("label", models.CharField(blank=True, max_length=64, verbose_name="Identificação")),
                ("is_active", models.BooleanField(default=True, verbose_name="Ativo")),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="devices",
                        to="cooperatives.cooperative",
                        verbose_name="Cooperativa",
                    ),
                ),
            ],
            options={
                "verbose_name": "Balança",
                "verbose_name_plural": "Balanças",
                "ordering": ("cooperative__name", "id"),
            },
        ),
    ]
