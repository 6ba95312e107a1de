import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import users.managers


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
        ("cooperatives", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Worker",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                ("cpf", models.CharField(max_length=14, unique=True, verbose_name="CPF")),
                ("full_name", models.CharField(max_length=150, verbose_name="Nome completo")),
                (
                    "user_type",
                    models.PositiveSmallIntegerField(
                        choices=[(0, "Gerência"), (1, "Catador")],
                        default=1,
                        verbose_name="Tipo de usuário",
                    ),
                ),
                (
                    "wastepicker_code",
                    models.CharField(
                        blank=True,
                        max_length=16,
                        null=True,
                        unique=True,
                        verbose_name="Código do catador",
                    ),
                ),
                ("birth_date", models.DateField(blank=True, null=True, verbose_name="Data de nascimento")),
                ("enter_date", models.DateField(blank=True, null=True, verbose_name="Data de entrada")),
                ("exit_date", models.DateField(blank=True, null=True, verbose_name="Data de saída")),
                ("pis", models.CharField(blank=True, max_length=20, verbose_name="PIS")),
                ("rg", models.CharField(blank=True, max_length=20, verbose_name="RG")),
                ("gender", models.CharField(blank=True, max_length=32, verbose_name="Gênero")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="E-mail")),
                ("phone", models.CharField(blank=True, max_length=32, verbose_name="Telefone")),
                ("is_active", models.BooleanField(default=True)),
                ("is_staff", models.BooleanField(default=False)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_update", models.DateTimeField(auto_now=True)),
                ("legacy_id", models.CharField(blank=True, db_index=True, max_length=64, verbose_name="ID legado")),
                (
                    "cooperative",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="workers",
                        to="cooperatives.cooperative",
                        verbose_name="Cooperativa",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all permissions granted to each of "
                            "their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "Trabalhador",
                "verbose_name_plural": "Trabalhadores",
                "ordering": ["full_name"],
            },
            managers=[
                ("objects", users.managers.WorkerManager()),
            ],
        ),
    ]
