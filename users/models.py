from __future__ import annotations

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone

from .managers import WorkerManager


class UserType(models.IntegerChoices):
    MANAGER = 0, "Gerência"
    WASTEPICKER = 1, "Catador"


class Worker(AbstractBaseUser, PermissionsMixin):
    cpf = models.CharField("CPF", max_length=14, unique=True)
    full_name = models.CharField("Nome completo", max_length=150)
    cooperative = models.ForeignKey(
        "cooperatives.Cooperative",
        on_delete=models.PROTECT,
        related_name="workers",
        null=True,
        blank=True,
        verbose_name="Cooperativa",
    )
    user_type = models.PositiveSmallIntegerField(
        "Tipo de usuário",
        choices=UserType.choices,
        default=UserType.WASTEPICKER,
    )
    wastepicker_code = models.CharField(
        "Código do catador",
        max_length=16,
        unique=True,
        null=True,
        blank=True,
    )
    birth_date = models.DateField("Data de nascimento", null=True, blank=True)
    enter_date = models.DateField("Data de entrada", null=True, blank=True)
    exit_date = models.DateField("Data de saída", null=True, blank=True)
    pis = models.CharField("PIS", max_length=20, blank=True)
    rg = models.CharField("RG", max_length=20, blank=True)
    gender = models.CharField("Gênero", max_length=32, blank=True)
    email = models.EmailField("E-mail", blank=True)
    phone = models.CharField("Telefone", max_length=32, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)
    last_update = models.DateTimeField(auto_now=True)
    legacy_id = models.CharField("ID legado", max_length=64, blank=True, db_index=True)

    objects = WorkerManager()

    USERNAME_FIELD = "cpf"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        verbose_name = "Trabalhador"
        verbose_name_plural = "Trabalhadores"
        ordering = ["full_name"]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.cpf})"

    def save(self, *args, **kwargs):
        if self.user_type == UserType.MANAGER:
            self.is_staff = True
        super().save(*args, **kwargs)

    @property
    def is_manager(self) -> bool:
        return self.user_type == UserType.MANAGER

    @property
    def is_wastepicker(self) -> bool:
        return self.user_type == UserType.WASTEPICKER

    @property
    def display_code(self) -> str:
        if self.wastepicker_code:
            return self.wastepicker_code
        return f"WP{self.pk:03d}" if self.pk else ""

    def get_full_name(self) -> str:
        return self.full_name

    def get_short_name(self) -> str:
        return self.full_name.split(" ")[0] if self.full_name else ""
