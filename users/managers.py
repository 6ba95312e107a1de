from __future__ import annotations

from django.contrib.auth.base_user import BaseUserManager
from django.db import models


class WorkerQuerySet(models.QuerySet):
    """Queryset helpers for Worker."""

    def wastepickers(self) -> "WorkerQuerySet":
        return self.filter(user_type=1)

    def managers(self) -> "WorkerQuerySet":
        return self.filter(user_type=0)

    def without_code(self) -> "WorkerQuerySet":
        return self.filter(models.Q(wastepicker_code__isnull=True) | models.Q(wastepicker_code=""))


class WorkerManager(BaseUserManager):
    """Manager for the Worker model, keyed by CPF."""

    use_in_migrations = True

    def get_queryset(self):  # type: ignore[override]
        return WorkerQuerySet(self.model, using=self._db)

    def wastepickers(self):
        return self.get_queryset().wastepickers()

    def managers(self):
        return self.get_queryset().managers()

    def _create_user(self, cpf: str, password: str | None, **extra_fields):
        if not cpf:
            raise ValueError("O trabalhador deve ter um CPF definido.")
        cpf = "".join(ch for ch in str(cpf) if ch.isdigit())
        user = self.model(cpf=cpf, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, cpf: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(cpf, password, **extra_fields)

    def create_superuser(self, cpf: str, password: str | None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("user_type", 0)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superusuários devem ter is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superusuários devem ter is_superuser=True.")
        return self._create_user(cpf, password, **extra_fields)
