from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from cooperatives.models import Cooperative
from dms.api import parse_date_param
from materials.models import Material, MaterialGroup
from measurements.models import Measurement
from sales.models import Buyer, Sale
from users.forms import DEFAULT_EMAIL
from users.models import UserType, Worker
from users.services import map_user_type, sanitize_digits


logger = logging.getLogger(__name__)

DEFAULT_GROUP = "Outros"
FILLED_FLAGS = {"Y", "S", "SIM", "TRUE", "1"}


@dataclass
class LegacyImportIssue:
    collection: str
    legacy_id: str
    message: str


@dataclass
class CollectionCounts:
    created: int = 0
    updated: int = 0


@dataclass
class LegacyImportResult:
    counts: dict[str, CollectionCounts] = field(default_factory=dict)
    issues: list[LegacyImportIssue] = field(default_factory=list)
    dry_run: bool = False


def _first(document: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = document.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _legacy_key(document: dict[str, Any], *keys: str) -> str:
    return _text(_first(document, *keys, "_id"))


def _decimal(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        number = Decimal(str(value).strip().replace(",", "."))
        if not number.is_finite():
            return None
        return number.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return None


def _date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return parse_date_param(value)


def _datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    else:
        text = _text(value)
        if not text:
            return None
        try:
            parsed = parse_datetime(text)
        except ValueError:
            parsed = None
        if parsed is None:
            day = parse_date_param(text)
            if day is None:
                return None
            return timezone.make_aware(datetime.combine(day, datetime.min.time()))
    if timezone.is_naive(parsed):
        # pymongo hands back naive UTC datetimes.
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def wastepicker_code(value: Any) -> str:
    """Normalise a legacy ``wastepicker_id`` into the ``WPnnn`` code used here."""
    text = _text(value).upper()
    if text.isdigit():
        return f"WP{int(text):03d}"
    return text


class LegacyImporter:
    """Copy the legacy MongoDB collections into the relational models.

    Every row keeps the key of its source document in ``legacy_id``, so running
    the import again updates the rows it created before.
    """

    def __init__(self, database) -> None:
        self.database = database
        self.result = LegacyImportResult()
        self.cooperatives: dict[str, Cooperative] = {}
        self.materials: dict[str, Material] = {}

    def run(self, *, dry_run: bool = False) -> LegacyImportResult:
        self.result.dry_run = dry_run
        with transaction.atomic():
            self._import("cooperatives", self._import_cooperative)
            self._import("materials", self._import_material)
            self._import("users", self._import_user)
            self._import("measurements", self._import_measurement)
            self._import("sales", self._import_sale)
            if dry_run:
                transaction.set_rollback(True)

        logger.info(
            "Legacy import finished%s: %s, %s issues",
            " (dry run)" if dry_run else "",
            ", ".join(f"{name}={counts.created}+{counts.updated}" for name, counts in self.result.counts.items()),
            len(self.result.issues),
        )
        return self.result

    def _documents(self, collection: str) -> Iterable[dict[str, Any]]:
        return self.database[collection].find({})

    def _import(self, collection: str, handler: Callable[[dict[str, Any], str], Optional[bool]]) -> None:
        counts = self.result.counts.setdefault(collection, CollectionCounts())
        for document in self._documents(collection):
            created = handler(document, collection)
            if created is None:
                continue
            if created:
                counts.created += 1
            else:
                counts.updated += 1

    def _issue(self, collection: str, legacy_id: str, message: str) -> None:
        self.result.issues.append(LegacyImportIssue(collection=collection, legacy_id=legacy_id, message=message))

    def _save(self, instance, created: bool) -> bool:
        instance.save()
        return created

    def _import_cooperative(self, document: dict[str, Any], collection: str) -> Optional[bool]:
        legacy_id = _legacy_key(document, "cooperative_id")
        name = _text(_first(document, "name", "cooperative_name"))
        if not name:
            self._issue(collection, legacy_id, "Cooperativa sem nome.")
            return None

        cooperative = Cooperative.objects.filter(legacy_id=legacy_id).first()
        created = cooperative is None
        cooperative = cooperative or Cooperative(legacy_id=legacy_id)
        cooperative.name = name
        cooperative.contact = _text(document.get("contact"))
        cooperative.address = _text(document.get("address"))
        self._save(cooperative, created)
        self.cooperatives[legacy_id] = cooperative
        return created

    def _import_material(self, document: dict[str, Any], collection: str) -> Optional[bool]:
        legacy_id = _legacy_key(document, "material_id")
        name = _text(_first(document, "material", "name"))
        if not name:
            self._issue(collection, legacy_id, "Material sem nome.")
            return None

        material = Material.objects.filter(legacy_id=legacy_id).first()
        created = material is None
        material = material or Material(legacy_id=legacy_id)
        material.name = name
        material.group = MaterialGroup.objects.resolve(_text(document.get("group")) or DEFAULT_GROUP)
        price = _decimal(document.get("price_per_kg"))
        if price is not None:
            material.price_per_kg = price
        self._save(material, created)
        self.materials[legacy_id] = material
        return created

    def _import_user(self, document: dict[str, Any], collection: str) -> Optional[bool]:
        legacy_id = _legacy_key(document, "user_id")
        cpf = sanitize_digits(_first(document, "cpf", "CPF"))
        full_name = _text(_first(document, "full_name", "name", "fullName", "username"))
        if not cpf:
            self._issue(collection, legacy_id, "Usuário sem CPF.")
            return None
        if not full_name:
            self._issue(collection, legacy_id, "Usuário sem nome.")
            return None

        worker = Worker.objects.filter(legacy_id=legacy_id).first()
        if worker is None:
            worker = Worker.objects.filter(cpf=cpf).first()
            if worker is not None and worker.legacy_id:
                self._issue(collection, legacy_id, f"CPF já importado de outro documento ({worker.legacy_id}).")
                return None
        created = worker is None
        if created:
            worker = Worker(cpf=cpf)
            worker.set_unusable_password()
        elif Worker.objects.filter(cpf=cpf).exclude(pk=worker.pk).exists():
            self._issue(collection, legacy_id, "CPF já pertence a outro usuário.")
            return None

        worker.legacy_id = legacy_id
        worker.cpf = cpf
        worker.full_name = full_name
        worker.user_type = map_user_type(document.get("user_type"))
        if worker.user_type is None:
            worker.user_type = UserType.WASTEPICKER

        code = wastepicker_code(document.get("wastepicker_id"))
        if code and Worker.objects.filter(wastepicker_code__iexact=code).exclude(pk=worker.pk).exists():
            self._issue(collection, legacy_id, f"Código {code} já está em uso.")
            code = ""
        if code:
            worker.wastepicker_code = code

        worker.birth_date = _date(_first(document, "Birth date", "birthdate")) or worker.birth_date
        worker.enter_date = _date(document.get("Entry date")) or worker.enter_date
        worker.exit_date = _date(document.get("Exit date")) or worker.exit_date
        worker.pis = sanitize_digits(_first(document, "PIS", "pis")) or worker.pis
        worker.rg = sanitize_digits(_first(document, "RG", "rg")) or worker.rg
        worker.gender = _text(document.get("gender")) or worker.gender
        worker.email = _text(document.get("email")) or worker.email or DEFAULT_EMAIL
        worker.phone = _text(document.get("phone")) or worker.phone
        if "active" in document:
            worker.is_active = bool(document["active"])

        cooperative_key = _text(_first(document, "cooperative_id", "coopeative_id"))
        if cooperative_key:
            cooperative = self._cooperative(cooperative_key)
            if cooperative is None:
                self._issue(collection, legacy_id, f"Cooperativa {cooperative_key} não encontrada.")
            else:
                worker.cooperative = cooperative

        return self._save(worker, created)

    def _cooperative(self, key: str) -> Optional[Cooperative]:
        if key not in self.cooperatives:
            cooperative = Cooperative.objects.filter(legacy_id=key).first()
            if cooperative is None:
                return None
            self.cooperatives[key] = cooperative
        return self.cooperatives[key]

    def _material(self, key: str) -> Optional[Material]:
        if key not in self.materials:
            material = Material.objects.filter(legacy_id=key).first()
            if material is None:
                return None
            self.materials[key] = material
        return self.materials[key]

    def _worker_by_code(self, value: Any) -> Optional[Worker]:
        code = wastepicker_code(value)
        if not code:
            return None
        return Worker.objects.filter(wastepicker_code__iexact=code).first()

    def _import_measurement(self, document: dict[str, Any], collection: str) -> Optional[bool]:
        legacy_id = _legacy_key(document)
        worker = self._worker_by_code(document.get("wastepicker_id"))
        if worker is None:
            self._issue(collection, legacy_id, f"Catador {_text(document.get('wastepicker_id'))} não encontrado.")
            return None
        material = self._material(_text(document.get("material_id")))
        if material is None:
            self._issue(collection, legacy_id, f"Material {_text(document.get('material_id'))} não encontrado.")
            return None
        weight = _decimal(_first(document, "Weight", "weight"))
        if weight is None or weight <= 0:
            self._issue(collection, legacy_id, "Peso inválido.")
            return None

        measurement = Measurement.objects.filter(legacy_id=legacy_id).first()
        created = measurement is None
        measurement = measurement or Measurement(legacy_id=legacy_id)
        measurement.wastepicker = worker
        measurement.material = material
        measurement.cooperative = worker.cooperative
        measurement.weight_kg = weight
        measurement.timestamp = _datetime(_first(document, "timestamp", "timeStamp")) or timezone.now()
        measurement.bag_filled = _text(document.get("bag_filled")).upper() in FILLED_FLAGS
        return self._save(measurement, created)

    def _import_sale(self, document: dict[str, Any], collection: str) -> Optional[bool]:
        legacy_id = _legacy_key(document)
        material = self._material(_text(document.get("material_id")))
        if material is None:
            self._issue(collection, legacy_id, f"Material {_text(document.get('material_id'))} não encontrado.")
            return None
        cooperative = self._cooperative(_text(_first(document, "cooperative_id", "coopeative_id")))
        if cooperative is None:
            self._issue(collection, legacy_id, "Cooperativa da venda não encontrada.")
            return None
        price = _decimal(_first(document, "price/kg", "price_kg"))
        weight = _decimal(document.get("weight_sold"))
        sale_date = _date(document.get("date"))
        if price is None or price <= 0 or weight is None or weight <= 0 or sale_date is None:
            self._issue(collection, legacy_id, "Venda com preço, peso ou data inválidos.")
            return None
        buyer_name = _text(_first(document, "Buyer", "buyer"))
        if not buyer_name:
            self._issue(collection, legacy_id, "Venda sem comprador.")
            return None

        sale = Sale.objects.filter(legacy_id=legacy_id).first()
        created = sale is None
        sale = sale or Sale(legacy_id=legacy_id)
        sale.material = material
        sale.cooperative = cooperative
        sale.price_per_kg = price
        sale.weight_kg = weight
        sale.date = sale_date
        sale.buyer, _ = Buyer.objects.resolve(buyer_name)
        return self._save(sale, created)
