from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from django.db import transaction
from django.utils.dateparse import parse_date
from openpyxl import load_workbook

from cooperatives.models import Cooperative
from materials.models import Material
from sales.models import Buyer, Sale


logger = logging.getLogger(__name__)

SALES_SHEET = "Vendas"


class SaleImportError(Exception):
    """Raised when the workbook does not have the required structure."""


@dataclass
class SaleImportIssue:
    row_number: int
    message: str
    reference: str | None = None


@dataclass
class SaleImportResult:
    created_sales: int = 0
    created_buyers: int = 0
    issues: list[SaleImportIssue] = field(default_factory=list)


def _normalize_header(value: Any) -> str:
    text = str(value or "").strip().lower()
    text = unicodedata.normalize("NFKD", text)
    text = "".join(char for char in text if not unicodedata.combining(char))
    text = re.sub(r"[^\w\s]", "_", text, flags=re.ASCII)
    text = re.sub(r"\s+", "_", text)
    text = re.sub(r"_+", "_", text)
    return text.strip("_")


SALE_FIELD_ALIASES: dict[str, set[str]] = {
    "date": {"data", "data_da_venda"},
    "material": {"material"},
    "cooperative": {"cooperativa"},
    "weight": {"peso_kg", "peso", "peso_vendido"},
    "price": {"preco_kg", "preco_por_kg", "preco"},
    "buyer": {"comprador", "buyer"},
}


def import_sales_from_workbook(file_obj, *, responsible=None) -> SaleImportResult:
    """Create buyers and sales from the ``Vendas`` sheet of an .xlsx workbook."""
    file_obj.seek(0)
    try:
        workbook = load_workbook(file_obj, data_only=True)
    except Exception as exc:  # pragma: no cover - openpyxl raises many types
        raise SaleImportError("Não foi possível ler o arquivo. Verifique se é um .xlsx válido.") from exc

    sheet_lookup = {_normalize_header(name): name for name in workbook.sheetnames}
    sheet_name = sheet_lookup.get(_normalize_header(SALES_SHEET))
    if not sheet_name:
        raise SaleImportError(f"Planilha obrigatória não encontrada: {SALES_SHEET}.")
    sheet = workbook[sheet_name]

    header_cells = next(sheet.iter_rows(min_row=1, max_row=1), None)
    if not header_cells:
        raise SaleImportError("A planilha Vendas está vazia.")
    columns = _resolve_columns(_build_header_index(header_cells), SALE_FIELD_ALIASES)
    missing = sorted(set(SALE_FIELD_ALIASES) - set(columns))
    if missing:
        raise SaleImportError(f"Colunas obrigatórias ausentes: {', '.join(missing)}.")

    material_lookup = {_normalize_name(item.name): item for item in Material.objects.all()}
    cooperative_lookup = {_normalize_name(item.name): item for item in Cooperative.objects.all()}

    result = SaleImportResult()
    with transaction.atomic():
        for row in sheet.iter_rows(min_row=2):
            values = {key: row[index - 1].value if len(row) >= index else None for key, index in columns.items()}
            if all(value in (None, "") for value in values.values()):
                continue
            row_number = row[0].row
            sale = _build_sale(values, row_number, material_lookup, cooperative_lookup, result)
            if sale is None:
                continue
            buyer, created = Buyer.objects.resolve(_stringify(values["buyer"]))
            if created:
                result.created_buyers += 1
            sale.buyer = buyer
            sale.responsible = responsible
            sale.save()
            result.created_sales += 1

    logger.info(
        "Sales workbook imported: %s sales, %s buyers, %s issues",
        result.created_sales,
        result.created_buyers,
        len(result.issues),
    )
    return result


def _build_sale(
    values: dict[str, Any],
    row_number: int,
    material_lookup: dict[str, Material],
    cooperative_lookup: dict[str, Cooperative],
    result: SaleImportResult,
) -> Sale | None:
    issues_before = len(result.issues)

    def issue(message: str, reference: Any = None) -> None:
        result.issues.append(
            SaleImportIssue(row_number=row_number, message=message, reference=_stringify(reference) or None)
        )

    sale_date = _coerce_date(values["date"])
    if sale_date is None:
        issue("Data inválida.", values["date"])

    material = material_lookup.get(_normalize_name(_stringify(values["material"])))
    if material is None:
        issue("Material não encontrado.", values["material"])

    cooperative = cooperative_lookup.get(_normalize_name(_stringify(values["cooperative"])))
    if cooperative is None:
        issue("Cooperativa não encontrada.", values["cooperative"])

    weight = _to_decimal(values["weight"])
    if weight is None or weight <= 0:
        issue("Peso inválido.", values["weight"])

    price = _to_decimal(values["price"])
    if price is None or price <= 0:
        issue("Preço por kg inválido.", values["price"])

    if not _stringify(values["buyer"]):
        issue("Comprador não informado.")

    if len(result.issues) > issues_before:
        return None
    return Sale(
        date=sale_date,
        material=material,
        cooperative=cooperative,
        weight_kg=weight,
        price_per_kg=price,
    )


def _build_header_index(cells: Iterable) -> dict[str, int]:
    header_index: dict[str, int] = {}
    for idx, cell in enumerate(cells, start=1):
        normalized = _normalize_header(cell.value)
        if normalized and normalized not in header_index:
            header_index[normalized] = idx
    return header_index


def _resolve_columns(header_index: dict[str, int], aliases: dict[str, set[str]]) -> dict[str, int]:
    columns: dict[str, int] = {}
    for field_name, options in aliases.items():
        for candidate in sorted(options):
            column = header_index.get(candidate)
            if column:
                columns[field_name] = column
                break
    return columns


def _normalize_name(value: str) -> str:
    return _normalize_header(value)


def _coerce_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        parsed = parse_date(text)
    except ValueError:
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.strptime(text, "%d/%m/%Y").date()
        except ValueError:
            return None
    return parsed


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            return None
        # Brazilian sheets use "1.234,56".
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            number = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not number.is_finite():
        return None
    try:
        return number.quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
