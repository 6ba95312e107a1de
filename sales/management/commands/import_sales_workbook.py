from __future__ import annotations

from pathlib import Path
from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from sales.services.sale_imports import SaleImportError, import_sales_from_workbook


class Command(BaseCommand):
    help = "Importa vendas e compradores a partir da planilha Vendas de um arquivo .xlsx."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("path", type=Path, help="Caminho do arquivo .xlsx.")

    def handle(self, *args: Any, **options: Any) -> None:
        path: Path = options["path"]
        if not path.exists():
            raise CommandError(f"Arquivo não encontrado: {path}")

        with path.open("rb") as handle:
            try:
                result = import_sales_from_workbook(handle)
            except SaleImportError as exc:
                raise CommandError(str(exc)) from exc

        for issue in result.issues:
            reference = f" ({issue.reference})" if issue.reference else ""
            self.stdout.write(self.style.WARNING(f"Linha {issue.row_number}: {issue.message}{reference}"))
        self.stdout.write(self.style.SUCCESS(f"Vendas criadas: {result.created_sales}"))
        self.stdout.write(self.style.SUCCESS(f"Compradores criados: {result.created_buyers}"))
