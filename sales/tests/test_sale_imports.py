from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import BytesIO, StringIO
from pathlib import Path
from tempfile import TemporaryDirectory

from django.core.management import CommandError, call_command
from django.test import TestCase
from openpyxl import Workbook

from cooperatives.models import Cooperative
from materials.models import Material, MaterialGroup
from sales.models import Buyer, Sale
from sales.services.sale_imports import SaleImportError, import_sales_from_workbook
from users.models import UserType, Worker


class SaleImportServiceTestCase(TestCase):
    def setUp(self) -> None:
        self.cooperative = Cooperative.objects.create(name="Cooperativa Aurora")
        group = MaterialGroup.objects.create(name="Metal")
        self.aluminium = Material.objects.create(name="Alumínio", group=group)
        self.manager = Worker.objects.create_user(
            cpf="11111111111",
            password="segredo",
            full_name="Gestora",
            user_type=UserType.MANAGER,
        )
        Buyer.objects.create(name="Metais Norte")

    def _build_workbook(self, rows: list[list], *, title: str = "Vendas") -> BytesIO:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = title
        sheet.append(["Data", "Material", "Cooperativa", "Peso (kg)", "Preço/kg", "Comprador"])
        for row in rows:
            sheet.append(row)
        buffer = BytesIO()
        workbook.save(buffer)
        buffer.seek(0)
        return buffer

    def test_imports_valid_rows_and_reports_issues(self) -> None:
        workbook = self._build_workbook(
            [
                [date(2024, 2, 10), "aluminio", "Cooperativa Aurora", 12.5, 7, "Metais Norte"],
                ["11/02/2024", "Alumínio", "cooperativa aurora", "3,25", "6,50", "Ferro Velho Sul"],
                [None, None, None, None, None, None],
                ["2024-02-12", "Cobre", "Cooperativa Aurora", 4, 30, "Metais Norte"],
                ["sem data", "Alumínio", "Cooperativa Aurora", 0, 5, ""],
            ]
        )

        result = import_sales_from_workbook(workbook, responsible=self.manager)

        self.assertEqual(result.created_sales, 2)
        self.assertEqual(result.created_buyers, 1)
        self.assertEqual(
            [(issue.row_number, issue.message) for issue in result.issues],
            [
                (5, "Material não encontrado."),
                (6, "Data inválida."),
                (6, "Peso inválido."),
                (6, "Comprador não informado."),
            ],
        )
        self.assertEqual(result.issues[0].reference, "Cobre")

        second = Sale.objects.get(buyer__name="Ferro Velho Sul")
        self.assertEqual(second.date, date(2024, 2, 11))
        self.assertEqual(second.weight_kg, Decimal("3.25"))
        self.assertEqual(second.price_per_kg, Decimal("6.50"))
        self.assertEqual(second.responsible, self.manager)

    def test_rejects_non_finite_and_sub_cent_numbers(self) -> None:
        workbook = self._build_workbook(
            [
                [date(2024, 2, 10), "Alumínio", "Cooperativa Aurora", "NaN", 7, "Metais Norte"],
                [date(2024, 2, 10), "Alumínio", "Cooperativa Aurora", 2, "Infinity", "Metais Norte"],
                [date(2024, 2, 10), "Alumínio", "Cooperativa Aurora", "0,004", 7, "Metais Norte"],
            ]
        )

        result = import_sales_from_workbook(workbook)

        self.assertEqual(result.created_sales, 0)
        self.assertEqual(
            [(issue.row_number, issue.message) for issue in result.issues],
            [
                (2, "Peso inválido."),
                (3, "Preço por kg inválido."),
                (4, "Peso inválido."),
            ],
        )
        self.assertFalse(Sale.objects.exists())

    def test_missing_sheet_raises(self) -> None:
        workbook = self._build_workbook([], title="Planilha1")

        with self.assertRaisesMessage(SaleImportError, "Planilha obrigatória não encontrada: Vendas."):
            import_sales_from_workbook(workbook)

    def test_missing_columns_raise(self) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Vendas"
        sheet.append(["Data", "Material", "Comprador"])
        buffer = BytesIO()
        workbook.save(buffer)

        with self.assertRaisesMessage(SaleImportError, "cooperative, price, weight"):
            import_sales_from_workbook(buffer)

    def test_management_command_prints_summary(self) -> None:
        workbook = self._build_workbook(
            [[date(2024, 2, 10), "Alumínio", "Cooperativa Aurora", 2, 7, "Metais Norte"]]
        )
        output = StringIO()
        with TemporaryDirectory() as directory:
            path = Path(directory) / "vendas.xlsx"
            path.write_bytes(workbook.getvalue())
            call_command("import_sales_workbook", str(path), stdout=output)

        self.assertIn("Vendas criadas: 1", output.getvalue())
        self.assertIn("Compradores criados: 0", output.getvalue())

    def test_management_command_rejects_missing_file(self) -> None:
        with self.assertRaisesMessage(CommandError, "Arquivo não encontrado"):
            call_command("import_sales_workbook", "/nao/existe.xlsx")
