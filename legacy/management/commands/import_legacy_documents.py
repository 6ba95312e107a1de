from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser
from pymongo.errors import PyMongoError

from legacy.documents import LegacyImportError, get_legacy_database
from legacy.services.importer import LegacyImporter


class Command(BaseCommand):
    help = "Importa cooperativas, materiais, usuários, coletas e vendas do banco MongoDB legado."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Executa a importação e desfaz todas as alterações ao final.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        dry_run: bool = options["dry_run"]
        try:
            result = LegacyImporter(get_legacy_database()).run(dry_run=dry_run)
        except LegacyImportError as exc:
            raise CommandError(str(exc)) from exc
        except PyMongoError as exc:
            raise CommandError(f"Falha ao ler o banco legado: {exc}") from exc

        for issue in result.issues:
            self.stdout.write(self.style.WARNING(f"[{issue.collection}] {issue.legacy_id}: {issue.message}"))
        for collection, counts in result.counts.items():
            self.stdout.write(f"{collection}: {counts.created} criados, {counts.updated} atualizados")
        if dry_run:
            self.stdout.write(self.style.WARNING("Simulação concluída; nenhuma alteração foi gravada."))
        else:
            self.stdout.write(self.style.SUCCESS("Importação concluída."))
