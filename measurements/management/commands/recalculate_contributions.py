from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand

from measurements.services.contributions import recalculate_contributions


class Command(BaseCommand):
    help = (
        "Recalcula as contribuições semanais de cada catador a partir das coletas "
        "registradas, substituindo os valores anteriores."
    )

    def handle(self, *args: Any, **options: Any) -> None:
        result = recalculate_contributions()
        if not result.statistics:
            self.stdout.write(self.style.WARNING("Nenhuma coleta encontrada."))
            return
        for key, value in result.statistics.items():
            self.stdout.write(f"{key}: {value}")
        self.stdout.write(self.style.SUCCESS(f"Contribuições gravadas: {result.processed}"))
