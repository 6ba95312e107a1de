from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from django.db import IntegrityError, transaction

from .models import UserType, Worker


logger = logging.getLogger(__name__)

WASTEPICKER_CODE_PATTERN = re.compile(r"^WP(\d+)$", re.IGNORECASE)


def sanitize_digits(value: object) -> str:
    if value is None:
        return ""
    return re.sub(r"\D", "", str(value))


def map_user_type(raw: object) -> Optional[int]:
    """Translate the user type flags found in legacy data into a ``UserType`` value."""

    if raw is None:
        return None
    normalized = str(raw).strip().upper()
    if not normalized:
        return None
    if len(normalized) == 1 and normalized.isdigit():
        return int(normalized)
    if normalized in {"M", "A"}:
        return int(UserType.MANAGER)
    if normalized in {"W", "C"}:
        return int(UserType.WASTEPICKER)
    return None


def resolve_worker(identifier: object) -> Optional[Worker]:
    """Find a worker by wastepicker code, falling back to the numeric id."""

    text = str(identifier or "").strip()
    if not text:
        return None

    worker = Worker.objects.filter(wastepicker_code__iexact=text).first()
    if worker:
        return worker

    digits = sanitize_digits(text)
    if not digits:
        return None
    return Worker.objects.filter(pk=int(digits)).first()


def _format_code(number: int) -> str:
    return f"WP{number:03d}"


def taken_wastepicker_codes() -> set[str]:
    codes = Worker.objects.exclude(wastepicker_code__isnull=True).exclude(wastepicker_code="")
    return {code.upper() for code in codes.values_list("wastepicker_code", flat=True)}


def next_wastepicker_code(taken: Iterable[str]) -> str:
    taken_set = {code.upper() for code in taken}
    counter = 1
    while _format_code(counter) in taken_set:
        counter += 1
    return _format_code(counter)


def assign_missing_wastepicker_codes() -> list[dict[str, str]]:
    """Give every wastepicker without a code the lowest free ``WPnnn`` value."""

    with transaction.atomic():
        pending = list(
            Worker.objects.wastepickers().without_code().select_for_update().order_by("pk")
        )
        if not pending:
            return []

        taken = taken_wastepicker_codes()
        assignments: list[dict[str, str]] = []
        for worker in pending:
            code = next_wastepicker_code(taken)
            taken.add(code)
            worker.wastepicker_code = code
            worker.save(update_fields=["wastepicker_code", "last_update"])
            assignments.append(
                {
                    "userId": str(worker.pk),
                    "name": worker.full_name,
                    "wastepickerId": code,
                }
            )
            logger.info("Assigned %s to worker %s", code, worker.pk)
    return assignments


def save_with_wastepicker_code(worker: Worker, attempts: int = 3) -> Worker:
    """Save a new wastepicker with the lowest free code.

    A concurrent save can claim the same code first; the unique constraint then
    rejects ours and the next free code is tried.
    """

    attempt = 1
    while True:
        worker.wastepicker_code = next_wastepicker_code(taken_wastepicker_codes())
        try:
            with transaction.atomic():
                worker.save()
        except IntegrityError:
            if attempt >= attempts:
                raise
            logger.warning("Wastepicker code %s was taken concurrently, retrying", worker.wastepicker_code)
            attempt += 1
        else:
            return worker
