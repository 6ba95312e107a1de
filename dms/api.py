"""Helpers shared by the JSON views of every app."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from django import forms
from django.http import HttpRequest, JsonResponse
from django.utils.dateparse import parse_date, parse_datetime


def json_error(message: str, *, status: int = 400, errors: Optional[dict[str, Any]] = None) -> JsonResponse:
    payload: dict[str, Any] = {"error": message}
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=status)


def form_errors(form: forms.Form) -> dict[str, list[str]]:
    error_dict: dict[str, list[str]] = {}
    for field, messages_list in form.errors.items():
        error_dict[field] = [str(message) for message in messages_list]
    return error_dict


def first_form_error(form: forms.Form, default: str) -> str:
    non_field = form.non_field_errors()
    if non_field:
        return str(non_field[0])
    for messages_list in form.errors.values():
        if messages_list:
            return str(messages_list[0])
    return default


def load_json_body(request: HttpRequest) -> tuple[Optional[dict[str, Any]], Optional[JsonResponse]]:
    try:
        payload = json.loads(request.body or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, json_error("JSON inválido")
    if not isinstance(payload, dict):
        return None, json_error("O corpo deve ser um objeto JSON")
    return payload, None


def parse_date_param(value: Any) -> date | None:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp and return the date part."""
    if not value:
        return None
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        parsed = parse_date(text)
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed
    try:
        parsed_dt = parse_datetime(text)
    except ValueError:
        return None
    return parsed_dt.date() if parsed_dt else None


def parse_int_param(value: Any, default: int | None = None) -> int | None:
    if value in (None, ""):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def decimal_to_float(value: Decimal | float | int | None, places: int = 2) -> float:
    if value is None:
        return 0.0
    return float(round(Decimal(value), places))
