"""Access to the legacy MongoDB database the dashboard used before the migration."""

from __future__ import annotations

from functools import lru_cache

from django.conf import settings
from pymongo import MongoClient
from pymongo.database import Database


class LegacyImportError(Exception):
    """Raised when the legacy database cannot be reached or read."""


@lru_cache(maxsize=4)
def _client(uri: str, timeout_ms: int) -> MongoClient:
    return MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)


def get_legacy_database() -> Database:
    uri = settings.MONGODB_URI
    if not uri:
        raise LegacyImportError("MONGODB_URI não configurado.")
    return _client(uri, settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS)[settings.MONGODB_DB]
