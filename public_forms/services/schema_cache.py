"""Slug-scoped cache of the last good public form payload.

The cache is only a fast path for the first render; it is never authoritative
and every storage failure is ignored.
"""

import logging
from typing import Protocol

from pydantic import ValidationError

from public_forms.schemas.forms import PublicFormPayload

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "public-form:"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Session-scoped store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._items


def cache_key(slug: str) -> str:
    return f"{CACHE_KEY_PREFIX}{slug}"


class SchemaCache:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self, slug: str) -> PublicFormPayload | None:
        if not slug:
            return None
        try:
            raw = self.store.get_item(cache_key(slug))
        except Exception:
            logger.debug("Schema cache read failed", exc_info=True)
            return None
        if not raw:
            return None
        try:
            return PublicFormPayload.model_validate_json(raw)
        except ValidationError:
            logger.debug("Discarding unreadable cached schema for %s", slug)
            return None

    def save(self, slug: str, payload: PublicFormPayload) -> None:
        if not slug:
            return
        try:
            self.store.set_item(cache_key(slug), payload.model_dump_json(by_alias=True))
        except Exception:
            logger.debug("Schema cache write failed", exc_info=True)
