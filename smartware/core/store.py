# =========================================================
# LEDGER PERSISTENCE
#
# The product collection is stored as one JSON blob under a
# fixed namespace key in the store_entries table. It is read
# once at startup and rewritten after every ledger change.
# =========================================================

import logging
import time
from typing import Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import sessionmaker

from smartware.models.product import Product
from smartware.models.store import StoreEntry

logger = logging.getLogger("smartware")

_products_adapter = TypeAdapter(list[Product])


class SqlBlobStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self._session_factory() as db:
            entry = db.get(StoreEntry, key)
            return entry.value if entry else None

    def put(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            entry = db.get(StoreEntry, key)
            if entry:
                entry.value = value
            else:
                db.add(StoreEntry(key=key, value=value))
            db.commit()


def dump_products(products: Sequence[Product]) -> str:
    return _products_adapter.dump_json(list(products), by_alias=True).decode("utf-8")


def load_products(store: SqlBlobStore, key: str) -> list[Product]:
    raw = store.get(key)
    if raw is None:
        return []

    try:
        return _products_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Stored products under '{key}' are unreadable, starting empty: {e}")
        return []


class LedgerPersister:
    """Ledger change listener that writes the full collection."""

    def __init__(self, store: SqlBlobStore, key: str, sync_window: float = 0.5):
        self.store = store
        self.key = key
        self.sync_window = sync_window
        self._last_write = None

    def __call__(self, products: Sequence[Product]) -> None:
        self.store.put(self.key, dump_products(products))
        self._last_write = time.monotonic()

    def is_syncing(self) -> bool:
        if self._last_write is None:
            return False
        return time.monotonic() - self._last_write < self.sync_window
