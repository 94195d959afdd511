# bookstore/storage.py
import logging
import threading
from typing import Optional

from . import config
from .catalog.store import InMemoryBookStore, JsonFileBookStore, seed_from_file


logger = logging.getLogger(__name__)

_store: Optional[InMemoryBookStore] = None
_store_lock = threading.Lock()


def build_store() -> InMemoryBookStore:
    if config.DATA_FILE:
        logger.info("Using JSON book store at %s", config.DATA_FILE)
        store = JsonFileBookStore(config.DATA_FILE)
    else:
        store = InMemoryBookStore()
    if config.SEED_FILE:
        seed_from_file(store, config.SEED_FILE)
    return store


def get_store() -> InMemoryBookStore:
    """Return the process-wide store, creating it on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = build_store()
        return _store
