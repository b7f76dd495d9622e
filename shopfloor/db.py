"""Thread-safe TinyDB store — one shared handle per database file."""

import threading
from dataclasses import dataclass, field
from pathlib import Path

from tinydb import TinyDB
from tinydb.table import Table

MAIN_DB = "shopfloor.json"
EVENTS_DB = "events.json"


@dataclass
class Store:
    """A TinyDB handle plus the lock every reader and writer must hold."""

    path: Path
    db: TinyDB
    lock: threading.Lock = field(default_factory=threading.Lock)

    def table(self, name: str) -> Table:
        return self.db.table(name)


_registry: dict[str, Store] = {}
_registry_lock = threading.Lock()


def get_store(db_path: Path) -> Store:
    """Get or create the Store for a file. One instance per resolved path."""
    path = Path(db_path).resolve()
    key = str(path)
    with _registry_lock:
        if key not in _registry:
            path.parent.mkdir(parents=True, exist_ok=True)
            _registry[key] = Store(path=path, db=TinyDB(key))
        return _registry[key]


def close_all() -> None:
    """Close all open stores and clear the registry."""
    with _registry_lock:
        for store in _registry.values():
            store.db.close()
        _registry.clear()
