"""Domain events — TinyDB-backed log with fire-and-forget in-process subscribers."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from tinydb import Query

from shopfloor.db import get_store
from shopfloor.log import get_logger

logger = get_logger(__name__)

SKILLS_UPDATED = "worker.skills.updated"
STATUS_CHANGED = "worker.status.changed"
WORKER_UNAVAILABLE = "worker.unavailable"


@dataclass
class DomainEvent:
    name: str           # e.g. "worker.status.changed"
    worker_id: str
    payload: dict = field(default_factory=dict)
    timestamp: str = ""  # auto-filled if empty


class EventLog:
    """Persists domain events and notifies subscribers. Never raises on subscriber failure."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._store = get_store(self.db_path)
        self._table = self._store.table("events")
        self._subscribers: dict[str, list[Callable[[DomainEvent], None]]] = {}

    def emit(self, name: str, worker_id: str, **payload) -> DomainEvent:
        """Record an event and dispatch it to subscribers of its name and of '*'."""
        event = DomainEvent(
            name=name,
            worker_id=worker_id,
            payload=payload,
            timestamp=datetime.now().isoformat(),
        )
        with self._store.lock:
            self._table.insert({
                "name": event.name,
                "worker_id": event.worker_id,
                "payload": _jsonable(event.payload),
                "timestamp": event.timestamp,
            })
        logger.debug("Event %s for worker %s", name, worker_id)

        for handler in self._subscribers.get(name, []) + self._subscribers.get("*", []):
            try:
                handler(event)
            except Exception:
                logger.warning("Subscriber failed: event=%s, handler=%s",
                               name, getattr(handler, "__name__", repr(handler)), exc_info=True)
        return event

    def subscribe(self, name: str, handler: Callable[[DomainEvent], None]) -> None:
        """Register a handler for an event name. Use '*' for all events."""
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Callable[[DomainEvent], None]) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def history(self, name: str | None = None, worker_id: str | None = None,
                limit: int = 50) -> list[dict]:
        """Stored events, newest first. Optional name and worker filters."""
        Q = Query()
        condition = None
        if name:
            condition = Q.name == name
        if worker_id:
            by_worker = Q.worker_id == worker_id
            condition = by_worker if condition is None else condition & by_worker

        with self._store.lock:
            results = self._table.search(condition) if condition is not None else self._table.all()

        results.sort(key=lambda r: (r.get("timestamp", ""), r.doc_id), reverse=True)
        return results[:limit]


def _jsonable(value):
    """Recursively convert dates, enums and records into JSON-safe values."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "to_dict"):
        return _jsonable(value.to_dict())
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value") and not isinstance(value, (str, int, float, bool)):
        return value.value
    return value
