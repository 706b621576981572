"""Thread-safe in-memory registry for per-client engine state."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Generic, TypeVar

from flask import Flask

from .logging import get_logger

T = TypeVar("T")

DEFAULT_TTL = timedelta(minutes=30)

logger = get_logger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown or has expired."""

    def __str__(self) -> str:
        return "Session expired or not found"


@dataclass(slots=True)
class Session(Generic[T]):
    """Wraps one engine object with bookkeeping timestamps."""

    session_id: str
    state: T
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_accessed: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Serialises commands against one engine; the store lock only guards the registry.
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def touch(self) -> None:
        self.last_accessed = datetime.now(timezone.utc)


class SessionStore(Generic[T]):
    """Keeps engine objects keyed by an opaque session id.

    Sessions idle for longer than ``ttl`` are purged on the next access.
    Nothing is written to disk.
    """

    def __init__(self, factory: Callable[[], T], *, name: str, ttl: timedelta = DEFAULT_TTL) -> None:
        self.factory = factory
        self.name = name
        self.ttl = ttl
        self._items: dict[str, Session[T]] = {}
        self._lock = threading.Lock()

    def _purge_locked(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [
            session_id
            for session_id, session in self._items.items()
            if now - session.last_accessed > self.ttl
        ]
        for session_id in expired:
            self._items.pop(session_id, None)
        if expired:
            logger.info("purged %d idle %s session(s)", len(expired), self.name)

    def create(self) -> Session[T]:
        session = Session(session_id=uuid.uuid4().hex, state=self.factory())
        with self._lock:
            self._purge_locked()
            self._items[session.session_id] = session
        logger.info("created %s session %s", self.name, session.session_id)
        return session

    def get(self, session_id: str) -> Session[T]:
        with self._lock:
            self._purge_locked()
            try:
                session = self._items[session_id]
            except KeyError as exc:
                raise SessionNotFoundError(session_id) from exc
            session.touch()
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._items.pop(session_id, None) is not None
        if removed:
            logger.info("closed %s session %s", self.name, session_id)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def ttl_from_settings(site_settings: dict | None) -> timedelta:
    """Read ``session_ttl_minutes`` from the ``site`` section of ``config.yml``."""

    raw = (site_settings or {}).get("session_ttl_minutes")
    try:
        minutes = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_TTL
    if minutes <= 0:
        return DEFAULT_TTL
    return timedelta(minutes=minutes)


def store_for(app: Flask, name: str, factory: Callable[[], T]) -> SessionStore[T]:
    """Return the store registered on ``app`` under ``name``, creating it once."""

    stores = app.extensions.setdefault("session_stores", {})
    store = stores.get(name)
    if store is None:
        ttl = ttl_from_settings(app.config.get("SITE_SETTINGS"))
        store = stores[name] = SessionStore(factory, name=name, ttl=ttl)
    return store


__all__ = [
    "Session",
    "SessionStore",
    "SessionNotFoundError",
    "store_for",
    "ttl_from_settings",
    "DEFAULT_TTL",
]
