"""Bounded, newest-first log of successful evaluations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

DEFAULT_HISTORY_LIMIT = 20


class HistoryIndexError(IndexError):
    """Raised when recalling an entry that is not in the log."""


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    expression: str
    result: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, str]:
        return {
            "expression": self.expression,
            "result": self.result,
            "timestamp": self.timestamp.isoformat(),
        }


class HistoryLog:
    """Entries are immutable; every change swaps the whole tuple."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._entries: tuple[HistoryEntry, ...] = ()

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, entry: HistoryEntry) -> None:
        self._entries = (entry, *self._entries)[: self.limit]

    def clear(self) -> None:
        self._entries = ()

    def get(self, index: int) -> HistoryEntry:
        if not 0 <= index < len(self._entries):
            raise HistoryIndexError(f"No history entry at index {index}")
        return self._entries[index]

    def to_list(self) -> list[dict[str, str]]:
        return [entry.to_dict() for entry in self._entries]


__all__ = ["DEFAULT_HISTORY_LIMIT", "HistoryEntry", "HistoryIndexError", "HistoryLog"]
