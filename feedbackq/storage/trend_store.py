"""
Bounded, append-only history of HistoricalEntry snapshots.

The store keeps the most recent TREND_HISTORY_CAPACITY entries in insertion
(= chronological) order and evicts the oldest first. One lock serializes
appends against the reads trend detection depends on, so a detector always
sees a consistent snapshot.

Two backends:
  - InMemoryTrendStore: process-local, used by tests and one-off CLI runs
  - JsonFileTrendStore: persists the array to a JSON file on every append
"""

from __future__ import annotations

import json
import os
import threading
from collections import deque
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from feedbackq.config import TREND_HISTORY_CAPACITY
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event
from feedbackq.trends.models import HistoricalEntry

logger = get_logger(__name__)


class TrendStore:
    """Base class holding the bounded log; subclasses add persistence."""

    def __init__(self, capacity: int = TREND_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._lock = threading.RLock()
        self._entries: deque[HistoricalEntry] = deque(self._load()[-capacity:], maxlen=capacity)

    def _load(self) -> list[HistoricalEntry]:
        return []

    def _persist(self, entries: list[HistoricalEntry]) -> None:
        """Write the full history. No-op for the in-memory backend."""

    def _stamp(self, entry: HistoricalEntry) -> HistoricalEntry:
        """Keep storage order non-decreasing in time."""
        if self._entries and entry.timestamp < self._entries[-1].timestamp:
            return entry.model_copy(update={"timestamp": self._entries[-1].timestamp})
        return entry

    def append(self, entry: HistoricalEntry) -> HistoricalEntry:
        """
        Append an entry, evicting the oldest when at capacity.

        Returns:
            The entry as stored (timestamp may be clamped)

        Side Effects:
            - Persists the full history (file backend)
            - Increments trends.store.* counters
        """
        with self._lock:
            stored = self._stamp(entry)
            updated = [*self._entries, stored][-self.capacity :]
            evicted = len(self._entries) + 1 - len(updated)
            self._persist(updated)
            self._entries = deque(updated, maxlen=self.capacity)

        counter("trends.store.append")
        if evicted:
            counter("trends.store.evicted", evicted)
            logger.debug("Evicted %d oldest trend entr(ies)", evicted)
        return stored

    def snapshot_and_append(self, entry: HistoricalEntry) -> tuple[list[HistoricalEntry], HistoricalEntry]:
        """
        Atomically read the current history and append ``entry``.

        Returns:
            (history before the append, oldest first; the stored entry)
        """
        with self._lock:
            history = list(self._entries)
            stored = self.append(entry)
        return history, stored

    def recent(self, limit: int | None = None) -> list[HistoricalEntry]:
        """Most recent entries, oldest first."""
        with self._lock:
            entries = list(self._entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        """Remove all stored entries (useful for testing)."""
        with self._lock:
            self._persist([])
            self._entries.clear()
        log_event("trends.store.cleared")

    def sync_status(self) -> dict[str, Any]:
        with self._lock:
            last = self._entries[-1] if self._entries else None
            total = len(self._entries)
        return {
            "last_synced": last.timestamp.isoformat() if last else None,
            "total_records": total,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class InMemoryTrendStore(TrendStore):
    """Trend history that lives only as long as the process."""


class JsonFileTrendStore(TrendStore):
    """Trend history persisted as a JSON array of HistoricalEntry objects."""

    def __init__(self, path: str | Path, capacity: int = TREND_HISTORY_CAPACITY):
        self.path = Path(path)
        super().__init__(capacity=capacity)

    def _load(self) -> list[HistoricalEntry]:
        """
        Read the history file.

        A missing file is an empty history. An unreadable file is logged and
        treated as empty; individual malformed entries are skipped.
        """
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            counter("trends.store.load_error")
            logger.error("Error reading trend data from %s: %s", self.path, exc)
            return []

        if not isinstance(raw, list):
            logger.error("Trend data in %s is not a JSON array; ignoring it", self.path)
            return []

        entries: list[HistoricalEntry] = []
        for index, item in enumerate(raw):
            try:
                entry = HistoricalEntry.model_validate(item)
            except ValidationError as exc:
                counter("trends.store.skipped_entry")
                logger.warning("Skipping malformed trend entry %d: %s", index, exc.errors()[0])
                continue
            # File order is history order; an out-of-order timestamp takes its predecessor's
            if entries and entry.timestamp < entries[-1].timestamp:
                counter("trends.store.clamped_timestamp")
                entry = entry.model_copy(update={"timestamp": entries[-1].timestamp})
            entries.append(entry)
        logger.info("Loaded %d trend entr(ies) from %s", len(entries), self.path)
        return entries

    def _persist(self, entries: list[HistoricalEntry]) -> None:
        """
        Write the history atomically (temp file + replace).

        Side Effects:
            - Creates the parent directory if needed
            - Replaces the history file
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([entry.to_dict() for entry in entries], indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        finally:
            tmp_path.unlink(missing_ok=True)
