"""
Conversation Memory — Bounded, ordered log of role-tagged exchanges.

Every workflow owns exactly one ConversationMemory. Each `invoke` appends
the user's query and one assistant entry per step, and every step prompt
gets `summarize()` of whatever is in memory at that moment.

Eviction is plain FIFO by entry count: when an append pushes the log past
`limit`, the oldest entries are dropped regardless of role. A burst of
assistant entries can therefore push every user entry out.
"""
from __future__ import annotations

import structlog
from datetime import datetime, timedelta, timezone
from typing import Optional

from workflow.models import MemoryEntry, Role

logger = structlog.get_logger()

EMPTY_SUMMARY = "Conversation just started."


class ConversationMemory:
    """Recency-bounded conversation log. `limit` counts entries, not pairs."""

    def __init__(self, limit: int = 6):
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError(f"Memory limit must be a positive integer, got {limit!r}")
        self._limit = limit
        self._history: list[MemoryEntry] = []
        self._last_timestamp: Optional[datetime] = None

    @property
    def limit(self) -> int:
        return self._limit

    def __len__(self) -> int:
        return len(self._history)

    def append(self, role: Role | str, text: str) -> MemoryEntry:
        """Record an entry stamped with the current instant, then trim to `limit`."""
        entry = MemoryEntry(role=Role(role), text=text, timestamp=self._next_timestamp())
        self._history.append(entry)

        overflow = len(self._history) - self._limit
        if overflow > 0:
            del self._history[:overflow]
            logger.debug("memory_trimmed", evicted=overflow, limit=self._limit)

        return entry

    def snapshot(self) -> tuple[MemoryEntry, ...]:
        """Current entries, oldest first."""
        return tuple(self._history)

    def summarize(self) -> str:
        """One "[role] text" line per entry, or a fixed sentinel when empty."""
        if not self._history:
            return EMPTY_SUMMARY
        return "\n".join(f"[{entry.role.value}] {entry.text}" for entry in self._history)

    def _next_timestamp(self) -> datetime:
        # Clock resolution can repeat a reading; entries must still be strictly ordered
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now
