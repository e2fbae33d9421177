"""Session-scoped tool call metadata cache."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Cache bound; oldest insertions are evicted first.
MAX_TOOL_CACHE_SIZE = 1000


class ToolStatus(str, Enum):
    pending = "pending"
    running = "running"
    completed = "completed"
    error = "error"


@dataclass
class ToolCallRecord:
    """Snapshot of a tool call taken the first time a sync pass sees it."""
    call_id: str
    tool_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    status: str = ToolStatus.pending.value
    error_detail: str | None = None
    compacted: bool = False
    numeric_id: int = 0


class ToolMetadataCache:
    """Mapping of call id -> ToolCallRecord in insertion order.

    Lookups through ``get`` are case-insensitive, since wire formats
    lower-case ids before resolving them.
    """

    def __init__(self, max_size: int = MAX_TOOL_CACHE_SIZE):
        self.max_size = max_size
        self._records: dict[str, ToolCallRecord] = {}
        self._lower: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, call_id: str) -> bool:
        return call_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def keys(self) -> list[str]:
        return list(self._records)

    def values(self) -> list[ToolCallRecord]:
        return list(self._records.values())

    def get(self, call_id: str | None) -> ToolCallRecord | None:
        if not call_id:
            return None
        record = self._records.get(call_id)
        if record is not None:
            return record
        original = self._lower.get(call_id.lower())
        return self._records.get(original) if original else None

    def put(self, record: ToolCallRecord) -> None:
        """Insert a record. Existing ids are left untouched (first write wins)."""
        if record.call_id in self._records:
            return
        self._records[record.call_id] = record
        self._lower[record.call_id.lower()] = record.call_id

    def remove(self, call_id: str) -> None:
        if self._records.pop(call_id, None) is None:
            return
        key = call_id.lower()
        # Ids differing only in case share a key; hand it to a surviving sibling
        if self._lower.get(key) != call_id:
            return
        sibling = next((cid for cid in reversed(self._records) if cid.lower() == key), None)
        if sibling is None:
            self._lower.pop(key)
        else:
            self._lower[key] = sibling

    def trim(self) -> int:
        """FIFO-evict the oldest insertions until the bound holds.

        Returns the number of evicted records.
        """
        excess = len(self._records) - self.max_size
        if excess <= 0:
            return 0
        for call_id in list(self._records)[:excess]:
            self.remove(call_id)
        return excess
