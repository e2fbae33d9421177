"""Per-session pruning state."""

from dataclasses import asdict, dataclass, field
from typing import Any

from trimwire.state.metadata import ToolCallRecord, ToolMetadataCache


@dataclass
class PruneSet:
    """Identifiers marked for pruning. Append-only, duplicates allowed."""
    tool_ids: list[str] = field(default_factory=list)
    message_ids: list[str] = field(default_factory=list)


@dataclass
class SquashSummary:
    anchor_message_id: str
    summary: str


@dataclass
class ToolResultTracker:
    """Tool results already counted toward the nudge buckets.

    ``seen_result_ids`` holds lower-cased ids and is never pruned, so a
    re-observed result can never be counted twice.
    """
    seen_result_ids: set[str] = field(default_factory=set)
    result_count: int = 0
    skip_next_idle: bool = False


@dataclass
class PruneStats:
    prune_token_counter: int = 0  # Pending savings of the current action
    total_prune_tokens: int = 0  # Session lifetime savings


@dataclass
class SessionState:
    """
    All mutable state the engine keeps for one host session.

    Owned by a SessionStore and passed explicitly into every operation.
    The in-memory instance is authoritative; persisted copies only seed
    a fresh process.
    """

    session_id: str
    tool_cache: ToolMetadataCache = field(default_factory=ToolMetadataCache)
    prune: PruneSet = field(default_factory=PruneSet)
    squash_summaries: list[SquashSummary] = field(default_factory=list)
    tracker: ToolResultTracker = field(default_factory=ToolResultTracker)
    stats: PruneStats = field(default_factory=PruneStats)
    numeric_ids: dict[str, int] = field(default_factory=dict)
    nudge_counter: int = 0
    last_tool_was_prune: bool = False
    last_compaction: float = 0.0
    variant: str | None = None

    def get_or_create_numeric_id(self, call_id: str) -> int:
        """Return the stable numeric id for a call, assigning the next one if new."""
        numeric_id = self.numeric_ids.get(call_id)
        if numeric_id is None:
            numeric_id = len(self.numeric_ids) + 1
            self.numeric_ids[call_id] = numeric_id
        return numeric_id

    def resolve_numeric_id(self, numeric_id: int) -> str | None:
        """Reverse lookup of a numeric id to its call id."""
        for call_id, value in self.numeric_ids.items():
            if value == numeric_id:
                return call_id
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "session_id": self.session_id,
            "tool_cache": [asdict(r) for r in self.tool_cache.values()],
            "prune": asdict(self.prune),
            "squash_summaries": [asdict(s) for s in self.squash_summaries],
            "tracker": {
                "seen_result_ids": sorted(self.tracker.seen_result_ids),
                "result_count": self.tracker.result_count,
                "skip_next_idle": self.tracker.skip_next_idle,
            },
            "stats": asdict(self.stats),
            "numeric_ids": self.numeric_ids,
            "nudge_counter": self.nudge_counter,
            "last_tool_was_prune": self.last_tool_was_prune,
            "last_compaction": self.last_compaction,
            "variant": self.variant,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionState":
        """Rebuild a state from ``to_dict`` output."""
        cache = ToolMetadataCache()
        for raw in data.get("tool_cache", []):
            cache.put(ToolCallRecord(**raw))

        tracker_raw = data.get("tracker", {})
        return cls(
            session_id=data["session_id"],
            tool_cache=cache,
            prune=PruneSet(**data.get("prune", {})),
            squash_summaries=[SquashSummary(**s) for s in data.get("squash_summaries", [])],
            tracker=ToolResultTracker(
                seen_result_ids=set(tracker_raw.get("seen_result_ids", [])),
                result_count=tracker_raw.get("result_count", 0),
                skip_next_idle=tracker_raw.get("skip_next_idle", False),
            ),
            stats=PruneStats(**data.get("stats", {})),
            numeric_ids=dict(data.get("numeric_ids", {})),
            nudge_counter=data.get("nudge_counter", 0),
            last_tool_was_prune=data.get("last_tool_was_prune", False),
            last_compaction=data.get("last_compaction", 0.0),
            variant=data.get("variant"),
        )
