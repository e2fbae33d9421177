"""Session state for context pruning."""

from trimwire.state.metadata import (
    MAX_TOOL_CACHE_SIZE,
    ToolCallRecord,
    ToolMetadataCache,
    ToolStatus,
)
from trimwire.state.session import (
    PruneSet,
    PruneStats,
    SessionState,
    SquashSummary,
    ToolResultTracker,
)

__all__ = [
    "MAX_TOOL_CACHE_SIZE",
    "PruneSet",
    "PruneStats",
    "SessionState",
    "SquashSummary",
    "ToolCallRecord",
    "ToolMetadataCache",
    "ToolResultTracker",
    "ToolStatus",
]
