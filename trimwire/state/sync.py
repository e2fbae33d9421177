"""Tool metadata sync pass over the host message history."""

from typing import Any

from loguru import logger

from trimwire.messages import iter_tool_parts
from trimwire.state.metadata import ToolCallRecord, ToolStatus
from trimwire.state.session import SessionState

PRUNE_TOOL_NAME = "prune"


def sync_tool_cache(
    state: SessionState,
    messages: list[dict[str, Any]],
    protected_tools: list[str],
) -> None:
    """Record every tool call not yet cached and recount the nudge counter.

    Records are snapshots: once a call id is cached, later status changes
    are not reflected. Any failure is logged and the pass is abandoned;
    a skipped sync only delays metadata availability.
    """
    try:
        logger.debug(f"Syncing tool metadata for session {state.session_id}")

        state.nudge_counter = 0

        for msg in messages:
            for part in iter_tool_parts(msg):
                tool = part.get("tool", "")
                call_id = part["call_id"]

                if tool == PRUNE_TOOL_NAME:
                    state.nudge_counter = 0
                elif tool not in protected_tools:
                    state.nudge_counter += 1
                state.last_tool_was_prune = tool == PRUNE_TOOL_NAME

                if call_id in state.tool_cache:
                    continue

                part_state = part.get("state") or {}
                status = part_state.get("status", ToolStatus.pending.value)
                compacted_at = (part_state.get("time") or {}).get("compacted")
                state.tool_cache.put(ToolCallRecord(
                    call_id=call_id,
                    tool_name=tool,
                    parameters=part_state.get("input") or {},
                    status=status,
                    error_detail=part_state.get("error") if status == ToolStatus.error.value else None,
                    compacted=status == ToolStatus.completed.value and bool(compacted_at),
                    numeric_id=state.get_or_create_numeric_id(call_id),
                ))

        evicted = state.tool_cache.trim()
        if evicted:
            logger.debug(f"Evicted {evicted} tool metadata entries")
    except Exception as e:
        logger.warning(f"Failed to sync tool metadata: {e}")
