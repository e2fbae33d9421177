"""Prune engine: replaces tool outputs and inputs with placeholders.

Pruning only rewrites field contents. Messages and parts are never
removed, so positions and ids stay valid for squash and nudge logic.
"""

from collections.abc import Iterator
from typing import Any

from loguru import logger

from trimwire.messages import is_message_compacted
from trimwire.pruning.tokens import QUESTION_TOOL_NAME
from trimwire.state.metadata import ToolStatus
from trimwire.state.session import SessionState

PRUNED_TOOL_OUTPUT_REPLACEMENT = (
    "[Output removed to save context - information superseded or no longer needed]"
)
PRUNED_TOOL_ERROR_INPUT_REPLACEMENT = "[input removed due to failed tool call]"
PRUNED_QUESTION_INPUT_REPLACEMENT = "[questions removed - see output for user's answers]"


def prune(state: SessionState, messages: list[dict[str, Any]]) -> int:
    """Apply all three prune passes in place. Returns the number of parts rewritten."""
    if not state.prune.tool_ids:
        return 0
    count = prune_tool_outputs(state, messages)
    count += prune_question_inputs(state, messages)
    count += prune_error_inputs(state, messages)
    if count:
        logger.debug(f"Pruned {count} tool parts in session {state.session_id}")
    return count


def _targeted_parts(
    state: SessionState, messages: list[dict[str, Any]], status: str,
) -> Iterator[dict[str, Any]]:
    """Yield tool parts in the prune set with the given status, skipping compacted messages."""
    targets = set(state.prune.tool_ids)
    for msg in messages:
        if is_message_compacted(state, msg):
            continue
        for part in msg.get("parts", []):
            if part.get("type") != "tool" or part.get("call_id") not in targets:
                continue
            part_state = part.get("state")
            if not isinstance(part_state, dict) or part_state.get("status") != status:
                continue
            yield part


def prune_tool_outputs(state: SessionState, messages: list[dict[str, Any]]) -> int:
    count = 0
    for part in _targeted_parts(state, messages, ToolStatus.completed.value):
        if part.get("tool") == QUESTION_TOOL_NAME:
            continue
        part["state"]["output"] = PRUNED_TOOL_OUTPUT_REPLACEMENT
        count += 1
    return count


def prune_question_inputs(state: SessionState, messages: list[dict[str, Any]]) -> int:
    count = 0
    for part in _targeted_parts(state, messages, ToolStatus.completed.value):
        if part.get("tool") != QUESTION_TOOL_NAME:
            continue
        tool_input = part["state"].get("input")
        if isinstance(tool_input, dict) and "questions" in tool_input:
            tool_input["questions"] = PRUNED_QUESTION_INPUT_REPLACEMENT
            count += 1
    return count


def prune_error_inputs(state: SessionState, messages: list[dict[str, Any]]) -> int:
    count = 0
    for part in _targeted_parts(state, messages, ToolStatus.error.value):
        tool_input = part["state"].get("input")
        if not isinstance(tool_input, dict):
            continue
        # Only string fields; structured values are left as-is
        for key, value in tool_input.items():
            if isinstance(value, str):
                tool_input[key] = PRUNED_TOOL_ERROR_INPUT_REPLACEMENT
        count += 1
    return count
