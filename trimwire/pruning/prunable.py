"""Builds the <prunable-tools> list shown to the model."""

from typing import Any

from trimwire.prompts.context import NUDGE_INSTRUCTION
from trimwire.state.metadata import ToolCallRecord
from trimwire.state.session import SessionState

# Parameter keys that best identify a call, in priority order.
_KEY_PARAMETERS = ("filePath", "file_path", "path", "pattern", "command", "url", "description", "query")
MAX_KEY_LENGTH = 60


def extract_parameter_key(record: ToolCallRecord) -> str:
    """Short human-readable hint of what a call touched."""
    params: dict[str, Any] = record.parameters if isinstance(record.parameters, dict) else {}
    for key in _KEY_PARAMETERS:
        value = params.get(key)
        if isinstance(value, str) and value:
            value = " ".join(value.split())
            if len(value) > MAX_KEY_LENGTH:
                value = value[: MAX_KEY_LENGTH - 3] + "..."
            return value
    return ""


def get_unpruned_tool_ids(state: SessionState) -> list[str]:
    """Cached call ids that are neither pruned nor compacted, oldest first."""
    pruned = set(state.prune.tool_ids)
    return [
        record.call_id
        for record in state.tool_cache.values()
        if record.call_id not in pruned and not record.compacted
    ]


def build_prunable_tools_list(
    state: SessionState,
    unpruned_tool_ids: list[str],
    protected_tools: list[str],
) -> tuple[str, list[int]]:
    """Return (list text, numeric ids). Empty text when nothing is prunable."""
    lines: list[str] = []
    numeric_ids: list[int] = []

    for call_id in unpruned_tool_ids:
        record = state.tool_cache.get(call_id)
        if record is None or record.tool_name in protected_tools:
            continue

        numeric_id = state.get_or_create_numeric_id(call_id)
        numeric_ids.append(numeric_id)

        key = extract_parameter_key(record)
        description = f"{record.tool_name}, {key}" if key else record.tool_name
        lines.append(f"{numeric_id}: {description}")

    if not lines:
        return "", []

    text = (
        "<prunable-tools>\n"
        "The following tools have been invoked and are available for pruning. "
        "This list does not mandate immediate action. Consider your current goals "
        "and the resources you need before discarding valuable tool outputs. "
        "Keep the context free of noise.\n"
        + "\n".join(lines)
        + "\n</prunable-tools>"
    )
    return text, numeric_ids


def build_end_injection(prunable_list: str, include_nudge: bool) -> str:
    if not prunable_list:
        return ""
    parts = [prunable_list]
    if include_nudge:
        parts.append(NUDGE_INSTRUCTION)
    return "\n\n".join(parts)
