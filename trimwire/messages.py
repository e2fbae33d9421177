"""Helpers for reading host session messages.

Host messages are dicts of the form ``{"info": {...}, "parts": [...]}``.
Tool parts carry ``call_id``, ``tool`` and a ``state`` dict with
``status``, ``input``, ``output`` and ``error``.
"""

import json
from collections.abc import Iterator
from typing import Any

from trimwire.state.session import SessionState


def message_id(msg: dict[str, Any]) -> str:
    return msg.get("info", {}).get("id", "")


def message_role(msg: dict[str, Any]) -> str:
    return msg.get("info", {}).get("role", "")


def message_created(msg: dict[str, Any]) -> float:
    created = msg.get("info", {}).get("time", {}).get("created")
    return float(created) if isinstance(created, (int, float)) else 0.0


def iter_tool_parts(msg: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield the tool parts of a message that carry a call id."""
    for part in msg.get("parts", []):
        if part.get("type") == "tool" and part.get("call_id"):
            yield part


def get_last_user_message(messages: list[dict[str, Any]]) -> dict[str, Any] | None:
    for msg in reversed(messages):
        if message_role(msg) == "user":
            return msg
    return None


def find_last_compaction(messages: list[dict[str, Any]]) -> float:
    """Return the creation time of the newest host compaction summary, or 0."""
    for msg in reversed(messages):
        info = msg.get("info", {})
        if info.get("role") == "assistant" and info.get("summary"):
            return message_created(msg)
    return 0.0


def is_message_compacted(state: SessionState, msg: dict[str, Any]) -> bool:
    """Whether the host has already compacted this message away."""
    if msg.get("info", {}).get("compacted"):
        return True
    return bool(state.last_compaction) and message_created(msg) < state.last_compaction


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def part_text(part: dict[str, Any]) -> str:
    """Flatten one part into the text the model saw."""
    ptype = part.get("type")
    if ptype in ("text", "reasoning"):
        return part.get("text", "") or ""
    if ptype == "tool":
        state = part.get("state", {})
        chunks = []
        if state.get("input"):
            chunks.append(stringify(state["input"]))
        if state.get("output") is not None:
            chunks.append(stringify(state["output"]))
        if state.get("error") is not None:
            chunks.append(stringify(state["error"]))
        return "\n".join(chunks)
    return ""


def message_text(msg: dict[str, Any]) -> str:
    """Flatten all parts of a message, tool inputs and outputs included."""
    return "\n".join(t for t in (part_text(p) for p in msg.get("parts", [])) if t)
