"""Synthetic instruction injection into the latest real user entry."""

from typing import Any


def is_ignored_user_message(msg: Any) -> bool:
    """User entries the host injected for display only, never real input."""
    if not isinstance(msg, dict) or msg.get("role") != "user":
        return False

    info = msg.get("info") or {}
    if msg.get("ignored") or msg.get("synthetic") or info.get("ignored"):
        return True

    content = msg.get("content", msg.get("parts"))
    if isinstance(content, list) and content:
        return all(isinstance(p, dict) and p.get("ignored") for p in content)

    return False


def _contains(content: list[Any], instruction: str) -> bool:
    return any(
        isinstance(p, dict) and isinstance(p.get("text"), str) and instruction in p["text"]
        for p in content
    )


def inject_synth_instruction(messages: list[Any], instruction: str, text_type: str = "text") -> bool:
    """Append ``instruction`` to the newest non-ignored user entry.

    ``text_type`` is the content-part type of the wire format
    (``"input_text"`` for the Responses API).

    Returns False when there is no such entry or the instruction is
    already present.
    """
    if not instruction:
        return False

    for msg in reversed(messages):
        if not isinstance(msg, dict) or msg.get("role") != "user" or is_ignored_user_message(msg):
            continue

        if "content" not in msg and isinstance(msg.get("parts"), list):
            # Gemini entries carry parts without a type tag
            if _contains(msg["parts"], instruction):
                return False
            msg["parts"].append({"text": instruction})
            return True

        content = msg.get("content")
        if isinstance(content, str):
            if instruction in content:
                return False
            msg["content"] = [
                {"type": text_type, "text": content},
                {"type": text_type, "text": instruction},
            ]
        elif isinstance(content, list):
            if _contains(content, instruction):
                return False
            content.append({"type": text_type, "text": instruction})
        else:
            msg["content"] = [{"type": text_type, "text": instruction}]
        return True

    return False
