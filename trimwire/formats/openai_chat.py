"""OpenAI Chat Completions format.

``messages`` with no top-level ``system``: system prompts are
``role: "system"`` messages. Tool calls live in an assistant's
``tool_calls`` field; results are ``role: "tool"`` messages keyed by
``tool_call_id``.
"""

from typing import Any

from trimwire.formats.base import (
    FormatDescriptor,
    FormatVariant,
    ToolOutput,
    lower_id,
    resolve_tool_name,
    text_block,
)
from trimwire.state.metadata import ToolMetadataCache

_SYSTEM_ROLES = ("system", "developer")


def _is_tool_message(msg: Any) -> bool:
    return isinstance(msg, dict) and msg.get("role") == "tool"


class OpenAIChatFormat(FormatDescriptor):
    variant = FormatVariant.openai_chat

    def detect(self, body: dict[str, Any]) -> bool:
        return isinstance(body.get("messages"), list) and "system" not in body

    def get_data_array(self, body: dict[str, Any]) -> list[Any] | None:
        return body.get("messages")

    def inject_system_message(self, body: dict[str, Any], text: str) -> bool:
        if not text:
            return False

        messages = body.setdefault("messages", [])
        insert_at = 0
        while insert_at < len(messages) and messages[insert_at].get("role") in _SYSTEM_ROLES:
            insert_at += 1
        messages.insert(insert_at, {"role": "system", "content": text})
        return True

    def append_to_last_assistant_message(self, body: dict[str, Any], text: str) -> bool:
        messages = body.get("messages") or []
        for msg in reversed(messages):
            if msg.get("role") != "assistant":
                continue

            content = msg.get("content")
            if isinstance(content, list):
                insert_at = next(
                    (i for i, p in enumerate(content)
                     if isinstance(p, dict) and p.get("type") in ("tool_call", "function_call")),
                    len(content),
                )
                content.insert(insert_at, text_block(text))
            elif content:
                # tool_calls is a sibling field, so the text already precedes them
                msg["content"] = f"{content}\n\n{text}"
            else:
                msg["content"] = text
            return True
        return False

    def extract_tool_outputs(self, data: list[Any], cache: ToolMetadataCache) -> list[ToolOutput]:
        outputs: list[ToolOutput] = []
        for msg in data:
            tool_id = lower_id(msg.get("tool_call_id")) if _is_tool_message(msg) else None
            if tool_id:
                outputs.append(ToolOutput(
                    id=tool_id,
                    tool_name=resolve_tool_name(cache, tool_id, msg.get("name")),
                ))
        return outputs

    def replace_tool_output(self, data: list[Any], tool_id: str, replacement: str) -> bool:
        target = tool_id.lower()
        replaced = False
        for i, msg in enumerate(data):
            if _is_tool_message(msg) and lower_id(msg.get("tool_call_id")) == target:
                data[i] = {**msg, "content": replacement}
                replaced = True
        return replaced

    def has_tool_outputs(self, data: list[Any]) -> bool:
        return any(_is_tool_message(m) for m in data)
