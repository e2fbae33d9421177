"""OpenAI Responses API format.

The conversation is a flat ``input`` item list. Calls are
``function_call`` items and results are ``function_call_output`` items,
both keyed by ``call_id``. Assistant text is a ``message`` item with
``output_text`` content.
"""

from typing import Any

from trimwire.formats.base import (
    FormatDescriptor,
    FormatVariant,
    ToolOutput,
    lower_id,
    resolve_tool_name,
)
from trimwire.state.metadata import ToolMetadataCache

_SYSTEM_ROLES = ("system", "developer")


def _is_call_output(item: Any) -> bool:
    return isinstance(item, dict) and item.get("type") == "function_call_output"


def _is_call(item: Any) -> bool:
    return isinstance(item, dict) and item.get("type") == "function_call"


def _is_assistant_message(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and item.get("role") == "assistant"
        and item.get("type", "message") == "message"
    )


class ResponsesFormat(FormatDescriptor):
    variant = FormatVariant.responses

    def detect(self, body: dict[str, Any]) -> bool:
        return (
            isinstance(body.get("input"), list)
            and "messages" not in body
            and "contents" not in body
        )

    def get_data_array(self, body: dict[str, Any]) -> list[Any] | None:
        return body.get("input")

    def inject_system_message(self, body: dict[str, Any], text: str) -> bool:
        if not text:
            return False

        items = body.setdefault("input", [])
        insert_at = 0
        while (
            insert_at < len(items)
            and isinstance(items[insert_at], dict)
            and items[insert_at].get("role") in _SYSTEM_ROLES
        ):
            insert_at += 1
        items.insert(insert_at, {"type": "message", "role": "system", "content": text})
        return True

    def append_to_last_assistant_message(self, body: dict[str, Any], text: str) -> bool:
        items = body.get("input") or []
        for i in range(len(items) - 1, -1, -1):
            item = items[i]

            if _is_call(item):
                # Walk back to the first call of this run and put the text ahead of it
                start = i
                while start > 0 and _is_call(items[start - 1]):
                    start -= 1
                items.insert(start, {
                    "type": "message",
                    "role": "assistant",
                    "content": [{"type": "output_text", "text": text}],
                })
                return True

            if _is_assistant_message(item):
                content = item.get("content")
                if isinstance(content, list):
                    content.append({"type": "output_text", "text": text})
                elif content:
                    item["content"] = [
                        {"type": "output_text", "text": content},
                        {"type": "output_text", "text": text},
                    ]
                else:
                    item["content"] = [{"type": "output_text", "text": text}]
                return True
        return False

    def extract_tool_outputs(self, data: list[Any], cache: ToolMetadataCache) -> list[ToolOutput]:
        outputs: list[ToolOutput] = []
        for item in data:
            tool_id = lower_id(item.get("call_id")) if _is_call_output(item) else None
            if tool_id:
                outputs.append(ToolOutput(id=tool_id, tool_name=resolve_tool_name(cache, tool_id)))
        return outputs

    def replace_tool_output(self, data: list[Any], tool_id: str, replacement: str) -> bool:
        target = tool_id.lower()
        replaced = False
        for i, item in enumerate(data):
            if _is_call_output(item) and lower_id(item.get("call_id")) == target:
                data[i] = {**item, "output": replacement}
                replaced = True
        return replaced

    def has_tool_outputs(self, data: list[Any]) -> bool:
        return any(_is_call_output(item) for item in data)
