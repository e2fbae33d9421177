"""Anthropic Messages API format.

Top-level ``system`` (string or list of text blocks) plus ``messages``.
Tool calls are ``tool_use`` blocks in assistant content (``id``); tool
results are ``tool_result`` blocks in user content (``tool_use_id``).
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


def _is_tool_result(block: Any) -> bool:
    return isinstance(block, dict) and block.get("type") == "tool_result"


class AnthropicFormat(FormatDescriptor):
    variant = FormatVariant.anthropic

    def detect(self, body: dict[str, Any]) -> bool:
        # The top-level system field is what sets it apart from OpenAI chat
        return "system" in body and isinstance(body.get("messages"), list)

    def get_data_array(self, body: dict[str, Any]) -> list[Any] | None:
        return body.get("messages")

    def inject_system_message(self, body: dict[str, Any], text: str) -> bool:
        if not text:
            return False

        system = body.get("system")
        if isinstance(system, str):
            body["system"] = [text_block(system)] if system else []
        elif not isinstance(system, list):
            body["system"] = []

        body["system"].append(text_block(text))
        return True

    def append_to_last_assistant_message(self, body: dict[str, Any], text: str) -> bool:
        messages = body.get("messages") or []
        for msg in reversed(messages):
            if msg.get("role") != "assistant":
                continue

            content = msg.get("content")
            if isinstance(content, str):
                content = [text_block(content)] if content else []
            elif not isinstance(content, list):
                content = []

            insert_at = next(
                (i for i, b in enumerate(content)
                 if isinstance(b, dict) and b.get("type") == "tool_use"),
                len(content),
            )
            content.insert(insert_at, text_block(text))
            msg["content"] = content
            return True
        return False

    def extract_tool_outputs(self, data: list[Any], cache: ToolMetadataCache) -> list[ToolOutput]:
        outputs: list[ToolOutput] = []
        for msg in data:
            if msg.get("role") != "user" or not isinstance(msg.get("content"), list):
                continue
            for block in msg["content"]:
                tool_id = lower_id(block.get("tool_use_id")) if _is_tool_result(block) else None
                if tool_id:
                    outputs.append(ToolOutput(id=tool_id, tool_name=resolve_tool_name(cache, tool_id)))
        return outputs

    def replace_tool_output(self, data: list[Any], tool_id: str, replacement: str) -> bool:
        target = tool_id.lower()
        replaced = False

        for i, msg in enumerate(data):
            if msg.get("role") != "user" or not isinstance(msg.get("content"), list):
                continue

            modified = False
            new_content = []
            for block in msg["content"]:
                if _is_tool_result(block) and lower_id(block.get("tool_use_id")) == target:
                    # Structured result content collapses to a plain string
                    new_content.append({**block, "content": replacement})
                    modified = True
                else:
                    new_content.append(block)

            if modified:
                data[i] = {**msg, "content": new_content}
                replaced = True

        return replaced

    def has_tool_outputs(self, data: list[Any]) -> bool:
        for msg in data:
            if msg.get("role") == "user" and isinstance(msg.get("content"), list):
                if any(_is_tool_result(b) for b in msg["content"]):
                    return True
        return False
