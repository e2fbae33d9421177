"""Google Gemini ``generateContent`` format.

Conversation lives in ``contents`` (``role`` + ``parts``); the assistant
role is ``model``. System text sits in ``systemInstruction``. Calls are
``functionCall`` parts, results are ``functionResponse`` parts. Only
results that carry an ``id`` can be matched against tool metadata.
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

_SYSTEM_KEYS = ("systemInstruction", "system_instruction")


def _function_response(part: Any) -> dict[str, Any] | None:
    if not isinstance(part, dict):
        return None
    response = part.get("functionResponse") or part.get("function_response")
    return response if isinstance(response, dict) else None


def _iter_parts(data: list[Any]):
    for entry in data:
        parts = entry.get("parts") if isinstance(entry, dict) else None
        if isinstance(parts, list):
            yield from parts


class GeminiFormat(FormatDescriptor):
    variant = FormatVariant.gemini

    def detect(self, body: dict[str, Any]) -> bool:
        return isinstance(body.get("contents"), list) and "messages" not in body

    def get_data_array(self, body: dict[str, Any]) -> list[Any] | None:
        return body.get("contents")

    def inject_system_message(self, body: dict[str, Any], text: str) -> bool:
        if not text:
            return False

        key = next((k for k in _SYSTEM_KEYS if k in body), _SYSTEM_KEYS[0])
        instruction = body.get(key)
        if isinstance(instruction, str):
            instruction = {"parts": [{"text": instruction}] if instruction else []}
        elif not isinstance(instruction, dict):
            instruction = {"parts": []}
        if not isinstance(instruction.get("parts"), list):
            instruction["parts"] = []

        instruction["parts"].append({"text": text})
        body[key] = instruction
        return True

    def append_to_last_assistant_message(self, body: dict[str, Any], text: str) -> bool:
        contents = body.get("contents") or []
        for entry in reversed(contents):
            if entry.get("role") != "model":
                continue

            parts = entry.get("parts")
            if not isinstance(parts, list):
                parts = []
                entry["parts"] = parts
            insert_at = next(
                (i for i, p in enumerate(parts)
                 if isinstance(p, dict) and ("functionCall" in p or "function_call" in p)),
                len(parts),
            )
            parts.insert(insert_at, {"text": text})
            return True
        return False

    def extract_tool_outputs(self, data: list[Any], cache: ToolMetadataCache) -> list[ToolOutput]:
        outputs: list[ToolOutput] = []
        for part in _iter_parts(data):
            response = _function_response(part)
            tool_id = lower_id(response.get("id")) if response else None
            if tool_id:
                outputs.append(ToolOutput(
                    id=tool_id,
                    tool_name=resolve_tool_name(cache, tool_id, response.get("name")),
                ))
        return outputs

    def replace_tool_output(self, data: list[Any], tool_id: str, replacement: str) -> bool:
        target = tool_id.lower()
        replaced = False
        for entry in data:
            parts = entry.get("parts") if isinstance(entry, dict) else None
            if not isinstance(parts, list):
                continue
            for i, part in enumerate(parts):
                response = _function_response(part)
                if response and lower_id(response.get("id")) == target:
                    key = "functionResponse" if "functionResponse" in part else "function_response"
                    parts[i] = {**part, key: {**response, "response": {"content": replacement}}}
                    replaced = True
        return replaced

    def has_tool_outputs(self, data: list[Any]) -> bool:
        return any(_function_response(p) is not None for p in _iter_parts(data))
