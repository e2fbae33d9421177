"""Wire-format descriptors.

Detection order is fixed: anthropic, openai-chat, gemini, responses.
Each detector also excludes the others' markers, so a body matches at
most one descriptor regardless of order.
"""

from typing import Any

from trimwire.formats.anthropic import AnthropicFormat
from trimwire.formats.base import FormatDescriptor, FormatVariant, ToolOutput
from trimwire.formats.gemini import GeminiFormat
from trimwire.formats.openai_chat import OpenAIChatFormat
from trimwire.formats.responses import ResponsesFormat

FORMATS: tuple[FormatDescriptor, ...] = (
    AnthropicFormat(),
    OpenAIChatFormat(),
    GeminiFormat(),
    ResponsesFormat(),
)

_BY_VARIANT = {fmt.variant: fmt for fmt in FORMATS}


def detect_format(body: Any) -> FormatDescriptor | None:
    """Return the descriptor for ``body``, or None for unsupported bodies."""
    if not isinstance(body, dict):
        return None
    for fmt in FORMATS:
        if fmt.detect(body):
            return fmt
    return None


def get_format(variant: FormatVariant | str) -> FormatDescriptor:
    return _BY_VARIANT[FormatVariant(variant)]


__all__ = [
    "FORMATS",
    "AnthropicFormat",
    "FormatDescriptor",
    "FormatVariant",
    "GeminiFormat",
    "OpenAIChatFormat",
    "ResponsesFormat",
    "ToolOutput",
    "detect_format",
    "get_format",
]
