"""Base wire-format descriptor interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from trimwire.state.metadata import ToolMetadataCache


class FormatVariant(str, Enum):
    anthropic = "anthropic"
    openai_chat = "openai-chat"
    gemini = "gemini"
    responses = "responses"


@dataclass
class ToolOutput:
    """A tool result found in a wire body."""
    id: str  # lower-cased
    tool_name: str | None = None


class FormatDescriptor(ABC):
    """
    Detection and mutation primitives over one wire protocol's request body.

    Every component that touches an outbound body goes through this
    interface, so supporting a new protocol means adding one subclass.
    All mutations happen in place on the body or its data array.
    """

    variant: FormatVariant

    @property
    def name(self) -> str:
        return self.variant.value

    @abstractmethod
    def detect(self, body: dict[str, Any]) -> bool:
        """Structural test for this protocol."""

    @abstractmethod
    def get_data_array(self, body: dict[str, Any]) -> list[Any] | None:
        """The ordered item list the other operations traverse."""

    @abstractmethod
    def inject_system_message(self, body: dict[str, Any], text: str) -> bool:
        """Append ``text`` as an extra system instruction. False when ``text`` is empty."""

    @abstractmethod
    def append_to_last_assistant_message(self, body: dict[str, Any], text: str) -> bool:
        """Insert ``text`` into the newest assistant entry, ahead of any tool invocation."""

    @abstractmethod
    def extract_tool_outputs(self, data: list[Any], cache: ToolMetadataCache) -> list[ToolOutput]:
        """All tool results in ``data``, with names resolved from ``cache`` when known."""

    @abstractmethod
    def replace_tool_output(self, data: list[Any], tool_id: str, replacement: str) -> bool:
        """Overwrite matching results (case-insensitive id) with ``replacement``."""

    @abstractmethod
    def has_tool_outputs(self, data: list[Any]) -> bool:
        """Whether ``data`` holds at least one tool result."""

    def get_log_metadata(self, data: list[Any], replaced_count: int, url: str) -> dict[str, Any]:
        return {
            "url": url,
            "replaced_count": replaced_count,
            "total_messages": len(data),
            "format": self.name,
        }


def text_block(text: str) -> dict[str, str]:
    return {"type": "text", "text": text}


def lower_id(value: Any) -> str | None:
    return value.lower() if isinstance(value, str) and value else None


def resolve_tool_name(cache: ToolMetadataCache, tool_id: str, fallback: str | None = None) -> str | None:
    record = cache.get(tool_id)
    return record.tool_name if record else fallback
