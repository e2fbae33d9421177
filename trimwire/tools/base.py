"""Base class for host-exposed tools."""

from abc import ABC, abstractmethod
from typing import Any


class Tool(ABC):
    """
    A tool the host exposes to the model.

    Subclasses describe themselves with a JSON-schema ``parameters`` dict
    and run through ``execute``, which returns the text shown to the
    model or raises a descriptive error.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name used in function calls."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What the tool does."""

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON schema for the tool arguments."""

    @abstractmethod
    async def execute(self, session_id: str, **kwargs: Any) -> str:
        """Run the tool for ``session_id``."""

    def to_schema(self) -> dict[str, Any]:
        """OpenAI function-calling schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
