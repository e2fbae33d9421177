"""Interface of the host runtime trimwire plugs into."""

from typing import Any, Protocol


class HostClient(Protocol):
    """Calls trimwire makes back into the host.

    ``get_messages`` returns the ordered session history in the shape
    described in ``trimwire.messages``.
    """

    async def get_messages(self, session_id: str) -> list[dict[str, Any]]: ...

    async def prompt(self, session_id: str, body: dict[str, Any]) -> None: ...

    async def show_toast(
        self, title: str, message: str, variant: str = "success", duration: int = 4000,
    ) -> None: ...
