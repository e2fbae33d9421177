"""Prune tool: drops individual tool outputs by numeric id."""

from typing import Any

from loguru import logger

from trimwire.config.schema import Config
from trimwire.exceptions import InvalidToolArgumentsError, PruneToolError
from trimwire.host import HostClient
from trimwire.prompts.tools import PRUNE_TOOL_SPEC
from trimwire.pruning.tokens import calculate_tokens_saved
from trimwire.state.persistence import schedule_save
from trimwire.state.session import SessionState
from trimwire.state.store import SessionStore, ensure_session_initialized
from trimwire.tools.base import Tool
from trimwire.tools.utils import finish_context_action
from trimwire.ui.notification import PruneReason, get_current_params, send_unified_notification


def parse_prune_ids(ids: list[str]) -> tuple[PruneReason | None, list[int]]:
    """Split an optional leading reason from the numeric ids."""
    if not ids:
        raise InvalidToolArgumentsError("prune expects at least one numeric id")

    reason = None
    values = list(ids)
    try:
        reason = PruneReason(values[0])
        values = values[1:]
    except ValueError:
        pass

    numeric: list[int] = []
    for value in values:
        try:
            numeric.append(int(str(value).strip()))
        except ValueError:
            raise InvalidToolArgumentsError(f"Invalid tool id: {value!r}") from None
    if not numeric:
        raise InvalidToolArgumentsError("prune expects at least one numeric id")
    return reason, numeric


def resolve_prune_ids(state: SessionState, numeric_ids: list[int], protected_tools: list[str]) -> list[str]:
    """Map numeric ids to call ids. Unknown or protected ids raise PruneToolError."""
    call_ids: list[str] = []
    for numeric_id in numeric_ids:
        call_id = state.resolve_numeric_id(numeric_id)
        if call_id is None:
            raise PruneToolError(f"Unknown tool id: {numeric_id}")
        record = state.tool_cache.get(call_id)
        if record is not None and record.tool_name in protected_tools:
            raise PruneToolError(f"Tool id {numeric_id} ({record.tool_name}) is protected")
        call_ids.append(call_id)
    return call_ids


class PruneTool(Tool):
    """Tool to mark tool outputs for removal from the context."""

    def __init__(self, client: HostClient, store: SessionStore, config: Config):
        self._client = client
        self._store = store
        self._config = config

    @property
    def name(self) -> str:
        return "prune"

    @property
    def description(self) -> str:
        return PRUNE_TOOL_SPEC

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "ids": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": (
                        "Numeric ids from the <prunable-tools> list, optionally preceded "
                        "by a reason: completion, noise or extraction"
                    ),
                },
            },
            "required": ["ids"],
        }

    async def execute(self, session_id: str, ids: list[str] | None = None, **kwargs: Any) -> str:
        reason, numeric_ids = parse_prune_ids(ids or [])

        messages = await self._client.get_messages(session_id)
        state = ensure_session_initialized(
            self._store, session_id, messages, self._config.protected_tools,
        )

        call_ids = resolve_prune_ids(state, numeric_ids, self._config.protected_tools)
        state.prune.tool_ids.extend(call_ids)
        state.stats.prune_token_counter += calculate_tokens_saved(state, messages, call_ids)

        await send_unified_notification(
            self._client,
            self._config,
            state,
            session_id,
            call_ids,
            reason,
            get_current_params(state, messages),
        )

        finish_context_action(state)
        schedule_save(self._store.persistence, state)

        logger.info(f"Pruned {len(call_ids)} tool outputs in session {session_id}")
        return f"Context pruning complete. Pruned {len(call_ids)} tool outputs."
