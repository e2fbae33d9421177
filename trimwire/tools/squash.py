"""Squash tool: collapses a conversation range into one summary."""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from trimwire.config.schema import Config
from trimwire.exceptions import InvalidToolArgumentsError, RangeOrderError
from trimwire.host import HostClient
from trimwire.prompts.tools import SQUASH_TOOL_SPEC
from trimwire.pruning.tokens import estimate_tokens_batch
from trimwire.state.persistence import schedule_save
from trimwire.state.session import SessionState, SquashSummary
from trimwire.state.store import SessionStore, ensure_session_initialized
from trimwire.tools.base import Tool
from trimwire.tools.utils import (
    AnchorMatch,
    collect_content_in_range,
    collect_message_ids_in_range,
    collect_tool_ids_in_range,
    find_string_in_messages,
    finish_context_action,
)
from trimwire.ui.notification import get_current_params, send_squash_notification


@dataclass
class SquashResult:
    start: AnchorMatch
    end: AnchorMatch
    tool_ids: list[str]
    message_ids: list[str]

    @property
    def message_count(self) -> int:
        return self.end.message_index - self.start.message_index + 1


def apply_squash(
    state: SessionState,
    messages: list[dict[str, Any]],
    start_string: str,
    end_string: str,
    summary: str,
) -> SquashResult:
    """Resolve the range, mark it for pruning and record the summary.

    Raises a SquashError subclass when an anchor is missing, ambiguous
    or out of order; state is untouched in that case.
    """
    start = find_string_in_messages(messages, start_string, state.squash_summaries, "startString")
    end = find_string_in_messages(messages, end_string, state.squash_summaries, "endString")

    if start.message_index > end.message_index:
        raise RangeOrderError()

    tool_ids = collect_tool_ids_in_range(messages, start.message_index, end.message_index)
    message_ids = collect_message_ids_in_range(messages, start.message_index, end.message_index)

    state.prune.tool_ids.extend(tool_ids)
    state.prune.message_ids.extend(message_ids)

    # A larger squash absorbs any summary anchored inside its range
    contained = set(message_ids)
    subsumed = [s for s in state.squash_summaries if s.anchor_message_id in contained]
    if subsumed:
        logger.debug(f"Removing {len(subsumed)} subsumed squash summaries")
        state.squash_summaries = [
            s for s in state.squash_summaries if s.anchor_message_id not in contained
        ]
    state.squash_summaries.append(SquashSummary(anchor_message_id=start.message_id, summary=summary))

    contents = collect_content_in_range(messages, start.message_index, end.message_index)
    state.stats.prune_token_counter += estimate_tokens_batch(contents)

    return SquashResult(start=start, end=end, tool_ids=tool_ids, message_ids=message_ids)


class SquashTool(Tool):
    """Tool to replace a contiguous conversation range with a summary."""

    def __init__(self, client: HostClient, store: SessionStore, config: Config):
        self._client = client
        self._store = store
        self._config = config

    @property
    def name(self) -> str:
        return "squash"

    @property
    def description(self) -> str:
        return SQUASH_TOOL_SPEC

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "input": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 4,
                    "maxItems": 4,
                    "description": (
                        "[startString, endString, topic, summary] - 4 required strings: "
                        "(1) startString: unique text from conversation marking range start, "
                        "(2) endString: unique text marking range end, "
                        "(3) topic: short 3-5 word label for UI, "
                        "(4) summary: comprehensive text replacing all squashed content"
                    ),
                },
            },
            "required": ["input"],
        }

    async def execute(self, session_id: str, input: list[str] | None = None, **kwargs: Any) -> str:
        if not isinstance(input, list) or len(input) != 4 or not all(isinstance(s, str) for s in input):
            raise InvalidToolArgumentsError(
                "squash expects exactly 4 strings: [startString, endString, topic, summary]"
            )
        start_string, end_string, topic, summary = input

        logger.info("Squash tool invoked")

        messages = await self._client.get_messages(session_id)
        state = ensure_session_initialized(
            self._store, session_id, messages, self._config.protected_tools,
        )

        result = apply_squash(state, messages, start_string, end_string, summary)

        params = get_current_params(state, messages)
        await send_squash_notification(
            self._client,
            self._config,
            state,
            session_id,
            result.tool_ids,
            result.message_ids,
            topic,
            summary,
            result.start.message_index,
            result.end.message_index,
            len(messages),
            params,
        )

        finish_context_action(state)
        schedule_save(self._store.persistence, state)

        squashed = result.message_count
        logger.info(
            f"Squash range created: {squashed} messages, "
            f"{len(result.tool_ids)} tool calls ({result.start.message_id}..{result.end.message_id})"
        )
        return (
            f"Squashed {squashed} messages ({len(result.tool_ids)} tool calls) into summary. "
            f"The content will be replaced with your summary."
        )
