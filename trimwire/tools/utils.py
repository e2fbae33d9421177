"""Range resolution helpers for the squash tool."""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from trimwire.exceptions import AmbiguousAnchorError, AnchorNotFoundError
from trimwire.messages import iter_tool_parts, message_id, message_text, part_text
from trimwire.state.session import SessionState, SquashSummary


@dataclass
class AnchorMatch:
    """The single message an anchor string was found in."""
    message_index: int
    message_id: str


def searchable_text(msg: dict[str, Any], summaries: list[SquashSummary]) -> str:
    """Flattened message text plus any squash summary anchored on it.

    The model only sees the summary for an already squashed range, so it
    must be able to anchor on summary text too.
    """
    text = message_text(msg)
    mid = message_id(msg)
    extra = [s.summary for s in summaries if s.anchor_message_id == mid]
    return "\n".join([text, *extra]) if extra else text


def find_string_in_messages(
    messages: list[dict[str, Any]],
    search: str,
    summaries: list[SquashSummary],
    label: str,
) -> AnchorMatch:
    """Locate the one message containing ``search``.

    Raises AnchorNotFoundError on zero matches and AmbiguousAnchorError
    when more than one message contains it.
    """
    if not search:
        raise AnchorNotFoundError(label)

    matches = [
        i for i, msg in enumerate(messages)
        if search in searchable_text(msg, summaries)
    ]

    if not matches:
        raise AnchorNotFoundError(label)
    if len(matches) > 1:
        logger.debug(f"{label} matched messages at indices {matches}")
        raise AmbiguousAnchorError(label, len(matches))

    index = matches[0]
    return AnchorMatch(message_index=index, message_id=message_id(messages[index]))


def collect_tool_ids_in_range(messages: list[dict[str, Any]], start: int, end: int) -> list[str]:
    return [
        part["call_id"]
        for msg in messages[start:end + 1]
        for part in iter_tool_parts(msg)
    ]


def collect_message_ids_in_range(messages: list[dict[str, Any]], start: int, end: int) -> list[str]:
    return [mid for mid in (message_id(m) for m in messages[start:end + 1]) if mid]


def collect_content_in_range(messages: list[dict[str, Any]], start: int, end: int) -> list[str]:
    """Every non-empty flattened part in the range, for token estimation."""
    return [
        text
        for msg in messages[start:end + 1]
        for text in (part_text(p) for p in msg.get("parts", []))
        if text
    ]


def finish_context_action(state: SessionState) -> None:
    """Fold pending savings into the lifetime total and reset the nudge counter."""
    state.stats.total_prune_tokens += state.stats.prune_token_counter
    state.stats.prune_token_counter = 0
    state.nudge_counter = 0
