"""End-of-turn notifications for prune and squash actions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from trimwire.config.schema import Config
from trimwire.host import HostClient
from trimwire.messages import get_last_user_message
from trimwire.state.session import SessionState
from trimwire.ui.formatting import (
    format_progress_bar,
    format_pruned_items_list,
    format_stats_header,
    format_token_count,
)

TOAST_DURATION_MS = 4000


class PruneReason(str, Enum):
    completion = "completion"
    noise = "noise"
    extraction = "extraction"


PRUNE_REASON_LABELS = {
    PruneReason.completion: "Task Complete",
    PruneReason.noise: "Noise Removal",
    PruneReason.extraction: "Extraction",
}


@dataclass
class PromptParams:
    """Model routing copied from the last user message so notifications stay on the same agent."""
    provider_id: str | None = None
    model_id: str | None = None
    agent: str | None = None
    variant: str | None = None


def get_current_params(state: SessionState, messages: list[dict[str, Any]]) -> PromptParams:
    user_msg = get_last_user_message(messages)
    if user_msg is None:
        logger.debug("No user message found when determining current params")
        return PromptParams(variant=state.variant)

    info = user_msg.get("info", {})
    model = info.get("model") or {}
    return PromptParams(
        provider_id=model.get("provider_id"),
        model_id=model.get("model_id"),
        agent=info.get("agent"),
        variant=state.variant or info.get("variant"),
    )


def build_squash_message(
    config: Config,
    state: SessionState,
    tool_ids: list[str],
    message_ids: list[str],
    topic: str,
    summary: str,
    start_index: int,
    end_index: int,
    total_messages: int,
) -> str:
    header = format_stats_header(state.stats.total_prune_tokens, state.stats.prune_token_counter)
    if config.prune_notification == "minimal":
        return header

    pending = f"~{format_token_count(state.stats.prune_token_counter)}"
    bar = format_progress_bar(total_messages, start_index, end_index, 25)
    lines = [
        header,
        "",
        f"▣ Squashing ({pending}) {bar}",
        f"→ Topic: {topic}",
    ]
    items = f"→ Items: {len(message_ids)} messages"
    items += f" and {len(tool_ids)} tools condensed" if tool_ids else " condensed"
    lines.append(items)
    if config.tools.squash.show_summary:
        lines.append(f"→ Summary: {summary}")
    return "\n".join(lines)


def build_prune_message(
    config: Config,
    state: SessionState,
    tool_ids: list[str],
    reason: PruneReason | None,
) -> str:
    header = format_stats_header(state.stats.total_prune_tokens, state.stats.prune_token_counter)
    reason_label = f" - {PRUNE_REASON_LABELS[reason]}" if reason else ""
    if config.prune_notification == "minimal":
        return header + reason_label

    pending = f"~{format_token_count(state.stats.prune_token_counter)}"
    details = f"▣ Pruning ({pending}){reason_label}"
    items = format_pruned_items_list(tool_ids, state.tool_cache)
    return "\n".join([header, "", details, *items])


async def send_ignored_message(
    client: HostClient,
    session_id: str,
    text: str,
    params: PromptParams,
) -> None:
    """Post ``text`` into the session as an ignored, no-reply message."""
    model = None
    if params.provider_id and params.model_id:
        model = {"provider_id": params.provider_id, "model_id": params.model_id}

    try:
        await client.prompt(session_id, {
            "no_reply": True,
            "agent": params.agent or None,
            "model": model,
            "variant": params.variant or None,
            "parts": [{"type": "text", "text": text, "ignored": True}],
        })
    except Exception as e:
        logger.warning(f"Failed to send notification: {e}")


async def _deliver(
    client: HostClient,
    config: Config,
    state: SessionState,
    session_id: str,
    message: str,
    params: PromptParams,
) -> bool:
    if config.notification_type == "toast" and hasattr(client, "show_toast"):
        header = format_stats_header(state.stats.total_prune_tokens, state.stats.prune_token_counter)
        body = message[len(header):].strip() if message.startswith(header) else message
        try:
            await client.show_toast(header.split("\n")[0], body, "success", TOAST_DURATION_MS)
            return True
        except Exception as e:
            logger.warning(f"Failed to show toast, falling back to message: {e}")

    await send_ignored_message(client, session_id, message, params)
    return True


async def send_squash_notification(
    client: HostClient,
    config: Config,
    state: SessionState,
    session_id: str,
    tool_ids: list[str],
    message_ids: list[str],
    topic: str,
    summary: str,
    start_index: int,
    end_index: int,
    total_messages: int,
    params: PromptParams,
) -> bool:
    """Announce a squash. Returns False when notifications are off."""
    if config.prune_notification == "off":
        return False

    message = build_squash_message(
        config, state, tool_ids, message_ids, topic, summary,
        start_index, end_index, total_messages,
    )
    return await _deliver(client, config, state, session_id, message, params)


async def send_unified_notification(
    client: HostClient,
    config: Config,
    state: SessionState,
    session_id: str,
    tool_ids: list[str],
    reason: PruneReason | None,
    params: PromptParams,
) -> bool:
    """Announce a prune. Returns False when nothing was pruned or notifications are off."""
    if not tool_ids or config.prune_notification == "off":
        return False

    message = build_prune_message(config, state, tool_ids, reason)
    return await _deliver(client, config, state, session_id, message, params)
