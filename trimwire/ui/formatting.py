"""Text formatting for pruning notifications."""

from trimwire.pruning.prunable import extract_parameter_key
from trimwire.state.metadata import ToolMetadataCache


def format_token_count(tokens: int) -> str:
    """1234 -> '1.2K tokens', 1000 -> '1K tokens', 12 -> '12 tokens'."""
    if tokens >= 1000:
        return f"{tokens / 1000:.1f}K".replace(".0K", "K") + " tokens"
    return f"{tokens} tokens"


def format_stats_header(total_tokens: int, pending_tokens: int) -> str:
    """Header line summarizing session-lifetime savings including the pending action."""
    return f"▣ Context pruning | ~{format_token_count(total_tokens + pending_tokens)} saved total"


def format_progress_bar(total: int, start: int, end: int, width: int = 25) -> str:
    """Render where an inclusive [start, end] message range sits in the conversation.

    ``│░░░███░░│`` style: filled cells mark the range.
    """
    if total <= 0:
        return "│" + "░" * width + "│"
    first = min(width - 1, start * width // total)
    last = min(width - 1, max(first, end * width // total))
    cells = ["█" if first <= i <= last else "░" for i in range(width)]
    return "│" + "".join(cells) + "│"


def format_pruned_items_list(tool_ids: list[str], cache: ToolMetadataCache) -> list[str]:
    lines = []
    for call_id in tool_ids:
        record = cache.get(call_id)
        if record is None:
            lines.append(f"→ {call_id}")
            continue
        key = extract_parameter_key(record)
        lines.append(f"→ {record.tool_name}: {key}" if key else f"→ {record.tool_name}")
    return lines
