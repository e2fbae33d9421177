"""Nudge tracker: reminds the model to clean up after every N tool results."""

from typing import Any

from loguru import logger

from trimwire.formats.base import FormatDescriptor
from trimwire.prompts.context import NUDGE_INSTRUCTION
from trimwire.state.session import SessionState, ToolResultTracker
from trimwire.state.sync import PRUNE_TOOL_NAME


class NudgeTracker:
    """Counts newly seen tool results and injects a reminder at bucket crossings.

    A nudge fires when ``floor(count / frequency)`` grows, so a batch
    that crosses one or more boundaries yields exactly one nudge.
    """

    def __init__(self, frequency: int, text: str = NUDGE_INSTRUCTION):
        if frequency <= 0:
            raise ValueError("frequency must be positive")
        self.frequency = frequency
        self.text = text

    @staticmethod
    def count_tool_results(
        fmt: FormatDescriptor, data: list[Any], tracker: ToolResultTracker, state: SessionState,
    ) -> int:
        """Mark unseen results as seen and return how many were new."""
        new_count = 0
        for output in fmt.extract_tool_outputs(data, state.tool_cache):
            result_id = output.id.lower()
            if result_id in tracker.seen_result_ids:
                continue
            tracker.seen_result_ids.add(result_id)
            new_count += 1
            if output.tool_name != PRUNE_TOOL_NAME:
                tracker.skip_next_idle = False

        tracker.result_count += new_count
        return new_count

    def crossed_bucket(self, before: int, after: int) -> bool:
        return after // self.frequency > before // self.frequency

    def check(self, fmt: FormatDescriptor, body: dict[str, Any], state: SessionState) -> bool:
        """Count results in ``body`` and append the nudge on a bucket crossing.

        Returns True when the nudge was injected.
        """
        data = fmt.get_data_array(body)
        if not data:
            return False

        tracker = state.tracker
        before = tracker.result_count
        new_count = self.count_tool_results(fmt, data, tracker, state)
        if not new_count or not self.crossed_bucket(before, tracker.result_count):
            return False

        injected = fmt.append_to_last_assistant_message(body, self.text)
        if injected:
            logger.info(
                f"Nudge injected ({fmt.name}): {tracker.result_count} tool results seen"
            )
        return injected
