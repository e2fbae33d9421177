"""Outbound request rewriting, run once per LLM call."""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from trimwire.config.schema import Config
from trimwire.formats import FormatVariant, detect_format
from trimwire.nudge.synth import inject_synth_instruction
from trimwire.nudge.tracker import NudgeTracker
from trimwire.prompts.context import SYSTEM_PROMPT
from trimwire.pruning.prunable import (
    build_end_injection,
    build_prunable_tools_list,
    get_unpruned_tool_ids,
)
from trimwire.pruning.prune import PRUNED_TOOL_OUTPUT_REPLACEMENT, prune
from trimwire.pruning.tokens import QUESTION_TOOL_NAME
from trimwire.state.session import SessionState


@dataclass
class RewriteResult:
    format: str | None = None
    replaced_count: int = 0
    nudged: bool = False
    system_injected: bool = False
    list_injected: bool = False


class RequestRewriter:
    """Applies the session's pruning decisions to wire bodies.

    The body is mutated in place. Bodies of an unknown protocol pass
    through untouched.
    """

    def __init__(self, config: Config):
        self.config = config
        self.nudge = NudgeTracker(config.nudge.frequency)

    def prune_messages(self, state: SessionState, messages: list[dict[str, Any]]) -> int:
        """Redact pruned tool parts in the host message history."""
        if not self.config.enabled:
            return 0
        return prune(state, messages)

    def rewrite(self, body: dict[str, Any], state: SessionState, url: str = "") -> RewriteResult:
        result = RewriteResult()
        if not self.config.enabled:
            return result

        fmt = detect_format(body)
        if fmt is None:
            logger.debug(f"Unrecognized request body format for {url or 'request'}")
            return result
        result.format = fmt.name

        data = fmt.get_data_array(body)
        if data is None:
            return result

        if state.prune.tool_ids and fmt.has_tool_outputs(data):
            # dict.fromkeys keeps order while dropping duplicate ids
            for tool_id in dict.fromkeys(state.prune.tool_ids):
                # Question answers stay visible; only their inputs are pruned
                record = state.tool_cache.get(tool_id)
                if record is not None and record.tool_name == QUESTION_TOOL_NAME:
                    continue
                if fmt.replace_tool_output(data, tool_id, PRUNED_TOOL_OUTPUT_REPLACEMENT):
                    result.replaced_count += 1

        if self.config.nudge.enabled:
            result.nudged = self.nudge.check(fmt, body, state)

        result.system_injected = fmt.inject_system_message(body, SYSTEM_PROMPT)

        if self.config.tools.prune.enabled and self.config.tools.prune.inject_list:
            result.list_injected = self._inject_prunable_list(fmt.variant, data, state, result.nudged)

        logger.debug(f"Rewrote request: {fmt.get_log_metadata(data, result.replaced_count, url)}")
        return result

    def _inject_prunable_list(
        self, variant: FormatVariant, data: list[Any], state: SessionState, nudged: bool,
    ) -> bool:
        protected = self.config.protected_tools
        prunable_list, _ = build_prunable_tools_list(state, get_unpruned_tool_ids(state), protected)

        include_nudge = (
            self.config.nudge.enabled
            and not nudged
            and not state.last_tool_was_prune
            and state.nudge_counter >= self.config.nudge.frequency
        )
        injection = build_end_injection(prunable_list, include_nudge)
        if not injection:
            return False

        text_type = "input_text" if variant == FormatVariant.responses else "text"
        return inject_synth_instruction(data, injection, text_type)
