"""Token estimation for savings accounting."""

from typing import Any

import tiktoken
from loguru import logger

from trimwire.messages import is_message_compacted, stringify
from trimwire.state.metadata import ToolStatus
from trimwire.state.session import SessionState

CHARS_PER_TOKEN = 4  # Fallback when the tokenizer is unavailable
ENCODING_NAME = "o200k_base"
QUESTION_TOOL_NAME = "question"


class TokenEstimator:
    """Counts tokens with tiktoken, degrading to a character heuristic.

    The encoding is loaded lazily on first use. A failed load is
    remembered so later calls go straight to the heuristic.
    """

    def __init__(self, encoding_name: str = ENCODING_NAME):
        self.encoding_name = encoding_name
        self._enc: Any = None
        self._unavailable = False

    def _encoding(self) -> Any:
        if self._enc is None and not self._unavailable:
            try:
                self._enc = tiktoken.get_encoding(self.encoding_name)
            except Exception as e:
                logger.warning(f"Tokenizer unavailable, using character estimate: {e}")
                self._unavailable = True
        return self._enc

    @staticmethod
    def approximate(text: str) -> int:
        return round(len(text) / CHARS_PER_TOKEN)

    def estimate(self, text: str) -> int:
        if not text:
            return 0
        enc = self._encoding()
        if enc is None:
            return self.approximate(text)
        try:
            return len(enc.encode(text, disallowed_special=()))
        except Exception:
            return self.approximate(text)

    def estimate_batch(self, texts: list[str]) -> list[int]:
        return [self.estimate(t) for t in texts]


default_estimator = TokenEstimator()


def estimate_tokens(text: str) -> int:
    return default_estimator.estimate(text)


def estimate_tokens_batch(texts: list[str]) -> int:
    """Sum of the estimates for ``texts``."""
    return sum(default_estimator.estimate_batch(texts))


def calculate_tokens_saved(
    state: SessionState,
    messages: list[dict[str, Any]],
    prune_tool_ids: list[str],
) -> int:
    """Approximate tokens freed by pruning ``prune_tool_ids``.

    Counts outputs of completed calls, errors of failed calls, and the
    ``questions`` input of the question tool. Compacted messages are
    skipped since the host already dropped them.
    """
    targets = set(prune_tool_ids)
    contents: list[str] = []
    try:
        for msg in messages:
            if is_message_compacted(state, msg):
                continue
            for part in msg.get("parts", []):
                if part.get("type") != "tool" or part.get("call_id") not in targets:
                    continue
                part_state = part.get("state") or {}
                if part.get("tool") == QUESTION_TOOL_NAME:
                    questions = (part_state.get("input") or {}).get("questions")
                    if questions is not None:
                        contents.append(stringify(questions))
                    continue
                status = part_state.get("status")
                if status == ToolStatus.completed.value:
                    contents.append(stringify(part_state.get("output", "")))
                elif status == ToolStatus.error.value:
                    contents.append(stringify(part_state.get("error", "")))
        return estimate_tokens_batch(contents)
    except Exception as e:
        logger.warning(f"Failed to calculate tokens saved: {e}")
        return 0
