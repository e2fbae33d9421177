"""Tests for the prune tool and the prunable-tools list."""

from unittest.mock import AsyncMock

import pytest

from trimwire.config.schema import DEFAULT_PROTECTED_TOOLS, Config
from trimwire.exceptions import InvalidToolArgumentsError, PruneToolError
from trimwire.pruning.prunable import (
    build_end_injection,
    build_prunable_tools_list,
    extract_parameter_key,
    get_unpruned_tool_ids,
)
from trimwire.prompts.context import NUDGE_INSTRUCTION
from trimwire.state.metadata import ToolCallRecord
from trimwire.state.session import SessionState
from trimwire.state.store import SessionStore
from trimwire.state.sync import sync_tool_cache
from trimwire.tools.prune import PruneTool, parse_prune_ids
from trimwire.ui.notification import PruneReason


def text_msg(msg_id, role, text, created=None, **info):
    return {
        "info": {"id": msg_id, "role": role, "time": {"created": created or 0}, **info},
        "parts": [{"type": "text", "text": text}],
    }


def tool_part(call_id, tool="read", status="completed", input=None, output="", error=None,
              compacted=None):
    state = {"status": status, "input": input if input is not None else {}}
    if status == "completed":
        state["output"] = output
        state["time"] = {"start": 1, "end": 2}
        if compacted:
            state["time"]["compacted"] = compacted
    if status == "error":
        state["error"] = error or "boom"
    return {"type": "tool", "call_id": call_id, "tool": tool, "state": state}


def tool_msg(msg_id, *parts, text=None, created=None):
    """Assistant message carrying the given tool parts."""
    msg_parts = [{"type": "text", "text": text}] if text else []
    msg_parts.extend(parts)
    return {
        "info": {"id": msg_id, "role": "assistant", "time": {"created": created or 0}},
        "parts": msg_parts,
    }


def conversation():
    return [
        text_msg("m1", "user", "fix the tests"),
        tool_msg(
            "m2",
            tool_part("c1", "read", input={"filePath": "/src/auth.py"}, output="x" * 400),
            tool_part("c2", "todowrite", input={"todos": []}, output="ok"),
            tool_part("c3", "grep", input={"pattern": "def login"}, output="y" * 80),
        ),
    ]


class TestExtractParameterKey:
    def test_priority_order(self):
        record = ToolCallRecord(call_id="c", tool_name="bash",
                                parameters={"description": "list", "command": "ls -la"})
        assert extract_parameter_key(record) == "ls -la"

    def test_truncates_and_collapses_whitespace(self):
        record = ToolCallRecord(call_id="c", tool_name="bash",
                                parameters={"command": "echo   " + "a" * 100})
        key = extract_parameter_key(record)
        assert len(key) == 60
        assert key.startswith("echo a")
        assert key.endswith("...")

    def test_no_known_key(self):
        assert extract_parameter_key(ToolCallRecord(call_id="c", tool_name="x")) == ""


class TestPrunableList:
    def _state(self):
        state = SessionState(session_id="ses_1")
        sync_tool_cache(state, conversation(), DEFAULT_PROTECTED_TOOLS)
        return state

    def test_lists_unprotected_tools(self):
        state = self._state()
        text, numeric_ids = build_prunable_tools_list(
            state, get_unpruned_tool_ids(state), DEFAULT_PROTECTED_TOOLS,
        )
        assert numeric_ids == [1, 3]
        assert text.startswith("<prunable-tools>")
        assert text.endswith("</prunable-tools>")
        assert "1: read, /src/auth.py" in text
        assert "3: grep, def login" in text
        assert "todowrite" not in text

    def test_pruned_ids_excluded(self):
        state = self._state()
        state.prune.tool_ids.append("c1")
        assert get_unpruned_tool_ids(state) == ["c2", "c3"]

    def test_empty_list(self):
        state = SessionState(session_id="ses_1")
        assert build_prunable_tools_list(state, [], DEFAULT_PROTECTED_TOOLS) == ("", [])
        assert build_end_injection("", include_nudge=True) == ""

    def test_end_injection_with_nudge(self):
        assert build_end_injection("LIST", include_nudge=False) == "LIST"
        assert build_end_injection("LIST", include_nudge=True) == f"LIST\n\n{NUDGE_INSTRUCTION}"


class TestParsePruneIds:
    def test_plain_ids(self):
        assert parse_prune_ids(["1", " 3 "]) == (None, [1, 3])

    def test_leading_reason(self):
        assert parse_prune_ids(["noise", "2"]) == (PruneReason.noise, [2])

    @pytest.mark.parametrize("ids", [[], ["completion"], ["abc"], ["1", "two"]])
    def test_invalid(self, ids):
        with pytest.raises(InvalidToolArgumentsError):
            parse_prune_ids(ids)


class TestPruneTool:
    def _tool(self, config=None):
        client = AsyncMock()
        client.get_messages.return_value = conversation()
        store = SessionStore()
        return PruneTool(client, store, config or Config()), client, store

    @pytest.mark.asyncio
    async def test_execute(self):
        tool, client, store = self._tool()
        result = await tool.execute("ses_1", ids=["noise", "1", "3"])

        assert result == "Context pruning complete. Pruned 2 tool outputs."
        state = store.get("ses_1")
        assert state.prune.tool_ids == ["c1", "c3"]
        assert state.stats.total_prune_tokens == 120
        assert state.stats.prune_token_counter == 0
        assert state.nudge_counter == 0

        client.prompt.assert_awaited_once()
        text = client.prompt.await_args.args[1]["parts"][0]["text"]
        assert "▣ Context pruning | ~120 tokens saved total" in text
        assert "▣ Pruning (~120 tokens) - Noise Removal" in text
        assert "→ read: /src/auth.py" in text
        assert "→ grep: def login" in text

    @pytest.mark.asyncio
    async def test_minimal_notification(self):
        tool, client, _ = self._tool(Config(prune_notification="minimal"))
        await tool.execute("ses_1", ids=["completion", "1"])
        text = client.prompt.await_args.args[1]["parts"][0]["text"]
        assert text == "▣ Context pruning | ~100 tokens saved total - Task Complete"

    @pytest.mark.asyncio
    async def test_unknown_id(self):
        tool, client, store = self._tool()
        with pytest.raises(PruneToolError, match="Unknown tool id: 9"):
            await tool.execute("ses_1", ids=["9"])
        assert store.get("ses_1").prune.tool_ids == []
        client.prompt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_protected_id(self):
        tool, _, store = self._tool()
        with pytest.raises(PruneToolError, match="protected"):
            await tool.execute("ses_1", ids=["1", "2"])
        assert store.get("ses_1").prune.tool_ids == []
