"""Tests for the squash tool."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from trimwire.config.schema import Config
from trimwire.exceptions import (
    AmbiguousAnchorError,
    AnchorNotFoundError,
    InvalidToolArgumentsError,
    RangeOrderError,
)
from trimwire.pruning.tokens import estimate_tokens_batch
from trimwire.state import persistence as persistence_module
from trimwire.state.persistence import StatePersistence
from trimwire.state.session import SessionState, SquashSummary
from trimwire.state.store import SessionStore
from trimwire.tools.squash import SquashTool, apply_squash
from trimwire.tools.utils import collect_content_in_range, find_string_in_messages


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
        text_msg("m1", "user", "Please investigate the login bug", created=1),
        tool_msg(
            "m2",
            tool_part("c1", "read", input={"path": "auth.py"}, output="def login(): pass"),
            created=2,
        ),
        text_msg("m3", "assistant", "The login handler lacks validation", created=3),
        text_msg("m4", "user", "Thanks, now write tests", created=4),
        tool_msg(
            "m5",
            tool_part("c2", "write", input={"path": "test_auth.py"}, output="ok"),
            text="Writing the test module",
            created=5,
        ),
    ]


# ── anchor resolution ───────────────────────────────────────────


class TestFindString:
    def test_unique_match(self):
        match = find_string_in_messages(conversation(), "lacks validation", [], "endString")
        assert match.message_index == 2
        assert match.message_id == "m3"

    def test_matches_tool_input(self):
        match = find_string_in_messages(conversation(), '"auth.py"', [], "startString")
        assert match.message_id == "m2"

    def test_not_found(self):
        with pytest.raises(AnchorNotFoundError, match="startString not found in conversation"):
            find_string_in_messages(conversation(), "nonexistent", [], "startString")

    def test_empty_search_not_found(self):
        with pytest.raises(AnchorNotFoundError):
            find_string_in_messages(conversation(), "", [], "startString")

    def test_ambiguous(self):
        with pytest.raises(AmbiguousAnchorError, match="multiple matches for endString") as exc:
            find_string_in_messages(conversation(), "login", [], "endString")
        assert exc.value.count == 3

    def test_matches_anchored_summary(self):
        summaries = [SquashSummary(anchor_message_id="m3", summary="SUMMARY-42 of the auth work")]
        match = find_string_in_messages(conversation(), "SUMMARY-42", summaries, "startString")
        assert match.message_id == "m3"


# ── apply_squash ────────────────────────────────────────────────


class TestApplySquash:
    def test_records_range(self):
        state = SessionState(session_id="ses_1")
        messages = conversation()
        result = apply_squash(state, messages, "investigate the login bug", "lacks validation",
                              "Found missing validation in auth.py")

        assert result.message_count == 3
        assert result.tool_ids == ["c1"]
        assert result.message_ids == ["m1", "m2", "m3"]
        assert state.prune.tool_ids == ["c1"]
        assert state.prune.message_ids == ["m1", "m2", "m3"]
        assert state.squash_summaries == [
            SquashSummary(anchor_message_id="m1", summary="Found missing validation in auth.py"),
        ]
        expected = estimate_tokens_batch(collect_content_in_range(messages, 0, 2))
        assert expected > 0
        assert state.stats.prune_token_counter == expected

    def test_single_message_range(self):
        state = SessionState(session_id="ses_1")
        result = apply_squash(state, conversation(), "lacks", "validation", "s")
        assert result.message_count == 1
        assert result.tool_ids == []

    def test_start_after_end(self):
        state = SessionState(session_id="ses_1")
        with pytest.raises(RangeOrderError, match="startString appears after endString"):
            apply_squash(state, conversation(), "now write tests", "investigate the login", "s")
        assert state.prune.tool_ids == []
        assert state.squash_summaries == []

    def test_errors_leave_state_untouched(self):
        state = SessionState(session_id="ses_1")
        with pytest.raises(AnchorNotFoundError):
            apply_squash(state, conversation(), "investigate", "missing text", "s")
        assert state.prune.message_ids == []
        assert state.stats.prune_token_counter == 0

    def test_larger_squash_subsumes_inner_summary(self):
        state = SessionState(session_id="ses_1")
        messages = conversation()
        apply_squash(state, messages, '"auth.py"', "lacks validation", "INNER-SUMMARY")
        assert [s.anchor_message_id for s in state.squash_summaries] == ["m2"]

        apply_squash(state, messages, "investigate the login bug", "Writing the test module", "OUTER")
        assert state.squash_summaries == [SquashSummary(anchor_message_id="m1", summary="OUTER")]
        assert state.prune.tool_ids == ["c1", "c1", "c2"]

    def test_anchor_on_previous_summary(self):
        state = SessionState(session_id="ses_1")
        messages = conversation()
        apply_squash(state, messages, "investigate the login bug", "lacks validation", "AUTH-SUMMARY")
        result = apply_squash(state, messages, "AUTH-SUMMARY", "now write tests", "BIGGER")
        assert result.start.message_id == "m1"
        assert result.message_count == 4


# ── SquashTool.execute ──────────────────────────────────────────


def _client(messages):
    client = AsyncMock()
    client.get_messages.return_value = messages
    return client


class TestSquashTool:
    @pytest.mark.asyncio
    async def test_execute(self):
        messages = conversation()
        client = _client(messages)
        store = SessionStore()
        tool = SquashTool(client, store, Config())

        result = await tool.execute(
            "ses_1",
            input=["investigate the login bug", "lacks validation", "Login fix",
                   "auth.py needs validation"],
        )

        assert result == (
            "Squashed 3 messages (1 tool calls) into summary. "
            "The content will be replaced with your summary."
        )
        state = store.get("ses_1")
        assert state.prune.message_ids == ["m1", "m2", "m3"]
        assert state.stats.prune_token_counter == 0
        assert state.stats.total_prune_tokens > 0
        assert state.nudge_counter == 0

        client.prompt.assert_awaited_once()
        session_id, payload = client.prompt.await_args.args
        assert session_id == "ses_1"
        assert payload["no_reply"] is True
        text = payload["parts"][0]["text"]
        assert payload["parts"][0]["ignored"] is True
        assert "→ Topic: Login fix" in text
        assert "→ Items: 3 messages and 1 tools condensed" in text
        assert "→ Summary: auth.py needs validation" in text

    @pytest.mark.asyncio
    async def test_notification_off(self):
        client = _client(conversation())
        tool = SquashTool(client, SessionStore(), Config(prune_notification="off"))
        await tool.execute("ses_1", input=["investigate", "lacks validation", "t", "s"])
        client.prompt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_arguments(self):
        tool = SquashTool(_client([]), SessionStore(), Config())
        with pytest.raises(InvalidToolArgumentsError):
            await tool.execute("ses_1", input=["only", "three", "strings"])
        with pytest.raises(InvalidToolArgumentsError):
            await tool.execute("ses_1", input="not a list")

    @pytest.mark.asyncio
    async def test_anchor_error_propagates(self):
        client = _client(conversation())
        store = SessionStore()
        tool = SquashTool(client, store, Config())
        with pytest.raises(AmbiguousAnchorError):
            await tool.execute("ses_1", input=["login", "lacks validation", "t", "s"])
        client.prompt.assert_not_awaited()
        assert store.get("ses_1").squash_summaries == []

    @pytest.mark.asyncio
    async def test_persists_state(self, tmp_path):
        store = SessionStore(StatePersistence(tmp_path))
        tool = SquashTool(_client(conversation()), store, Config(prune_notification="off"))
        await tool.execute("ses_1", input=["investigate", "lacks validation", "t", "SAVED"])

        await asyncio.gather(*list(persistence_module._pending_saves))
        restored = StatePersistence(tmp_path).load("ses_1")
        assert restored is not None
        assert restored.squash_summaries[0].summary == "SAVED"

    def test_schema(self):
        schema = SquashTool(_client([]), SessionStore(), Config()).to_schema()
        assert schema["function"]["name"] == "squash"
        assert schema["function"]["parameters"]["required"] == ["input"]
