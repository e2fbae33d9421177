"""Tests for session state persistence."""

import asyncio

import pytest

from trimwire.state import persistence as persistence_module
from trimwire.state.metadata import ToolCallRecord
from trimwire.state.persistence import StatePersistence, safe_filename, schedule_save
from trimwire.state.session import SessionState, SquashSummary
from trimwire.state.store import SessionStore


def _populated_state():
    state = SessionState(session_id="ses/1")
    state.tool_cache.put(ToolCallRecord(
        call_id="c1", tool_name="bash", parameters={"command": "ls"},
        status="error", error_detail="denied", numeric_id=1,
    ))
    state.numeric_ids["c1"] = 1
    state.prune.tool_ids.append("c1")
    state.prune.message_ids.append("m1")
    state.squash_summaries.append(SquashSummary(anchor_message_id="m1", summary="did things"))
    state.tracker.seen_result_ids.update({"c1", "c2"})
    state.tracker.result_count = 2
    state.stats.total_prune_tokens = 500
    state.nudge_counter = 3
    state.last_compaction = 12.5
    return state


class TestStatePersistence:
    def test_safe_filename(self):
        assert safe_filename("ses/../x y") == "ses_.._x_y"

    def test_save_and_load(self, tmp_path):
        persistence = StatePersistence(tmp_path)
        state = _populated_state()
        persistence.save(state)

        assert (tmp_path / "ses_1.json").exists()
        restored = persistence.load("ses/1")
        assert restored.to_dict() == state.to_dict()
        assert restored.tool_cache.get("C1").error_detail == "denied"
        assert restored.tracker.seen_result_ids == {"c1", "c2"}

    def test_load_missing(self, tmp_path):
        assert StatePersistence(tmp_path).load("nope") is None

    def test_load_corrupted(self, tmp_path):
        (tmp_path / "ses_1.json").write_text("{broken")
        assert StatePersistence(tmp_path).load("ses_1") is None


class TestSessionStore:
    def test_restores_persisted_state(self, tmp_path):
        persistence = StatePersistence(tmp_path)
        persistence.save(_populated_state())

        store = SessionStore(persistence)
        state = store.get_or_create("ses/1")
        assert state.stats.total_prune_tokens == 500
        assert "ses/1" in store
        assert store.get_or_create("ses/1") is state

    def test_discard(self):
        store = SessionStore()
        store.get_or_create("s")
        store.discard("s")
        assert store.get("s") is None


class TestScheduleSave:
    @pytest.mark.asyncio
    async def test_writes_in_background(self, tmp_path):
        persistence = StatePersistence(tmp_path)
        task = schedule_save(persistence, SessionState(session_id="s1"))
        await task
        assert persistence.load("s1") is not None

    @pytest.mark.asyncio
    async def test_snapshot_taken_when_scheduled(self, tmp_path):
        persistence = StatePersistence(tmp_path)
        state = SessionState(session_id="s1")
        state.prune.tool_ids.append("c1")

        task = schedule_save(persistence, state)
        # Next turn mutates the live state before the write lands
        state.prune.tool_ids.append("c2")
        state.tracker.seen_result_ids.add("c2")
        await task

        saved = persistence.load("s1")
        assert saved.prune.tool_ids == ["c1"]
        assert saved.tracker.seen_result_ids == set()

    @pytest.mark.asyncio
    async def test_without_persistence(self):
        assert schedule_save(None, SessionState(session_id="s1")) is None

    @pytest.mark.asyncio
    async def test_failure_does_not_raise(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        persistence = StatePersistence(blocker / "sub")

        task = schedule_save(persistence, SessionState(session_id="s1"))
        await asyncio.wait([task])
        # Let the done callback run
        await asyncio.sleep(0)
        assert task.exception() is not None
        assert task not in persistence_module._pending_saves
