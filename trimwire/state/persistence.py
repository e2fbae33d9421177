"""Session state persistence (one JSON file per session)."""

import asyncio
import json
from pathlib import Path
from typing import Any

from loguru import logger

from trimwire.state.session import SessionState

# Strong references to in-flight saves so they are not garbage collected.
_pending_saves: set[asyncio.Task] = set()


def safe_filename(name: str) -> str:
    """Replace characters that are unsafe in file names."""
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in name)


class StatePersistence:
    """Reads and writes SessionState snapshots under a directory."""

    def __init__(self, state_dir: Path):
        self.state_dir = state_dir

    def _get_path(self, session_id: str) -> Path:
        return self.state_dir / f"{safe_filename(session_id)}.json"

    def save(self, state: SessionState) -> None:
        self.write(state.session_id, state.to_dict())

    def write(self, session_id: str, data: dict[str, Any]) -> None:
        """Write an already serialized state. Safe to run off the event loop."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        path = self._get_path(session_id)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, ensure_ascii=False)
        tmp.replace(path)

    def load(self, session_id: str) -> SessionState | None:
        path = self._get_path(session_id)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return SessionState.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load session state {session_id}: {e}")
            return None


def _log_save_failure(task: asyncio.Task) -> None:
    _pending_saves.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Failed to persist state: {exc}")


def schedule_save(persistence: StatePersistence | None, state: SessionState) -> asyncio.Task | None:
    """Persist state in a detached task. Failures are logged, never raised.

    The state is serialized here, on the loop thread, so later mutations
    cannot race the write. The in-memory state stays authoritative whether
    or not the save lands. Must be called from a running event loop.
    """
    if persistence is None:
        return None
    data = state.to_dict()
    task = asyncio.create_task(asyncio.to_thread(persistence.write, state.session_id, data))
    _pending_saves.add(task)
    task.add_done_callback(_log_save_failure)
    return task
