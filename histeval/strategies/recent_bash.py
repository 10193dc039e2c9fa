from __future__ import annotations

from histeval.records import EnrichedRecord
from histeval.strategies.base import Strategy, push_recent


class RecentBashStrategy(Strategy):
    """Replays how a shell history file behaves across concurrent sessions.

    Each session works on its own recent list. The shared history file is
    snapshotted the first time a session asks for candidates and that
    snapshot stays frozen for the session's lifetime. When a session ends
    its list is prepended onto the history file, so only sessions started
    afterwards can see it.
    """

    def __init__(self) -> None:
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return "recent (bash-like)", "Behave like bash"

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        snapshot = self.snapshots.setdefault(record.session_id, self.histfile)
        return [*self.history.get(record.session_id, []), *snapshot]

    def add_history_record(self, record: EnrichedRecord) -> None:
        session_id = record.session_id
        session_history = push_recent(self.history.get(session_id, []), record.cmd_line)

        if record.last_record_of_session:
            # histfile is rebound, never mutated, so older snapshots stay frozen
            self.histfile = (*session_history, *self.histfile)
            self.snapshots.pop(session_id, None)
            self.history.pop(session_id, None)
            return
        self.history[session_id] = session_history

    def reset_history(self) -> None:
        self.histfile: tuple[str, ...] = ()
        self.snapshots: dict[str, tuple[str, ...]] = {}
        self.history: dict[str, list[str]] = {}
