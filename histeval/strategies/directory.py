from __future__ import annotations

from histeval.records import EnrichedRecord
from histeval.strategies.base import Strategy, push_recent


class DirectorySensitiveStrategy(Strategy):
    """Recent commands from the query's working directory first.

    Falls back to global recency for everything not yet run there.
    """

    def __init__(self) -> None:
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return "directory sensitive (recent)", "Use recent commands executed in the same directory"

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        local = self.history_by_pwd.get(record.pwd, [])
        seen = set(local)
        return [*local, *(cmd_line for cmd_line in self.history if cmd_line not in seen)]

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.history_by_pwd[record.pwd] = push_recent(
            self.history_by_pwd.get(record.pwd, []), record.cmd_line
        )
        self.history = push_recent(self.history, record.cmd_line)

    def reset_history(self) -> None:
        self.history_by_pwd: dict[str, list[str]] = {}
        self.history: list[str] = []
