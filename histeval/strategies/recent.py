from __future__ import annotations

from histeval.records import EnrichedRecord
from histeval.strategies.base import SimpleStrategy, push_recent


class RecentStrategy(SimpleStrategy):
    """Most recently used command lines, each listed once."""

    def __init__(self) -> None:
        self.history: list[str] = []

    def get_title_and_description(self) -> tuple[str, str]:
        return "recent", "Use recent commands"

    def get_candidates(self) -> list[str]:
        return list(self.history)

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.history = push_recent(self.history, record.cmd_line)

    def reset_history(self) -> None:
        self.history = []
