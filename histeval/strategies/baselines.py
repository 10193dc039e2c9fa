from __future__ import annotations

import random

from histeval.records import EnrichedRecord
from histeval.strategies.base import SimpleStrategy


class FrequentStrategy(SimpleStrategy):
    """Most frequently used command lines, most recent first among equals."""

    def __init__(self) -> None:
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return "frequent", "Use frequent commands"

    def get_candidates(self) -> list[str]:
        return sorted(
            self.counts,
            key=lambda cmd_line: (self.counts[cmd_line], self.last_seen[cmd_line]),
            reverse=True,
        )

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.clock += 1
        self.counts[record.cmd_line] = self.counts.get(record.cmd_line, 0) + 1
        self.last_seen[record.cmd_line] = self.clock

    def reset_history(self) -> None:
        self.clock = 0
        self.counts: dict[str, int] = {}
        self.last_seen: dict[str, int] = {}


class RandomStrategy(SimpleStrategy):
    """Uniformly random sample of previously seen command lines."""

    def __init__(self, candidates_size: int = 50, seed: int | None = None) -> None:
        if candidates_size <= 0:
            raise ValueError("candidates_size must be > 0")
        self.candidates_size = candidates_size
        self.rng = random.Random(seed)
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return "random", "Use random commands"

    def get_candidates(self) -> list[str]:
        size = min(self.candidates_size, len(self.history))
        return self.rng.sample(self.history, size)

    def add_history_record(self, record: EnrichedRecord) -> None:
        if record.cmd_line not in self.seen:
            self.seen.add(record.cmd_line)
            self.history.append(record.cmd_line)

    def reset_history(self) -> None:
        self.history: list[str] = []
        self.seen: set[str] = set()
