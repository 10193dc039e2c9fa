from __future__ import annotations

from dataclasses import dataclass

from histeval.records import EnrichedRecord
from histeval.strategies.base import Strategy, push_recent


@dataclass
class _Follower:
    count: int = 0
    last_seen: int = 0


class MarkovChainStrategy(Strategy):
    """N-gram model over the command lines of each session.

    The last ``order`` command lines of the query's session form the
    context; candidates are whatever followed that context before, most
    frequent first and most recent first among equals.
    """

    def __init__(self, order: int = 1) -> None:
        if order not in (1, 2):
            raise ValueError("order must be 1 or 2")
        self.order = order
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return f"markov chain (order {self.order})", "Use markov chain to recommend commands"

    def token(self, record: EnrichedRecord) -> str:
        return record.cmd_line

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        context = self.contexts.get(record.session_id, ())
        if len(context) < self.order:
            return []
        followers = self.transitions.get(context, {})
        ranked = sorted(
            followers.items(),
            key=lambda item: (item[1].count, item[1].last_seen),
            reverse=True,
        )
        return self.expand([token for token, _ in ranked])

    def expand(self, tokens: list[str]) -> list[str]:
        return tokens

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.clock += 1
        token = self.token(record)
        context = self.contexts.get(record.session_id, ())
        if len(context) == self.order:
            follower = self.transitions.setdefault(context, {}).setdefault(token, _Follower())
            follower.count += 1
            follower.last_seen = self.clock

        if record.last_record_of_session:
            self.contexts.pop(record.session_id, None)
        else:
            self.contexts[record.session_id] = (*context, token)[-self.order :]

    def reset_history(self) -> None:
        self.clock = 0
        self.contexts: dict[str, tuple[str, ...]] = {}
        self.transitions: dict[tuple[str, ...], dict[str, _Follower]] = {}


class MarkovChainCmdStrategy(MarkovChainStrategy):
    """Markov chain over command names, expanded back into full command lines.

    Each predicted command is replaced by the command lines that used it,
    most recent first.
    """

    def get_title_and_description(self) -> tuple[str, str]:
        return (
            f"command-based markov chain (order {self.order})",
            "Use command-based markov chain to recommend commands",
        )

    def token(self, record: EnrichedRecord) -> str:
        return record.command

    def expand(self, tokens: list[str]) -> list[str]:
        candidates: list[str] = []
        for token in tokens:
            candidates.extend(self.cmd_lines.get(token, []))
        return candidates

    def add_history_record(self, record: EnrichedRecord) -> None:
        super().add_history_record(record)
        self.cmd_lines[record.command] = push_recent(
            self.cmd_lines.get(record.command, []), record.cmd_line
        )

    def reset_history(self) -> None:
        super().reset_history()
        self.cmd_lines: dict[str, list[str]] = {}
