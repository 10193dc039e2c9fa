"""Strategy contracts.

A strategy proposes a ranked list of command lines, most likely first, and
learns from each executed record after it has been asked about it.
Context-free strategies ignore the query record; ``SimpleStrategyWrapper``
lifts them into the context-aware contract the evaluator drives.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from histeval.records import EnrichedRecord


class SimpleStrategy(ABC):
    """Strategy whose candidates do not depend on the query record."""

    @abstractmethod
    def get_title_and_description(self) -> tuple[str, str]: ...

    @abstractmethod
    def get_candidates(self) -> list[str]: ...

    @abstractmethod
    def add_history_record(self, record: EnrichedRecord) -> None: ...

    @abstractmethod
    def reset_history(self) -> None: ...


class Strategy(ABC):
    """Strategy that ranks candidates for a stripped query record."""

    @abstractmethod
    def get_title_and_description(self) -> tuple[str, str]: ...

    @abstractmethod
    def get_candidates(self, record: EnrichedRecord) -> list[str]: ...

    @abstractmethod
    def add_history_record(self, record: EnrichedRecord) -> None: ...

    @abstractmethod
    def reset_history(self) -> None: ...


class SimpleStrategyWrapper(Strategy):
    def __init__(self, strategy: SimpleStrategy) -> None:
        self.strategy = strategy

    def get_title_and_description(self) -> tuple[str, str]:
        return self.strategy.get_title_and_description()

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        return self.strategy.get_candidates()

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.strategy.add_history_record(record)

    def reset_history(self) -> None:
        self.strategy.reset_history()


def as_strategy(strategy: Strategy | SimpleStrategy) -> Strategy:
    if isinstance(strategy, SimpleStrategy):
        return SimpleStrategyWrapper(strategy)
    return strategy


def push_recent(history: list[str], cmd_line: str) -> list[str]:
    """Return ``history`` with ``cmd_line`` moved (or added) to the front."""
    return [cmd_line, *(item for item in history if item != cmd_line)]
