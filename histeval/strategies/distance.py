from __future__ import annotations

from collections import Counter, deque
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from histeval.records import EnrichedRecord
from histeval.strategies.base import Strategy

SECONDS_PER_HOUR = 3600.0


class DistParams(BaseModel):
    """Weight of each feature in the record distance."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pwd: float = 0.0
    real_pwd: float = 0.0
    session_id: float = 0.0
    time: float = 0.0
    git: float = 0.0


def record_distance(
    candidate: EnrichedRecord,
    query: EnrichedRecord,
    params: DistParams,
    *,
    include_git: bool = False,
) -> float:
    """Weighted sum of feature distances; 0 means identical context."""
    distance = 0.0
    if candidate.pwd != query.pwd:
        distance += params.pwd
    if candidate.real_pwd != query.real_pwd:
        distance += params.real_pwd
    if candidate.session_id != query.session_id:
        distance += params.session_id
    if params.time:
        elapsed_hours = abs(query.realtime_before - candidate.realtime_before) / SECONDS_PER_HOUR
        distance += params.time * elapsed_hours
    if include_git and candidate.git_origin_remote != query.git_origin_remote:
        distance += params.git
    return distance


class RecordDistanceStrategy(Strategy):
    """Ranks recent command lines by how similar their context is to the query."""

    include_git: ClassVar[bool] = False
    description: ClassVar[str] = "Use record distance to recommend commands"

    def __init__(self, dist_params: DistParams, max_depth: int = 3000, label: str = "") -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.dist_params = dist_params
        self.max_depth = max_depth
        self.label = label
        self.reset_history()

    def get_title_and_description(self) -> tuple[str, str]:
        return f"{self._title_prefix()} (depth:{self.max_depth};{self.label})", self.description

    def _title_prefix(self) -> str:
        return "record distance"

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        params = self._params_for(record)
        # history is most recent first and sorted() is stable, so ties favour recency
        scored = sorted(
            (
                (record_distance(past, record, params, include_git=self.include_git), past.cmd_line)
                for past in self.history
            ),
            key=lambda item: item[0],
        )
        candidates: list[str] = []
        seen: set[str] = set()
        for _, cmd_line in scored:
            if cmd_line in seen:
                continue
            seen.add(cmd_line)
            candidates.append(cmd_line)
        return candidates

    def _params_for(self, record: EnrichedRecord) -> DistParams:
        return self.dist_params

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.history.appendleft(record)

    def reset_history(self) -> None:
        self.history: deque[EnrichedRecord] = deque(maxlen=self.max_depth or None)


class DynamicRecordDistanceStrategy(RecordDistanceStrategy):
    """Record distance whose categorical weights follow the query's familiarity.

    Each of the pwd, real pwd and git weights is scaled by the share of past
    records within the lookback window carrying the query's value, so a directory or repository the user
    keeps returning to pulls harder than one visited once. Git remote
    equality only takes part in this variant.
    """

    include_git: ClassVar[bool] = True
    description: ClassVar[str] = "Use record distance with familiarity-scaled weights to recommend commands"

    def _title_prefix(self) -> str:
        return "dynamic record distance"

    def _params_for(self, record: EnrichedRecord) -> DistParams:
        if not self.seen:
            return self.dist_params
        return self.dist_params.model_copy(
            update={
                "pwd": self.dist_params.pwd * self._familiarity(self.pwd_counts, record.pwd),
                "real_pwd": self.dist_params.real_pwd
                * self._familiarity(self.real_pwd_counts, record.real_pwd),
                "git": self.dist_params.git
                * self._familiarity(self.git_counts, record.git_origin_remote),
            }
        )

    def _familiarity(self, counts: Counter[str], value: str) -> float:
        return counts[value] / self.seen

    def add_history_record(self, record: EnrichedRecord) -> None:
        # counters describe the same window as the lookback
        if self.history.maxlen is not None and len(self.history) == self.history.maxlen:
            self._count(self.history[-1], -1)
        super().add_history_record(record)
        self._count(record, 1)

    def _count(self, record: EnrichedRecord, delta: int) -> None:
        self.seen += delta
        self.pwd_counts[record.pwd] += delta
        self.real_pwd_counts[record.real_pwd] += delta
        self.git_counts[record.git_origin_remote] += delta

    def reset_history(self) -> None:
        super().reset_history()
        self.seen = 0
        self.pwd_counts: Counter[str] = Counter()
        self.real_pwd_counts: Counter[str] = Counter()
        self.git_counts: Counter[str] = Counter()
