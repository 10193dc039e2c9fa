from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from histeval.records import EnrichedRecord


class _ReportModel(BaseModel):
    """Serialized with the PascalCase keys the plotting script reads."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class Match(_ReportModel):
    """Exact-match outcome for a single query."""

    match: bool = False
    rank: int = Field(default=0, alias="Distance")
    chars_recalled: int = 0


class MultiMatchItem(_ReportModel):
    """Prefix improvement found at a given rank."""

    rank: int = Field(default=0, alias="Distance")
    chars_recalled: int = 0


class MultiMatch(_ReportModel):
    """Every strictly improving prefix match for a single query."""

    match: bool = False
    entries: list[MultiMatchItem] = Field(default_factory=list)


class StrategyResult(_ReportModel):
    """Per-query outcomes accumulated for one strategy run."""

    title: str
    description: str
    matches: list[Match] = Field(default_factory=list)
    prefix_matches: list[MultiMatch] = Field(default_factory=list)


class DeviceRecords(_ReportModel):
    name: str = ""
    records: list[EnrichedRecord] = Field(default_factory=list)


class UserRecords(_ReportModel):
    name: str = ""
    devices: list[DeviceRecords] = Field(default_factory=list)


class EvaluationReport(_ReportModel):
    """Complete evaluation handed to the report sink."""

    batch_mode: bool = False
    users_records: list[UserRecords] = Field(default_factory=list)
    strategies: list[StrategyResult] = Field(default_factory=list)


class StrategySummary(BaseModel):
    """Aggregate statistics derived from a strategy result."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: str
    queries: int
    hit_rate_at: dict[int, float]
    chars_recalled_at: dict[int, float]
