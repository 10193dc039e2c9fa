from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_SUMMARY_KS = (1, 3, 5, 10, 50)


class EvaluationConfig(BaseModel):
    """Settings that control loading, preprocessing and scoring."""

    model_config = ConfigDict(extra="forbid")

    sanitized_input: bool = False
    skip_failed_cmds: bool = False
    debug_records: float = 0.0
    debug_candidates: int = 10
    scan_limit: int | None = None
    max_candidates: int = 50
    seed: int | None = None
    show_progress: bool = False

    @field_validator("debug_records", mode="before")
    @classmethod
    def _normalize_debug_records(cls, value: Any) -> float:
        if value in (None, ""):
            return 0.0
        rate = float(value)
        if not 0.0 <= rate <= 1.0:
            raise ValueError("debug_records must be a probability between 0 and 1")
        return rate

    @field_validator("scan_limit", mode="before")
    @classmethod
    def _normalize_scan_limit(cls, value: Any) -> int | None:
        if value in (None, "", 0):
            return None
        limit = int(value)
        if limit < 0:
            raise ValueError("scan_limit must be positive")
        return limit

    @field_validator("max_candidates", "debug_candidates")
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("candidate counts must be > 0")
        return value

    def summary_ks(self) -> list[int]:
        return sorted({k for k in DEFAULT_SUMMARY_KS if k < self.max_candidates} | {self.max_candidates})
