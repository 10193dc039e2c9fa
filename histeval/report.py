from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from histeval.types import EvaluationReport, StrategyResult, StrategySummary

logger = logging.getLogger(__name__)


def dump_report(report: EvaluationReport) -> str:
    return report.model_dump_json(by_alias=True)


def write_report(report: EvaluationReport, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_report(report), encoding="utf-8")
    logger.info("Wrote evaluation report to %s", output_path)


def load_report(path: Path) -> EvaluationReport:
    return EvaluationReport.model_validate_json(path.read_text(encoding="utf-8"))


def run_plotting_script(report: EvaluationReport, command: str) -> int | None:
    """Stream the report to an external statistics/plotting command.

    Failures are logged and never raised: scoring is complete by now. Returns
    the command's exit code, or None when it could not be started.
    """
    try:
        completed = subprocess.run(
            [command],
            input=dump_report(report),
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.error("Could not run plotting command %s: %s", command, exc)
        return None

    if completed.returncode != 0:
        logger.error("Plotting command %s finished with exit code %d", command, completed.returncode)
    return completed.returncode


def summarize(result: StrategyResult, ks: Sequence[int]) -> StrategySummary:
    """Exact hit rate and mean recalled characters within the top k candidates."""
    queries = len(result.matches)
    hit_rate_at: dict[int, float] = {}
    chars_recalled_at: dict[int, float] = {}
    for k in ks:
        hits = sum(1 for match in result.matches if match.match and match.rank <= k)
        recalled = 0
        for prefix_match in result.prefix_matches:
            # entries improve monotonically with rank, so the last one within k is the best
            within_k = [entry.chars_recalled for entry in prefix_match.entries if entry.rank <= k]
            if within_k:
                recalled += within_k[-1]
        hit_rate_at[k] = hits / queries if queries else 0.0
        chars_recalled_at[k] = recalled / queries if queries else 0.0

    return StrategySummary(
        title=result.title,
        description=result.description,
        queries=queries,
        hit_rate_at=hit_rate_at,
        chars_recalled_at=chars_recalled_at,
    )
