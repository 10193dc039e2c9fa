"""Replays recorded history through strategies and scores their predictions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from histeval.config import EvaluationConfig
from histeval.errors import StrategyError
from histeval.loader import load_batch, load_single_file
from histeval.preprocess import preprocess_users
from histeval.records import EnrichedRecord, describe, stripped
from histeval.strategies.base import Strategy
from histeval.types import EvaluationReport, Match, MultiMatch, MultiMatchItem, StrategyResult, UserRecords
from histeval.utils import common_prefix_length

logger = logging.getLogger(__name__)


def score_candidates(
    candidates: Sequence[str],
    cmd_line: str,
    cmd_length: int,
    scan_limit: int | None = None,
) -> tuple[Match, MultiMatch]:
    """Score a ranked candidate list against the command actually run.

    Scans front to back. Every candidate that extends the longest common
    prefix seen so far adds a prefix entry at its 1-based rank; the first
    exact match is recorded and ends the scan.
    """
    prefix_match = MultiMatch()
    longest_prefix = 0
    for index, candidate in enumerate(candidates):
        if scan_limit is not None and index >= scan_limit:
            break
        rank = index + 1
        prefix_length = common_prefix_length(candidate, cmd_line)
        if prefix_length > longest_prefix:
            longest_prefix = prefix_length
            prefix_match.match = True
            prefix_match.entries.append(MultiMatchItem(rank=rank, chars_recalled=prefix_length))
        if candidate == cmd_line:
            return Match(match=True, rank=rank, chars_recalled=cmd_length), prefix_match
    return Match(), prefix_match


class Evaluator:
    """Drives strategies, one at a time, over every loaded device."""

    def __init__(
        self,
        users_records: list[UserRecords],
        config: EvaluationConfig | None = None,
        batch_mode: bool = False,
        console: Console | None = None,
    ) -> None:
        self.config = config or EvaluationConfig()
        self.batch_mode = batch_mode
        self.console = console or Console(stderr=True)
        self.users_records = preprocess_users(users_records, self.config)
        self.results: list[StrategyResult] = []

    @classmethod
    def from_file(cls, path: Path, config: EvaluationConfig | None = None, **kwargs) -> Evaluator:
        config = config or EvaluationConfig()
        return cls(load_single_file(path, config.sanitized_input), config, batch_mode=False, **kwargs)

    @classmethod
    def from_data_root(
        cls,
        data_root: Path,
        file_name: str,
        config: EvaluationConfig | None = None,
        **kwargs,
    ) -> Evaluator:
        config = config or EvaluationConfig()
        users = load_batch(data_root, file_name, config.sanitized_input)
        return cls(users, config, batch_mode=True, **kwargs)

    def evaluate(self, strategy: Strategy) -> StrategyResult:
        """Evaluate a single strategy over all devices and keep its result.

        Raises StrategyError when the strategy fails to take a record or to
        reset; nothing is kept for that strategy in that case.
        """
        title, description = strategy.get_title_and_description()
        logger.info("Evaluating strategy: %s - %s", title, description)
        result = StrategyResult(title=title, description=description)

        with self._progress() as progress:
            for user in self.users_records:
                for device in user.devices:
                    task = progress.add_task(
                        f"{title} {user.name}/{device.name}".rstrip("/ "),
                        total=len(device.records),
                    )
                    for _ in self._evaluate_device(strategy, device.records, result, title, description):
                        progress.advance(task)
                    strategy.reset_history()

        self.results.append(result)
        return result

    def _evaluate_device(
        self,
        strategy: Strategy,
        records: Iterable[EnrichedRecord],
        result: StrategyResult,
        title: str,
        description: str,
    ) -> Iterator[EnrichedRecord]:
        """Score each record in turn, yielding it once the strategy has learned it."""
        previous: EnrichedRecord | None = None
        for record in records:
            if self.config.skip_failed_cmds and record.exit_code != 0:
                yield record
                continue

            candidates = strategy.get_candidates(stripped(record))
            if record.debug_this_record:
                self._log_debug_record(title, description, previous, record, candidates)

            match, prefix_match = score_candidates(
                candidates,
                record.cmd_line,
                record.cmd_length,
                scan_limit=self.config.scan_limit,
            )
            result.matches.append(match)
            result.prefix_matches.append(prefix_match)

            strategy.add_history_record(record)
            previous = record
            yield record

    def run(self, strategies: Iterable[Strategy]) -> list[StrategyResult]:
        """Evaluate every strategy; a failing strategy is logged and skipped.

        Only StrategyError is contained. Any other exception is a bug in the
        strategy and aborts the run.
        """
        for strategy in strategies:
            try:
                self.evaluate(strategy)
            except StrategyError as exc:
                title, _ = strategy.get_title_and_description()
                logger.error("Evaluation of strategy %s abandoned: %s", title, exc)
        return self.results

    def report(self) -> EvaluationReport:
        return EvaluationReport(
            batch_mode=self.batch_mode,
            users_records=self.users_records,
            strategies=self.results,
        )

    def _progress(self) -> Progress:
        return Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            disable=not self.config.show_progress,
        )

    def _log_debug_record(
        self,
        title: str,
        description: str,
        previous: EnrichedRecord | None,
        record: EnrichedRecord,
        candidates: Sequence[str],
    ) -> None:
        logger.info("STRATEGY: %s - %s", title, description)
        logger.info("Previous record:\n%s", "== NIL" if previous is None else describe(previous))
        logger.info("Recommendations for:\n%s", describe(record))
        top = candidates[: self.config.debug_candidates]
        logger.info("Top %d candidates:\n%s", len(top), "\n".join(top))
