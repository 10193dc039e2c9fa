from __future__ import annotations

import logging

import pytest

from histeval.config import EvaluationConfig
from histeval.errors import StrategyError
from histeval.evaluator import Evaluator, score_candidates
from histeval.records import EnrichedRecord
from histeval.strategies import RecentStrategy, Strategy, as_strategy, default_strategies
from histeval.types import DeviceRecords, Match, MultiMatchItem, UserRecords


class RecordingStrategy(Strategy):
    def __init__(self) -> None:
        self.queries: list[EnrichedRecord] = []
        self.added: list[str] = []
        self.learned: list[str] = []
        self.resets = 0

    def get_title_and_description(self) -> tuple[str, str]:
        return "recording", "Remembers what it was asked"

    def get_candidates(self, record: EnrichedRecord) -> list[str]:
        self.queries.append(record)
        return list(reversed(self.added))

    def add_history_record(self, record: EnrichedRecord) -> None:
        self.added.append(record.cmd_line)
        self.learned.append(record.cmd_line)

    def reset_history(self) -> None:
        self.resets += 1
        self.added = []


class FailingStrategy(RecordingStrategy):
    def get_title_and_description(self) -> tuple[str, str]:
        return "failing", "Breaks on the second record"

    def add_history_record(self, record: EnrichedRecord) -> None:
        if self.added:
            raise StrategyError("history corrupted")
        super().add_history_record(record)


def _users(*devices: list[EnrichedRecord]) -> list[UserRecords]:
    return [
        UserRecords(
            name="user",
            devices=[DeviceRecords(name=f"device{index}", records=records) for index, records in enumerate(devices)],
        )
    ]


def test_exact_match_at_first_rank() -> None:
    match, prefix_match = score_candidates(["git status", "ls"], "git status", 10)
    assert match == Match(match=True, rank=1, chars_recalled=10)
    assert prefix_match.match is True
    assert prefix_match.entries == [MultiMatchItem(rank=1, chars_recalled=10)]


def test_partial_prefix_without_exact_match() -> None:
    match, prefix_match = score_candidates(["git s", "ls"], "git status", 10)
    assert match == Match()
    assert prefix_match.match is True
    assert prefix_match.entries == [MultiMatchItem(rank=1, chars_recalled=5)]


def test_prefix_entries_improve_until_exact_match() -> None:
    candidates = ["ls", "git", "gi", "git status", "git status --short"]
    match, prefix_match = score_candidates(candidates, "git status", 10)
    assert match == Match(match=True, rank=4, chars_recalled=10)
    assert prefix_match.entries == [
        MultiMatchItem(rank=2, chars_recalled=3),
        MultiMatchItem(rank=4, chars_recalled=10),
    ]


def test_scan_limit_caps_inspected_candidates() -> None:
    match, prefix_match = score_candidates(["ls", "git", "git status"], "git status", 10, scan_limit=2)
    assert match == Match()
    assert prefix_match.entries == [MultiMatchItem(rank=2, chars_recalled=3)]


def test_no_candidates_is_an_empty_outcome() -> None:
    match, prefix_match = score_candidates([], "ls", 2)
    assert match == Match()
    assert prefix_match.match is False
    assert prefix_match.entries == []


def test_recent_strategy_end_to_end_ranks(make_record) -> None:
    records = [
        make_record("ls", session_id="s1"),
        make_record("cd src", session_id="s1"),
        make_record("git status", session_id="s2"),
        make_record("ls", session_id="s2"),
        make_record("cd src", session_id="s3"),
        make_record("git status", session_id="s3"),
        make_record("make", session_id="s3"),
    ]
    evaluator = Evaluator(_users(records))
    result = evaluator.evaluate(as_strategy(RecentStrategy()))

    assert [match.match for match in result.matches] == [False, False, False, True, True, True, False]
    assert [match.rank for match in result.matches] == [0, 0, 0, 3, 3, 3, 0]
    assert [match.chars_recalled for match in result.matches] == [0, 0, 0, 2, 6, 10, 0]
    assert len(result.prefix_matches) == 7
    assert evaluator.results == [result]


def test_queries_are_stripped_and_history_is_complete(make_record) -> None:
    records = [make_record("ls", exit_code=0), make_record("make", exit_code=2)]
    strategy = RecordingStrategy()
    Evaluator(_users(records)).evaluate(strategy)

    assert [query.cmd_line for query in strategy.queries] == ["", ""]
    assert strategy.resets == 1


def test_failed_commands_are_skipped_when_configured(make_record) -> None:
    records = [
        make_record("ls"),
        make_record("mkae", exit_code=127),
        make_record("make"),
    ]
    strategy = RecordingStrategy()
    evaluator = Evaluator(_users(records), EvaluationConfig(skip_failed_cmds=True))
    result = evaluator.evaluate(strategy)

    assert strategy.learned == ["ls", "make"]
    assert len(strategy.queries) == 2
    assert len(result.matches) == 2
    assert len(result.prefix_matches) == 2


def test_failed_commands_are_scored_by_default(make_record) -> None:
    records = [make_record("ls"), make_record("mkae", exit_code=127)]
    result = Evaluator(_users(records)).evaluate(RecordingStrategy())
    assert len(result.matches) == 2


def test_history_is_reset_between_devices(make_record) -> None:
    strategy = RecordingStrategy()
    evaluator = Evaluator(_users([make_record("ls")], [make_record("ls")]))
    result = evaluator.evaluate(strategy)

    assert strategy.resets == 2
    # the second device must not see the first device's "ls"
    assert [match.match for match in result.matches] == [False, False]


def test_failing_strategy_is_abandoned_without_stopping_others(make_record, caplog) -> None:
    records = [make_record("ls"), make_record("ls")]
    evaluator = Evaluator(_users(records))

    with caplog.at_level(logging.ERROR):
        results = evaluator.run([FailingStrategy(), as_strategy(RecentStrategy())])

    assert [result.title for result in results] == ["recent"]
    assert results[0].matches[1] == Match(match=True, rank=1, chars_recalled=2)
    assert "failing" in caplog.text
    assert "history corrupted" in caplog.text


def test_debug_records_log_candidates(make_record, caplog) -> None:
    records = [make_record("ls"), make_record("make")]
    evaluator = Evaluator(_users(records), EvaluationConfig(debug_records=1.0, seed=1))

    with caplog.at_level(logging.INFO):
        result = evaluator.evaluate(as_strategy(RecentStrategy()))

    assert "Recommendations for" in caplog.text
    assert "== NIL" in caplog.text
    assert len(result.matches) == 2


def test_report_carries_preprocessed_records(make_record) -> None:
    records = [make_record("ls", session_id="x"), make_record("make", session_id="y")]
    evaluator = Evaluator(_users(records), batch_mode=True)
    evaluator.run([as_strategy(RecentStrategy())])
    report = evaluator.report()

    assert report.batch_mode is True
    device = report.users_records[0].devices[0]
    assert [record.seq_session_id for record in device.records] == [1, 2]
    assert [strategy.title for strategy in report.strategies] == ["recent"]


def test_evaluating_a_strategy_twice_gives_identical_results(make_record) -> None:
    sessions = [
        make_record("cd src", session_id="s1", pwd="/repo"),
        make_record("git status", session_id="s2", pwd="/repo"),
        make_record("make", session_id="s1", pwd="/repo/src"),
        make_record("git status", session_id="s1", pwd="/repo/src"),
        make_record("ls", session_id="s2", pwd="/repo"),
        make_record("make", session_id="s1", pwd="/repo/src"),
        make_record("git status", session_id="s2", pwd="/repo"),
    ]
    other_device = [make_record("make", session_id="t1"), make_record("ls", session_id="t1")]
    evaluator = Evaluator(_users(sessions, other_device))

    for strategy in default_strategies(slow=True):
        first = evaluator.evaluate(strategy)
        second = evaluator.evaluate(strategy)
        assert second.model_dump() == first.model_dump()


class BrokenStrategy(RecordingStrategy):
    def add_history_record(self, record: EnrichedRecord) -> None:
        raise KeyError(record.cmd_line)


def test_unexpected_strategy_errors_abort_the_run(make_record) -> None:
    evaluator = Evaluator(_users([make_record("ls")]))
    with pytest.raises(KeyError):
        evaluator.run([BrokenStrategy(), as_strategy(RecentStrategy())])
    assert evaluator.results == []
