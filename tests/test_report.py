from __future__ import annotations

import json
import stat
from pathlib import Path

from histeval.report import dump_report, load_report, run_plotting_script, summarize, write_report
from histeval.types import (
    DeviceRecords,
    EvaluationReport,
    Match,
    MultiMatch,
    MultiMatchItem,
    StrategyResult,
    UserRecords,
)


def _result() -> StrategyResult:
    return StrategyResult(
        title="recent",
        description="Use recent commands",
        matches=[
            Match(match=True, rank=1, chars_recalled=2),
            Match(match=True, rank=4, chars_recalled=10),
            Match(),
            Match(),
        ],
        prefix_matches=[
            MultiMatch(match=True, entries=[MultiMatchItem(rank=1, chars_recalled=2)]),
            MultiMatch(
                match=True,
                entries=[
                    MultiMatchItem(rank=2, chars_recalled=3),
                    MultiMatchItem(rank=4, chars_recalled=10),
                ],
            ),
            MultiMatch(match=True, entries=[MultiMatchItem(rank=3, chars_recalled=4)]),
            MultiMatch(),
        ],
    )


def _report(make_record) -> EvaluationReport:
    device = DeviceRecords(name="laptop", records=[make_record("ls", session_id="s1")])
    return EvaluationReport(
        batch_mode=True,
        users_records=[UserRecords(name="alice", devices=[device])],
        strategies=[_result()],
    )


def test_report_uses_plotting_script_keys(make_record) -> None:
    payload = json.loads(dump_report(_report(make_record)))

    assert set(payload) == {"BatchMode", "UsersRecords", "Strategies"}
    strategy = payload["Strategies"][0]
    assert set(strategy) == {"Title", "Description", "Matches", "PrefixMatches"}
    assert strategy["Matches"][1] == {"Match": True, "Distance": 4, "CharsRecalled": 10}
    assert strategy["PrefixMatches"][1]["Entries"][0] == {"Distance": 2, "CharsRecalled": 3}
    record = payload["UsersRecords"][0]["Devices"][0]["Records"][0]
    assert record["cmdLine"] == "ls"
    assert record["sessionId"] == "s1"
    assert "lastRecordOfSession" in record


def test_written_report_loads_back(tmp_path: Path, make_record) -> None:
    report = _report(make_record)
    path = tmp_path / "out" / "report.json"
    write_report(report, path)

    loaded = load_report(path)
    assert loaded.strategies[0].model_dump() == report.strategies[0].model_dump()
    assert loaded.users_records[0].devices[0].records[0].cmd_line == "ls"


def test_summarize_hit_rates_and_recalled_chars() -> None:
    summary = summarize(_result(), [1, 3, 5])

    assert summary.queries == 4
    assert summary.hit_rate_at == {1: 0.25, 3: 0.25, 5: 0.5}
    assert summary.chars_recalled_at[1] == (2 + 0 + 0 + 0) / 4
    assert summary.chars_recalled_at[3] == (2 + 3 + 4 + 0) / 4
    assert summary.chars_recalled_at[5] == (2 + 10 + 4 + 0) / 4


def test_summarize_empty_result() -> None:
    summary = summarize(StrategyResult(title="t", description="d"), [1])
    assert summary.queries == 0
    assert summary.hit_rate_at == {1: 0.0}


def test_plotting_script_receives_report_on_stdin(tmp_path: Path, make_record) -> None:
    captured = tmp_path / "captured.json"
    script = tmp_path / "plot.sh"
    script.write_text(f"#!/bin/sh\ncat > {captured}\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IEXEC)

    assert run_plotting_script(_report(make_record), str(script)) == 0
    assert json.loads(captured.read_text(encoding="utf-8"))["BatchMode"] is True


def test_plotting_script_failures_are_not_raised(tmp_path: Path, make_record, caplog) -> None:
    assert run_plotting_script(_report(make_record), str(tmp_path / "missing-plot")) is None
    assert "Could not run plotting command" in caplog.text

    failing = tmp_path / "fail.sh"
    failing.write_text("#!/bin/sh\ncat > /dev/null\nexit 3\n", encoding="utf-8")
    failing.chmod(failing.stat().st_mode | stat.S_IEXEC)
    assert run_plotting_script(_report(make_record), str(failing)) == 3
    assert "exit code 3" in caplog.text
