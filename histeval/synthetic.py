from __future__ import annotations

import random
from pathlib import Path

from histeval.records import Record

_HOME = "/home/dev"

_PROJECTS = [
    {
        "pwd": f"{_HOME}/src/api",
        "remote": "git@github.com:example/api.git",
        "commands": [
            "git status",
            "git pull",
            "git diff",
            "pytest -q",
            "pytest -q tests/test_routes.py",
            "make lint",
            "docker compose up -d",
            "vim app/routes.py",
        ],
    },
    {
        "pwd": f"{_HOME}/src/web",
        "remote": "git@github.com:example/web.git",
        "commands": [
            "git status",
            "git log --oneline -5",
            "npm run dev",
            "npm test",
            "npm install",
            "code .",
        ],
    },
    {
        "pwd": f"{_HOME}/notes",
        "remote": "",
        "commands": [
            "ls -la",
            "vim todo.md",
            "grep -ri deadline .",
            "cat todo.md",
        ],
    },
]

_GLOBAL_COMMANDS = ["ls", "htop", "df -h", "history | tail"]


def _sample_command(project: dict, rng: random.Random) -> tuple[str, int]:
    draw = rng.random()
    if draw < 0.75:
        # a small head of commands dominates, as in real shell use
        commands = project["commands"]
        index = min(int(rng.expovariate(0.6)), len(commands) - 1)
        return commands[index], 0
    if draw < 0.92:
        return rng.choice(_GLOBAL_COMMANDS), 0
    return rng.choice(["gti status", "pyest", "claer"]), 127


def _session_records(
    rng: random.Random,
    session_id: str,
    start: float,
    commands: int,
) -> list[Record]:
    project = rng.choice(_PROJECTS)
    records: list[Record] = []
    now = start
    pwd = _HOME
    for index in range(commands):
        if index == 0:
            cmd_line, exit_code = f"cd {project['pwd']}", 0
            pwd_after = project["pwd"]
        else:
            cmd_line, exit_code = _sample_command(project, rng)
            pwd_after = pwd
        in_repo = pwd == project["pwd"] and project["remote"]
        duration = rng.uniform(0.05, 4.0)
        records.append(
            Record(
                cmd_line=cmd_line,
                exit_code=exit_code,
                shell="bash",
                session_id=session_id,
                home=_HOME,
                pwd=pwd,
                pwd_after=pwd_after,
                real_pwd=pwd,
                real_pwd_after=pwd_after,
                realtime_before=now,
                realtime_after=now + duration,
                realtime_before_local=now,
                realtime_after_local=now + duration,
                realtime_duration=duration,
                git_dir=project["pwd"] if in_repo else "",
                git_real_dir=project["pwd"] if in_repo else "",
                git_origin_remote=project["remote"] if in_repo else "",
                cols="120",
                lines="40",
            )
        )
        pwd = pwd_after
        now += duration + rng.uniform(2.0, 90.0)
    return records


def generate_synthetic_history(
    output_path: Path,
    sessions: int,
    seed: int = 42,
    commands_per_session: tuple[int, int] = (5, 40),
) -> int:
    """Write a raw JSONL history of interleaved sessions; returns the record count."""
    if sessions <= 0:
        raise ValueError("sessions must be > 0")

    rng = random.Random(seed)
    start = 1_700_000_000.0
    streams: list[list[Record]] = []
    for _ in range(sessions):
        session_id = f"{rng.getrandbits(64):016x}"
        start += rng.uniform(600.0, 7200.0)
        length = rng.randint(*commands_per_session)
        streams.append(_session_records(rng, session_id, start, length))

    # sessions overlap in time, so order all records by start time
    records = sorted((record for stream in streams for record in stream), key=lambda r: r.realtime_before)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        for record in records:
            handle.write(record.model_dump_json(by_alias=True) + "\n")
    return len(records)
