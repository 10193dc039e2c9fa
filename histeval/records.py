from __future__ import annotations

import re
import shlex

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from histeval.errors import RecordError

_ASSIGNMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")

# Fields that reveal the outcome of the command being predicted.
_STRIPPED_FIELDS = {
    "cmd_line": "",
    "cmd_length": 0,
    "exit_code": 0,
    "pwd_after": "",
    "real_pwd_after": "",
    "git_dir_after": "",
    "git_real_dir_after": "",
    "git_origin_remote_after": "",
    "realtime_after": 0.0,
    "realtime_after_local": 0.0,
    "realtime_duration": 0.0,
    "timezone_after": "",
    "command": "",
    "first_word": "",
    "invalid": False,
    "last_record_of_session": False,
}


class _BaseRecord(BaseModel):
    """Fields shared by every shape of a recorded command."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    cmd_line: str = ""
    exit_code: int = 0
    shell: str = ""
    uname: str = ""
    session_id: str = ""

    home: str = ""
    lang: str = ""
    lc_all: str = ""
    login: str = ""
    pwd: str = ""
    pwd_after: str = ""
    shell_env: str = ""
    term: str = ""

    real_pwd: str = ""
    real_pwd_after: str = ""
    pid: int = 0
    session_pid: int = 0
    host: str = ""
    hosttype: str = ""
    ostype: str = ""
    machtype: str = ""
    shlvl: int = 0

    timezone_before: str = ""
    timezone_after: str = ""

    realtime_before: float = 0.0
    realtime_after: float = 0.0
    realtime_before_local: float = 0.0
    realtime_after_local: float = 0.0
    realtime_duration: float = 0.0
    realtime_since_session_start: float = 0.0
    realtime_since_boot: float = 0.0

    git_dir: str = ""
    git_real_dir: str = ""
    git_origin_remote: str = ""
    git_dir_after: str = ""
    git_real_dir_after: str = ""
    git_origin_remote_after: str = ""
    machine_id: str = ""

    os_release_id: str = ""
    os_release_version_id: str = ""
    os_release_id_like: str = ""
    os_release_name: str = ""
    os_release_pretty_name: str = ""

    resh_uuid: str = ""
    resh_version: str = ""
    resh_revision: str = ""

    sanitized: bool = False
    cmd_length: int = 0


class Record(_BaseRecord):
    """Current on-disk shape of a recorded command."""

    cols: str = ""
    lines: str = ""


class FallbackRecord(_BaseRecord):
    """Legacy shape where terminal size was stored as integers."""

    cols: int = 0
    lines: int = 0

    def to_record(self) -> Record:
        payload = self.model_dump()
        payload["cols"] = str(self.cols)
        payload["lines"] = str(self.lines)
        return Record.model_validate(payload)


class EnrichedRecord(Record):
    """Record with the fields derived at load and preprocessing time."""

    command: str = ""
    first_word: str = ""
    invalid: bool = False
    errors: list[str] = Field(default_factory=list)
    seq_session_id: int = 0
    last_record_of_session: bool = False
    debug_this_record: bool = False


def split_command(cmd_line: str) -> tuple[str, str, str | None]:
    """Return (command, first word, parse error) for a command line.

    The command is the first word that is not a ``NAME=value`` assignment.
    """
    words = cmd_line.split()
    first_word = words[0] if words else ""
    try:
        tokens = shlex.split(cmd_line)
    except ValueError as exc:
        return first_word, first_word, str(exc)

    for token in tokens:
        if not _ASSIGNMENT.match(token):
            return token, first_word, None
    return "", first_word, None


def normalize_record(record: Record, sanitized_input: bool) -> Record:
    """Validate a decoded record against the loader mode and fill cmd_length."""
    if record.sanitized != sanitized_input:
        if sanitized_input:
            raise RecordError("input is declared sanitized but the record is not sanitized")
        raise RecordError("record is sanitized but the input is not declared sanitized")

    if not sanitized_input:
        if record.cmd_length != 0:
            raise RecordError("cmdLength is set in raw data; is this sanitized input?")
        record = record.model_copy(update={"cmd_length": len(record.cmd_line)})

    if record.cmd_length == 0:
        raise RecordError(f"cmdLength is unset for record in session {record.session_id!r}")
    return record


def enrich(record: Record) -> EnrichedRecord:
    """Derive command tokens for a record."""
    payload = record.model_dump()
    command, first_word, error = split_command(record.cmd_line)
    errors = [] if error is None else [f"failed to parse command line: {error}"]
    payload.update(
        command=command,
        first_word=first_word,
        invalid=error is not None,
        errors=errors,
    )
    return EnrichedRecord.model_validate(payload)


def stripped(record: EnrichedRecord) -> EnrichedRecord:
    """Copy of a record with everything known only after execution withheld."""
    return record.model_copy(update=dict(_STRIPPED_FIELDS, errors=[]))


def describe(record: EnrichedRecord) -> str:
    return record.model_dump_json(by_alias=True, indent=2)
