from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from histeval.records import EnrichedRecord, Record, enrich

RecordFactory = Callable[..., EnrichedRecord]

_ENRICHED_ONLY = set(EnrichedRecord.model_fields) - set(Record.model_fields)


@pytest.fixture
def make_record() -> RecordFactory:
    """Build an enriched record; realtime_before advances with every call."""
    clock = {"now": 1_700_000_000.0}

    def _make(cmd_line: str, session_id: str = "s1", **fields: Any) -> EnrichedRecord:
        clock["now"] += 10.0
        enriched = {name: fields.pop(name) for name in list(fields) if name in _ENRICHED_ONLY}
        fields.setdefault("realtime_before", clock["now"])
        fields.setdefault("pwd", "/home/dev")
        fields.setdefault("real_pwd", fields["pwd"])
        record = enrich(Record(cmd_line=cmd_line, session_id=session_id, cmd_length=len(cmd_line), **fields))
        return record.model_copy(update=enriched)

    return _make
