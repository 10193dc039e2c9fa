"""Session bookkeeping passes over a device's record list.

Every pass returns a new list of new records; the input is never mutated,
so the same loaded records can be reused across strategy runs.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from histeval.config import EvaluationConfig
from histeval.records import EnrichedRecord
from histeval.types import DeviceRecords, UserRecords

logger = logging.getLogger(__name__)


def assign_session_ids(records: Sequence[EnrichedRecord]) -> list[EnrichedRecord]:
    """Number sessions densely in first-seen order, starting at 1."""
    session_ids: dict[str, int] = {}
    result: list[EnrichedRecord] = []
    for record in records:
        seq_id = session_ids.setdefault(record.session_id, len(session_ids) + 1)
        result.append(record.model_copy(update={"seq_session_id": seq_id}))
    return result


def mark_session_ends(records: Sequence[EnrichedRecord]) -> list[EnrichedRecord]:
    """Flag the chronologically last record of every session."""
    seen: set[str] = set()
    result: list[EnrichedRecord] = []
    for record in reversed(records):
        is_last = record.session_id not in seen
        seen.add(record.session_id)
        result.append(record.model_copy(update={"last_record_of_session": is_last}))
    result.reverse()
    return result


def sample_debug_records(
    records: Sequence[EnrichedRecord],
    rate: float,
    rng: random.Random,
) -> list[EnrichedRecord]:
    """Mark a Bernoulli sample of records for verbose inspection."""
    if rate <= 0:
        return list(records)
    return [
        record.model_copy(update={"debug_this_record": True}) if rng.random() < rate else record
        for record in records
    ]


def preprocess_device(
    device: DeviceRecords,
    config: EvaluationConfig,
    rng: random.Random,
) -> DeviceRecords:
    records = assign_session_ids(device.records)
    records = mark_session_ends(records)
    records = sample_debug_records(records, config.debug_records, rng)
    return DeviceRecords(name=device.name, records=records)


def preprocess_users(users: Sequence[UserRecords], config: EvaluationConfig) -> list[UserRecords]:
    rng = random.Random(config.seed)
    result: list[UserRecords] = []
    for user in users:
        devices = [preprocess_device(device, config, rng) for device in user.devices]
        for device in devices:
            sessions = sum(1 for record in device.records if record.last_record_of_session)
            logger.debug(
                "Preprocessed %s/%s: %d records in %d sessions",
                user.name or "-",
                device.name or "-",
                len(device.records),
                sessions,
            )
        result.append(UserRecords(name=user.name, devices=devices))
    return result
