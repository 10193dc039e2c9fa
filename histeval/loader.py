from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from histeval.errors import DataRootError, RecordError
from histeval.records import EnrichedRecord, FallbackRecord, Record, enrich, normalize_record
from histeval.types import DeviceRecords, UserRecords

logger = logging.getLogger(__name__)


def parse_record_line(line: str) -> Record:
    """Decode one JSON line, falling back to the legacy record shape."""
    try:
        return Record.model_validate_json(line)
    except ValidationError as primary_exc:
        try:
            fallback = FallbackRecord.model_validate_json(line)
        except ValidationError as exc:
            raise RecordError(
                f"cannot decode history record ({primary_exc.error_count()} errors): {line[:200]!r}"
            ) from exc
    return fallback.to_record()


def load_history_records(path: Path, sanitized_input: bool = False) -> list[EnrichedRecord]:
    """Load and enrich every record of a newline-delimited JSON history file."""
    records: list[EnrichedRecord] = []
    with path.open("rb") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            try:
                line = raw_line.decode("utf-8").strip()
            except UnicodeDecodeError as exc:
                raise RecordError(f"{path}:{line_number}: history record is not valid UTF-8: {exc}") from exc
            if not line:
                continue
            try:
                record = normalize_record(parse_record_line(line), sanitized_input)
            except RecordError as exc:
                raise RecordError(f"{path}:{line_number}: {exc}") from exc
            records.append(enrich(record))
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def load_single_file(path: Path, sanitized_input: bool = False) -> list[UserRecords]:
    """Treat a single history file as one implicit user with one device."""
    device = DeviceRecords(records=load_history_records(path, sanitized_input))
    return [UserRecords(devices=[device])]


def _subdirectories(path: Path) -> list[Path]:
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise DataRootError(f"could not read directory {path}: {exc}") from exc

    directories: list[Path] = []
    for entry in entries:
        if not entry.is_dir():
            logger.warning("Unexpected file (not a directory) %s - skipping", entry)
            continue
        directories.append(entry)
    return directories


def load_batch(data_root: Path, file_name: str, sanitized_input: bool = False) -> list[UserRecords]:
    """Load ``<data_root>/<user>/<device>/<file_name>`` for every user and device.

    Devices without a matching file are kept with no records.
    """
    if not data_root.exists():
        raise DataRootError(f"directory {data_root} does not exist")
    if not data_root.is_dir():
        raise DataRootError(f"{data_root} is not a directory")

    logger.info("Listing users in %s", data_root)
    users: list[UserRecords] = []
    for user_dir in _subdirectories(data_root):
        user = UserRecords(name=user_dir.name)
        for device_dir in _subdirectories(user_dir):
            device = DeviceRecords(name=device_dir.name)
            history_path = device_dir / file_name
            if history_path.is_file():
                device.records = load_history_records(history_path, sanitized_input)
            else:
                logger.warning("No %s for %s/%s", file_name, user_dir.name, device_dir.name)
            user.devices.append(device)
        users.append(user)
    return users
