"""Read script CSVs and validate rows into ScriptRow values."""

import csv
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from script_voicer.constants import (
    COL_CHARACTER,
    COL_EMOTION,
    COL_SHOT,
    COL_TEXT,
    COL_VOICE_ID,
    REQUIRED_COLUMNS,
)
from script_voicer.models import ScriptRow


@dataclass(frozen=True)
class SkippedRecord:
    line: int                      # file line for records from read_script(), else 1-based position
    missing: tuple[str, ...]       # required columns that were blank
    record: dict


class ScriptRecord(dict):
    """A CSV record that remembers the file line it was read from."""

    def __init__(self, values, line: int):
        super().__init__(values)
        self.line = line


@dataclass
class IngestReport:
    rows: list[ScriptRow] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.rows) + len(self.skipped)


def read_script(path: str) -> list[ScriptRecord]:
    """Read a header-keyed CSV file into a list of dicts.

    Tolerates a UTF-8 BOM and skips lines with no values at all. Each record
    keeps its file line number (header is line 1) in ``.line``.
    """
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        records = []
        for record in reader:
            if not any((v or "").strip() for v in record.values() if isinstance(v, str)):
                continue
            records.append(ScriptRecord(record, line=reader.line_num))
    return records


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_record(record: Mapping) -> dict:
    """Trim every known column; absent columns become empty strings."""
    return {
        COL_SHOT: _clean(record.get(COL_SHOT)),
        COL_CHARACTER: _clean(record.get(COL_CHARACTER)),
        COL_VOICE_ID: _clean(record.get(COL_VOICE_ID)),
        COL_TEXT: _clean(record.get(COL_TEXT)),
        COL_EMOTION: _clean(record.get(COL_EMOTION)),
    }


def inspect_records(records: Iterable[Mapping]) -> IngestReport:
    """Validate records and report which ones were dropped and why."""
    report = IngestReport()
    for position, record in enumerate(records, start=1):
        line = getattr(record, "line", position)
        clean = normalize_record(record)
        missing = tuple(col for col in REQUIRED_COLUMNS if not clean[col])
        if missing:
            report.skipped.append(SkippedRecord(line=line, missing=missing, record=dict(record)))
            continue
        report.rows.append(ScriptRow(
            shot=clean[COL_SHOT],
            character=clean[COL_CHARACTER],
            voice_id=clean[COL_VOICE_ID],
            text=clean[COL_TEXT],
            emotion=clean[COL_EMOTION] or None,
        ))
    return report


def ingest(records: Iterable[Mapping]) -> list[ScriptRow]:
    """Return the accepted rows, in input order.

    A record is kept only if Character, voice_id and text are non-empty after
    trimming. Everything else is dropped without comment so one malformed row
    never blocks the rest of the script.
    """
    return inspect_records(records).rows
