"""Note event reporting for confidential asset receipts."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from zkdeploy.core.types import LogEntry, NoteEvent, NoteEventKind

logger = logging.getLogger(__name__)

LINE_BREAK = "_" * 72

_NOTE_EVENTS = {kind.value: kind for kind in NoteEventKind}


def _to_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def extract_note_events(logs: Iterable[LogEntry]) -> list[NoteEvent]:
    """Project CreateNote / DestroyNote logs, in log order. Others are dropped."""
    records: list[NoteEvent] = []
    for entry in logs:
        kind = _NOTE_EVENTS.get(entry.event or "")
        if kind is None:
            continue
        records.append(
            NoteEvent(
                event=kind,
                owner=_to_text(entry.args.get("owner", "")),
                hash=_to_text(entry.args.get("noteHash", "")),
            )
        )
    return records


def format_note_event(record: NoteEvent) -> str:
    return json.dumps(record.to_display(), indent=2)


def report_note_events(logs: Iterable[LogEntry], title: str = "") -> list[NoteEvent]:
    """Log every note event found in ``logs`` and return the records."""
    records = extract_note_events(logs)
    if title:
        logger.info("%s success. events:", title)
    for record in records:
        logger.info(format_note_event(record))
    return records
