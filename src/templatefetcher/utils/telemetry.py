"""Lightweight telemetry events (opt-in)."""

from __future__ import annotations

import json
import os
import time
from collections import Counter
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator

import jsonschema

from templatefetcher.settings import RuntimeSettings

TELEMETRY_ENV = "TEMPLATEFETCHER_TELEMETRY"
TELEMETRY_FILE = "telemetry.jsonl"

_DISABLE_VALUES = {"0", "false", "no", "off"}

_TELEMETRY_VALIDATOR: jsonschema.protocols.Validator | None = None


def telemetry_enabled() -> bool:
    value = os.getenv(TELEMETRY_ENV, "1").lower()
    return value not in _DISABLE_VALUES


def record_event(
    settings: RuntimeSettings,
    event: str,
    payload: dict[str, Any] | None = None,
    *,
    level: str = "info",
    status: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled():
        return
    record: dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "payload": payload or {},
        "level": level,
    }
    if status:
        record["status"] = status
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    _telemetry_validator().validate(record)
    log_path = telemetry_log(settings)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


def telemetry_log(settings: RuntimeSettings) -> Path:
    return settings.log_dir / TELEMETRY_FILE


def iter_events(settings: RuntimeSettings, event: str | None = None) -> Iterator[dict[str, Any]]:
    """Yield recorded events, oldest first, optionally only those named ``event``.

    Lines that are not JSON objects are skipped.
    """

    log_path = telemetry_log(settings)
    if not log_path.exists():
        return
    with log_path.open("r", encoding="utf-8") as fh:
        for raw in fh:
            try:
                record = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(record, dict):
                continue
            if event is None or record.get("event") == event:
                yield record


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Aggregate events per name and status, plus fetch outcomes.

    Fetch events are further split by template kind and transport, and their
    durations and file counts are totalled.
    """

    by_event: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    by_kind: Counter[str] = Counter()
    by_transport: Counter[str] = Counter()
    files = 0
    fetch_ms = 0.0
    for record in events:
        by_event[record.get("event", "unknown")] += 1
        by_status[record.get("status", "unknown")] += 1
        if record.get("event") != "fetch":
            continue
        payload = record.get("payload") or {}
        if "kind" in payload:
            by_kind[payload["kind"]] += 1
        if "transport" in payload:
            by_transport[payload["transport"]] += 1
        files += int(payload.get("files", 0))
        fetch_ms += float(record.get("durationMs", 0.0))
    return {
        "total": sum(by_event.values()),
        "by_event": dict(by_event),
        "by_status": dict(by_status),
        "fetch": {
            "by_kind": dict(by_kind),
            "by_transport": dict(by_transport),
            "files": files,
            "duration_ms": round(fetch_ms, 3),
        },
    }


def clear(settings: RuntimeSettings) -> bool:
    log_path = telemetry_log(settings)
    if not log_path.exists():
        return False
    log_path.unlink()
    return True


def _telemetry_validator() -> jsonschema.protocols.Validator:
    global _TELEMETRY_VALIDATOR
    if _TELEMETRY_VALIDATOR is None:
        schema_resource = resources.files("templatefetcher.resources") / "telemetry.schema.json"
        schema = json.loads(schema_resource.read_text(encoding="utf-8"))
        _TELEMETRY_VALIDATOR = jsonschema.Draft202012Validator(schema)
    return _TELEMETRY_VALIDATOR


__all__ = ["clear", "iter_events", "record_event", "summarize", "telemetry_enabled", "telemetry_log"]
