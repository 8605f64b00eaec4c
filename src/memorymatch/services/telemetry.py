from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Protocol


class TelemetrySink(Protocol):
    def log(self, event_type: str, payload: Mapping[str, object]) -> None: ...


@dataclass
class TelemetryService:
    """Appends one JSON record per line to `path`."""

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")


@dataclass
class MemoryTelemetry:
    records: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.records.append((event_type, dict(payload)))

    def types(self) -> list[str]:
        return [t for t, _ in self.records]
