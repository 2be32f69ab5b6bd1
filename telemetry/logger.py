from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, TextIO


class TelemetryLogger:
    """Append-only JSONL log of simulation ticks, one JSON object per line.

    Usable as a context manager so the file is closed when a run ends.
    """

    def __init__(self, path: str, flush_every: int = 60) -> None:
        self.path = path
        self.flush_every = max(1, int(flush_every))
        self.records_written = 0
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")

    def log_step(self, record: Dict[str, Any]) -> None:
        """Append a single tick record."""
        if self._fp is None:
            raise ValueError(f"Telemetry log {self.path} is closed")
        self._fp.write(json.dumps(record, separators=(",", ":")) + "\n")
        self.records_written += 1
        if self.records_written % self.flush_every == 0:
            self._fp.flush()

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def read_records(path: str) -> list:
    """Load every record from a JSONL telemetry file, skipping blank lines."""
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records
