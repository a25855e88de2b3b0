from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List


class TraceStoreJSONL:
    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")


class NullTraceStore:
    """
    Store used when tracing is disabled; keeps events in memory only when asked.
    """

    def __init__(self, keep: bool = False):
        self._keep = keep
        self.events: List[Dict[str, Any]] = []

    def append(self, event: dict[str, Any]) -> None:
        if self._keep:
            self.events.append(event)
