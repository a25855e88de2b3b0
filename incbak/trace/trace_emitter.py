from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol


class TraceStore(Protocol):
    def append(self, event: dict[str, Any]) -> None: ...


class TraceEmitter:
    def __init__(self, store: TraceStore, run_id: str):
        self._store = store
        self._run_id = run_id

    def emit(
        self,
        event_type: str,
        *,
        entry: str | None = None,
        code: str | None = None,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        event: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "run_id": self._run_id,
            "event_type": event_type,
        }
        if entry is not None:
            event["entry"] = entry
        if code is not None:
            event["code"] = code
        if message is not None:
            event["message"] = message
        if data is not None:
            event["data"] = data

        self._store.append(event)
