from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional


class Replay:
    """
    Minimal JSONL replay reader.
    """

    def __init__(self, path: Path):
        self._path = path

    def iter_events(self, *, run_id: Optional[str] = None, event_type: Optional[str] = None) -> Iterable[Dict[str, Any]]:
        if not self._path.exists():
            return
        with self._path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                ev = json.loads(line)
                if run_id is not None and ev.get("run_id") != run_id:
                    continue
                if event_type is not None and ev.get("event_type") != event_type:
                    continue
                yield ev

    def archived_entries(self, run_id: str) -> List[str]:
        """
        Entry names recorded as written for a run, in archive order.
        """
        return [
            ev["entry"]
            for ev in self.iter_events(run_id=run_id, event_type="entry_added")
            if isinstance(ev.get("entry"), str)
        ]
