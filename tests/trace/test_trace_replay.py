import json
import tempfile
import unittest
from pathlib import Path

from incbak.trace import NullTraceStore, Replay, TraceEmitter, TraceStoreJSONL


class TestTraceReplay(unittest.TestCase):
    def test_emitter_writes_jsonl_events(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "nested" / "t.jsonl"
            trace = TraceEmitter(TraceStoreJSONL(p), run_id="r1")
            trace.emit("run_started", message="Backup started")
            trace.emit("entry_added", entry="a.txt", data={"bytes": 1})

            lines = [json.loads(l) for l in p.read_text(encoding="utf-8").splitlines() if l.strip()]
            self.assertEqual([e["event_type"] for e in lines], ["run_started", "entry_added"])
            self.assertEqual(lines[1]["entry"], "a.txt")
            self.assertTrue(lines[0]["ts"].endswith("Z"))
            self.assertNotIn("entry", lines[0])

    def test_replay_filters_by_run_and_type(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "t.jsonl"
            store = TraceStoreJSONL(p)
            TraceEmitter(store, run_id="r1").emit("entry_added", entry="a.txt")
            TraceEmitter(store, run_id="r2").emit("entry_added", entry="b.txt")
            TraceEmitter(store, run_id="r1").emit("entry_added", entry="c.txt")
            TraceEmitter(store, run_id="r1").emit("run_finished")

            replay = Replay(p)
            self.assertEqual(replay.archived_entries("r1"), ["a.txt", "c.txt"])
            self.assertEqual(len(list(replay.iter_events(run_id="r1"))), 3)
            self.assertEqual(len(list(replay.iter_events(event_type="entry_added"))), 3)

    def test_replay_of_missing_file_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            self.assertEqual(list(Replay(Path(td) / "none.jsonl").iter_events()), [])

    def test_null_store_keeps_events_only_on_request(self) -> None:
        kept = NullTraceStore(keep=True)
        dropped = NullTraceStore()
        TraceEmitter(kept, run_id="r").emit("run_started")
        TraceEmitter(dropped, run_id="r").emit("run_started")
        self.assertEqual(len(kept.events), 1)
        self.assertEqual(dropped.events, [])


if __name__ == "__main__":
    unittest.main()
