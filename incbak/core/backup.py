from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from incbak.trace.trace_emitter import TraceEmitter, TraceStore
from incbak.trace.trace_store_jsonl import NullTraceStore, TraceStoreJSONL

from .archive_writer import ArchiveWriter
from .errors import IncbakError
from .run_config import RunConfig
from .timestamps import format_cutoff
from .walker import Candidate, Walker


@dataclass(frozen=True)
class BackupResult:
    run_id: str
    output_path: Path
    dry_run: bool
    entries: List[str] = field(default_factory=list)
    bytes_written: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "output_path": str(self.output_path),
            "dry_run": self.dry_run,
            "entries": list(self.entries),
            "bytes_written": self.bytes_written,
        }


def _default_store(config: RunConfig) -> TraceStore:
    if config.trace_path is not None:
        return TraceStoreJSONL(config.trace_path)
    return NullTraceStore()


def run_backup(config: RunConfig, *, store: Optional[TraceStore] = None) -> BackupResult:
    """
    Walk config.root and archive every file newer than config.cutoff.

    Hard rules:
    - the output archive is created before traversal starts
    - the first failure aborts the run; the archive is left unfinalized
    - every selected and written entry is traced
    """
    trace = TraceEmitter(store=store if store is not None else _default_store(config), run_id=config.run_id)
    trace.emit(
        "run_started",
        message="Backup started",
        data={
            "root": str(config.root),
            "cutoff": config.cutoff,
            "cutoff_utc": format_cutoff(config.cutoff),
            "output_path": str(config.output_path),
            "dry_run": config.dry_run,
        },
    )

    walker = Walker(config)
    writer: Optional[ArchiveWriter] = None
    names: List[str] = []

    def add(cand: Candidate) -> None:
        trace.emit("entry_selected", entry=cand.name, data={"size": cand.size, "mtime": cand.mtime})
        if writer is not None:
            n = writer.add_file(cand)
            trace.emit("entry_added", entry=cand.name, data={"bytes": n})
        names.append(cand.name)

    try:
        if not config.dry_run:
            writer = ArchiveWriter.create(config.output_path, bytearray(config.chunk_size))
        walker.run(add)
        if writer is not None:
            writer.finalize()
    except BaseException as e:
        # Any escape, including interrupts, leaves the archive unfinalized.
        if writer is not None:
            writer.abort()
        if isinstance(e, IncbakError):
            trace.emit("error", code=e.code, message=e.message, data=e.data)
        else:
            trace.emit("error", code="run.failed", message=repr(e))
        raise

    bytes_written = writer.bytes_written if writer is not None else 0
    trace.emit(
        "run_finished",
        message="Backup finished",
        data={"ok": True, "entries": len(names), "bytes_written": bytes_written},
    )
    return BackupResult(
        run_id=config.run_id,
        output_path=config.output_path,
        dry_run=config.dry_run,
        entries=names,
        bytes_written=bytes_written,
    )
