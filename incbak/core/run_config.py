from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError

DEFAULT_OUTPUT_NAME = "output.zip"
DEFAULT_CHUNK_SIZE = 64 * 1024


def resolve_against(base: Path, p: str | os.PathLike[str]) -> Path:
    path = Path(os.path.expanduser(os.fspath(p)))
    if not path.is_absolute():
        path = base / path
    return Path(os.path.abspath(path))


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable configuration for one backup run.

    - root: absolute directory the walk starts from
    - cutoff: unix seconds; only files modified strictly after it are archived
    - output_path: absolute archive path (never archived itself)
    - trace_path: optional JSONL trace file (also never archived)
    """

    root: Path
    cutoff: int
    output_path: Path
    trace_path: Optional[Path] = None
    run_id: str = "run_cli"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    dry_run: bool = False

    @classmethod
    def build(
        cls,
        *,
        cutoff: int,
        output: str | os.PathLike[str] | None = None,
        root: Path | None = None,
        trace: str | os.PathLike[str] | None = None,
        run_id: str = "run_cli",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        dry_run: bool = False,
    ) -> "RunConfig":
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ConfigError(
                code="config.invalid",
                message="chunk_size must be a positive integer",
                data={"chunk_size": chunk_size},
            )
        if not isinstance(run_id, str) or not run_id:
            raise ConfigError(code="config.invalid", message="run_id must be a non-empty string")

        # Relative paths resolve against the working directory, not the root.
        cwd = Path.cwd()
        root_path = Path(os.path.abspath(root)) if root is not None else cwd
        return cls(
            root=root_path,
            cutoff=int(cutoff),
            output_path=resolve_against(cwd, output if output is not None else DEFAULT_OUTPUT_NAME),
            trace_path=resolve_against(cwd, trace) if trace is not None else None,
            run_id=run_id,
            chunk_size=chunk_size,
            dry_run=dry_run,
        )

    def excluded_paths(self) -> frozenset[Path]:
        paths = {self.output_path}
        if self.trace_path is not None:
            paths.add(self.trace_path)
        return frozenset(paths)
