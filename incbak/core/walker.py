from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List

from .errors import EntryError, TraversalError
from .run_config import RunConfig


@dataclass(frozen=True)
class Candidate:
    path: Path
    name: str
    size: int
    mtime: int
    mode: int


def mtime_seconds(st: os.stat_result) -> int:
    # Whole seconds, floored; sub-second precision never counts as "newer".
    return st.st_mtime_ns // 1_000_000_000


def lossy_name(name: str) -> str:
    """
    Entry name safe to store as UTF-8.

    Undecodable filename bytes (surrogate escapes from os.scandir) become
    U+FFFD; the file itself is still opened by its real path.
    """
    try:
        return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    except UnicodeEncodeError:
        return name.encode("utf-8", "replace").decode("utf-8")


class Walker:
    """
    Depth-first walk of the run root yielding files modified after the cutoff.

    Entries are visited in directory-listing order (no sorting). A subdirectory
    is descended into where it is encountered, so the visit order is the same
    as a recursive pre-order walk; the explicit stack only avoids recursion
    limits on deep trees.

    Any I/O failure aborts the walk with TraversalError/EntryError.
    """

    def __init__(self, config: RunConfig):
        self._root = config.root
        self._cutoff = config.cutoff
        self._excluded = config.excluded_paths()

    def walk(self) -> Iterator[Candidate]:
        root = self._root
        if not root.is_dir():
            raise TraversalError(
                code="traverse.root_invalid",
                message=f"Root is not a readable directory: {root}",
                data={"path": str(root)},
            )

        stack: List[Iterator[os.DirEntry[str]]] = [self._list(root)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            if self._is_dir(entry):
                stack.append(self._list(Path(entry.path)))
                continue
            cand = self._inspect(entry)
            if cand is not None:
                yield cand

    def run(self, add: Callable[[Candidate], object]) -> int:
        n = 0
        for cand in self.walk():
            add(cand)
            n += 1
        return n

    def _list(self, d: Path) -> Iterator[os.DirEntry[str]]:
        try:
            with os.scandir(d) as it:
                entries = list(it)
        except OSError as e:
            raise TraversalError(
                code="traverse.list_failed",
                message=f"Cannot list directory: {d}",
                data={"path": str(d), "error": repr(e)},
            ) from e
        return iter(entries)

    def _is_dir(self, entry: os.DirEntry[str]) -> bool:
        try:
            return entry.is_dir()
        except OSError as e:
            raise EntryError(
                code="entry.stat_failed",
                message=f"Cannot read metadata: {entry.path}",
                data={"path": entry.path, "error": repr(e)},
            ) from e

    def _inspect(self, entry: os.DirEntry[str]) -> Candidate | None:
        try:
            st = entry.stat()
        except OSError as e:
            raise EntryError(
                code="entry.stat_failed",
                message=f"Cannot read metadata: {entry.path}",
                data={"path": entry.path, "error": repr(e)},
            ) from e

        mtime = mtime_seconds(st)
        path = Path(entry.path)
        if not mtime > self._cutoff or path in self._excluded:
            return None
        return Candidate(
            path=path,
            name=lossy_name(str(path.relative_to(self._root))),
            size=st.st_size,
            mtime=mtime,
            mode=st.st_mode,
        )
