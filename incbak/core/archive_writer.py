from __future__ import annotations

import time
import zipfile
from pathlib import Path
from typing import BinaryIO, Optional, Set, Tuple

from .errors import EntryError, FinalizeError, SetupError
from .walker import Candidate

DateTime = Tuple[int, int, int, int, int, int]

_ZIP_EPOCH: DateTime = (1980, 1, 1, 0, 0, 0)
_ZIP_MAX: DateTime = (2107, 12, 31, 23, 59, 59)


def dos_date_time(mtime: int) -> DateTime:
    """
    Map unix seconds to a ZIP (DOS) date_time tuple in local time.
    Values outside 1980..2107 are clamped, like zipfile's non-strict timestamps.
    """
    try:
        dt = time.localtime(mtime)[:6]
    except (OverflowError, OSError, ValueError):
        return _ZIP_EPOCH if mtime < 0 else _ZIP_MAX
    if dt < _ZIP_EPOCH:
        return _ZIP_EPOCH
    if dt > _ZIP_MAX:
        return _ZIP_MAX
    return dt  # type: ignore[return-value]


def _write_failed(name: str, e: Exception) -> EntryError:
    return EntryError(
        code="entry.write_failed",
        message=f"Cannot write entry: {name}",
        data={"name": name, "error": repr(e)},
    )


class ArchiveWriter:
    """
    Appends stored (uncompressed) entries to a ZIP archive, one at a time.

    File content is streamed through a caller-supplied scratch buffer that is
    reused for every entry. The archive is valid only after finalize();
    abort() leaves whatever was written without a central directory.
    """

    def __init__(self, zf: zipfile.ZipFile, buffer: bytearray, *, owns_file: bool = False):
        if len(buffer) < 1:
            raise ValueError("ArchiveWriter: buffer must not be empty")
        self._zip: Optional[zipfile.ZipFile] = zf
        self._buffer = buffer
        self._view = memoryview(buffer)
        self._owns_file = owns_file
        self._names: Set[str] = set()
        self.entries = 0
        self.bytes_written = 0

    @classmethod
    def create(cls, path: Path, buffer: bytearray) -> "ArchiveWriter":
        # Mode "w" truncates any existing file at path; there is no append mode.
        try:
            zf = zipfile.ZipFile(path, mode="w", compression=zipfile.ZIP_STORED, allowZip64=True)
        except OSError as e:
            raise SetupError(
                code="setup.output_unwritable",
                message=f"Failed to write to output file: {path}",
                data={"path": str(path), "error": repr(e)},
            ) from e
        return cls(zf, buffer, owns_file=True)

    @property
    def closed(self) -> bool:
        return self._zip is None

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise EntryError(code="archive.closed", message="Archive is already finalized or aborted")
        return self._zip

    def add_entry(
        self,
        name: str,
        reader: BinaryIO,
        *,
        size: int | None = None,
        mtime: int | None = None,
        mode: int | None = None,
    ) -> int:
        """
        Stream `reader` into a new stored entry called `name`. Returns bytes written.

        `size`, when known up front, lets zipfile skip ZIP64 headers for small
        entries; without it ZIP64 is always enabled for the entry.
        """
        zf = self._require_open()
        if not name or name in self._names:
            raise EntryError(
                code="entry.duplicate" if name else "entry.invalid",
                message=f"Entry name must be unique and non-empty: {name!r}",
                data={"name": name},
            )

        info = zipfile.ZipInfo(name, date_time=dos_date_time(mtime) if mtime is not None else _ZIP_EPOCH)
        info.compress_type = zipfile.ZIP_STORED
        if mode is not None:
            info.external_attr = (mode & 0xFFFF) << 16
        if size is not None:
            info.file_size = size

        try:
            dst = zf.open(info, mode="w", force_zip64=size is None)
        except UnicodeEncodeError as e:
            raise EntryError(
                code="entry.invalid",
                message=f"Entry name cannot be encoded: {name!r}",
                data={"name": name, "error": repr(e)},
            ) from e
        except OSError as e:
            raise _write_failed(name, e) from e
        try:
            with dst:
                written = self._copy(name, reader, dst)
        except (OSError, RuntimeError) as e:
            # Raised while closing the entry: header rewrite or ZIP64 size limit.
            raise _write_failed(name, e) from e

        self._names.add(name)
        self.entries += 1
        self.bytes_written += written
        return written

    def _copy(self, name: str, reader: BinaryIO, dst: BinaryIO) -> int:
        written = 0
        while True:
            try:
                n = reader.readinto(self._buffer)
            except OSError as e:
                raise EntryError(
                    code="entry.read_failed",
                    message=f"Cannot read entry content: {name}",
                    data={"name": name, "error": repr(e)},
                ) from e
            if not n:
                return written
            try:
                dst.write(self._view[:n])
            except OSError as e:
                raise _write_failed(name, e) from e
            written += n

    def add_file(self, cand: Candidate) -> int:
        try:
            f = open(cand.path, "rb", buffering=0)
        except OSError as e:
            raise EntryError(
                code="entry.open_failed",
                message=f"Cannot open file: {cand.path}",
                data={"path": str(cand.path), "error": repr(e)},
            ) from e
        with f:
            return self.add_entry(cand.name, f, size=cand.size, mtime=cand.mtime, mode=cand.mode)

    def finalize(self) -> None:
        zf = self._require_open()
        self._zip = None
        try:
            zf.close()
        except (OSError, ValueError) as e:
            raise FinalizeError(
                code="archive.finalize_failed",
                message="Failed to finalize archive",
                data={"error": repr(e)},
            ) from e

    def abort(self) -> None:
        zf = self._zip
        if zf is None:
            return
        self._zip = None
        fp = zf.fp
        # ZipFile.close() returns early once fp is detached: no central directory.
        zf.fp = None
        if self._owns_file and fp is not None:
            fp.close()
