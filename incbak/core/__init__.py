from .errors import ConfigError, EntryError, FinalizeError, IncbakError, SetupError, TraversalError
from .run_config import RunConfig
from .walker import Candidate, Walker
from .archive_writer import ArchiveWriter
from .backup import BackupResult, run_backup

__all__ = [
  "IncbakError",
  "ConfigError",
  "SetupError",
  "TraversalError",
  "EntryError",
  "FinalizeError",
  "RunConfig",
  "Candidate",
  "Walker",
  "ArchiveWriter",
  "BackupResult",
  "run_backup",
]
