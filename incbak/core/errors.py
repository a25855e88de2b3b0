from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class IncbakError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigError(IncbakError):
    pass


class SetupError(IncbakError):
    pass


class TraversalError(IncbakError):
    pass


class EntryError(IncbakError):
    pass


class FinalizeError(IncbakError):
    pass
