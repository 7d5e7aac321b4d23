"""Data models produced and cached by the workspace scanners."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict

TodoTag = Literal["TODO", "FIXME"]


class Finding(BaseModel):
    """A TODO/FIXME marker located in a workspace file.

    Attributes:
        file: Root-relative POSIX path of the file.
        line: 1-based line number.
        tag: Which marker matched.
        text: Whitespace-collapsed trailing text, at most 200 characters plus an ellipsis.
    """

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    tag: TodoTag
    text: str


@dataclass(frozen=True, slots=True)
class FileSignature:
    """Cheap proxy for file content equality.

    A signature of ``(-1, -1)`` marks a file that could not be stat'ed.
    """

    size_bytes: int
    modified_at_ms: float

    @classmethod
    def absent(cls) -> "FileSignature":
        return cls(size_bytes=-1, modified_at_ms=-1)

    @property
    def is_absent(self) -> bool:
        return self.size_bytes < 0 or self.modified_at_ms < 0


@dataclass(frozen=True, slots=True)
class CachedFileFindings:
    """Per-file findings remembered alongside the signature they were computed for."""

    signature: FileSignature
    findings: tuple[Finding, ...] = ()


@dataclass(slots=True)
class TodoScanState:
    """Aggregate cache entry for one scan configuration.

    Attributes:
        candidates_signature: Hash over every candidate's path and signature.
        by_file: Per-file cached findings keyed by relative path.
        aggregated: Findings returned by the run that produced this state.
    """

    candidates_signature: str
    by_file: dict[str, CachedFileFindings] = field(default_factory=dict)
    aggregated: list[Finding] = field(default_factory=list)


__all__ = ["TodoTag", "Finding", "FileSignature", "CachedFileFindings", "TodoScanState"]
