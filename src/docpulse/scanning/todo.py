"""Incremental TODO/FIXME scanner keyed on cheap file signatures.

Each scan stats every candidate file and compares a hash of all ``(path,
signature)`` pairs with the one stored by the previous scan of the same
configuration. A match returns the cached findings without reading anything;
otherwise only files whose own signature changed are re-read.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Iterable, Sequence

from docpulse.cache import TTLCache, create_cache_key

from .languages import is_inspectable
from .models import CachedFileFindings, FileSignature, Finding, TodoScanState
from .text import marker_text

LOGGER = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"\b(TODO|FIXME)\b")
_LINE_SPLIT = re.compile(r"\r?\n")


def hash_signatures(signatures: Sequence[tuple[str, FileSignature]]) -> str:
    """Return a digest over the ordered ``(path, signature)`` pairs."""
    payload = "\n".join(
        f"{path}|{signature.modified_at_ms}|{signature.size_bytes}"
        for path, signature in signatures
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def extract_findings(relative_path: str, content: str, *, max_findings: int) -> list[Finding]:
    """Locate TODO/FIXME markers in ``content``.

    Content containing a NUL byte is treated as binary and yields nothing.
    """
    if "\x00" in content:
        return []

    findings: list[Finding] = []
    for number, line in enumerate(_LINE_SPLIT.split(content), start=1):
        if len(findings) >= max_findings:
            break
        match = TAG_PATTERN.search(line)
        if match is None:
            continue
        findings.append(
            Finding(
                file=relative_path,
                line=number,
                tag=match.group(1),
                text=marker_text(line, line[match.end() :]),
            )
        )
    return findings


class TodoScanner:
    """Scan a bounded set of text files for TODO/FIXME markers.

    Args:
        cache: Shared TTL cache holding one :class:`TodoScanState` per configuration.
        max_files_to_inspect: Maximum candidates taken from the input list.
        max_file_bytes: Files above this size are recorded with no findings.
        max_findings: Global cap on returned findings; the scan stops once reached.
    """

    def __init__(
        self,
        cache: TTLCache,
        *,
        max_files_to_inspect: int = 300,
        max_file_bytes: int = 200_000,
        max_findings: int = 200,
    ) -> None:
        self._cache = cache
        self.max_files_to_inspect = max_files_to_inspect
        self.max_file_bytes = max_file_bytes
        self.max_findings = max_findings

    def cache_key(self, root: Path) -> str:
        return create_cache_key(
            "todo-fixme-scan",
            root.as_posix(),
            self.max_files_to_inspect,
            self.max_file_bytes,
            self.max_findings,
        )

    def select_candidates(self, files: Iterable[str]) -> list[str]:
        """Keep inspectable files, in input order, up to ``max_files_to_inspect``."""
        candidates: list[str] = []
        for relative in files:
            if len(candidates) >= self.max_files_to_inspect:
                break
            if is_inspectable(relative):
                candidates.append(relative)
        return candidates

    def signature(self, path: Path) -> FileSignature:
        """Return the size/mtime signature of ``path``, or the absent sentinel."""
        try:
            stat = path.stat()
        except OSError:
            return FileSignature.absent()
        return FileSignature(size_bytes=stat.st_size, modified_at_ms=stat.st_mtime_ns / 1_000_000)

    def scan(self, root: Path, files: Iterable[str]) -> list[Finding]:
        """Return findings for ``files`` (root-relative POSIX paths) under ``root``."""
        key = self.cache_key(root)
        cached: TodoScanState | None = self._cache.get(key)

        signatures = [
            (relative, self.signature(root / relative))
            for relative in self.select_candidates(files)
        ]
        candidates_signature = hash_signatures(signatures)
        if cached is not None and cached.candidates_signature == candidates_signature:
            return list(cached.aggregated)

        by_file = dict(cached.by_file) if cached is not None else {}
        aggregated: list[Finding] = []

        for relative, signature in signatures:
            if len(aggregated) >= self.max_findings:
                break

            if signature.is_absent or signature.size_bytes > self.max_file_bytes:
                by_file[relative] = CachedFileFindings(signature=signature)
                continue

            previous = by_file.get(relative)
            if previous is not None and previous.signature == signature:
                file_findings = previous.findings
            else:
                file_findings = tuple(self._scan_file(root, relative))
                by_file[relative] = CachedFileFindings(signature=signature, findings=file_findings)

            remaining = self.max_findings - len(aggregated)
            aggregated.extend(file_findings[:remaining])

        self._cache.set(
            key,
            TodoScanState(
                candidates_signature=candidates_signature,
                by_file=by_file,
                aggregated=aggregated,
            ),
        )
        return list(aggregated)

    def _scan_file(self, root: Path, relative: str) -> list[Finding]:
        try:
            content = self._read_text(root / relative)
        except OSError as exc:
            LOGGER.debug("Skipping unreadable file %s: %s", relative, exc)
            return []
        return extract_findings(relative, content, max_findings=self.max_findings)

    def _read_text(self, path: Path) -> str:
        """Read ``path`` as UTF-8, replacing undecodable bytes."""
        return path.read_text(encoding="utf-8", errors="replace")


__all__ = ["TAG_PATTERN", "TodoScanner", "extract_findings", "hash_signatures"]
