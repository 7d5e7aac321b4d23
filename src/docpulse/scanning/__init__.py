"""Workspace scanning: cached file listings and incremental marker scans."""

from .discovery import FileCollector
from .filters import clear_gitignore_cache, is_sensitive_path, load_gitignore
from .languages import (
    IMPORTANT_CONFIG_FILES,
    LANGUAGE_EXTENSIONS,
    calculate_language_stats,
    is_inspectable,
)
from .models import CachedFileFindings, FileSignature, Finding, TodoScanState
from .todo import TodoScanner, extract_findings

__all__ = [
    "FileCollector",
    "clear_gitignore_cache",
    "is_sensitive_path",
    "load_gitignore",
    "TodoScanner",
    "extract_findings",
    "Finding",
    "FileSignature",
    "CachedFileFindings",
    "TodoScanState",
    "IMPORTANT_CONFIG_FILES",
    "LANGUAGE_EXTENSIONS",
    "calculate_language_stats",
    "is_inspectable",
]
