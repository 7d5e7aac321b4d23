"""Language and config-file tables used to classify workspace files."""

from __future__ import annotations

import posixpath
from collections import Counter
from typing import Iterable

LANGUAGE_EXTENSIONS: dict[str, str] = {
    "ts": "TypeScript",
    "tsx": "TypeScript (React)",
    "js": "JavaScript",
    "jsx": "JavaScript (React)",
    "py": "Python",
    "rs": "Rust",
    "go": "Go",
    "java": "Java",
    "kt": "Kotlin",
    "swift": "Swift",
    "cs": "C#",
    "cpp": "C++",
    "c": "C",
    "rb": "Ruby",
    "php": "PHP",
    "vue": "Vue",
    "svelte": "Svelte",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "json": "JSON",
    "yaml": "YAML",
    "yml": "YAML",
    "md": "Markdown",
    "sql": "SQL",
    "sh": "Shell",
    "ps1": "PowerShell",
    "dockerfile": "Dockerfile",
}

# Extension-less files that are still worth reading for markers.
TEXT_BASENAMES = frozenset({"dockerfile", "makefile"})

IMPORTANT_CONFIG_FILES: tuple[str, ...] = (
    "package.json",
    "tsconfig.json",
    "tauri.conf.json",
    "Cargo.toml",
    "docker-compose.yml",
    "docker-compose.yaml",
    ".env.example",
    "vite.config.ts",
    "vite.config.js",
    "next.config.js",
    "next.config.mjs",
    "webpack.config.js",
    "rollup.config.js",
    "jest.config.js",
    "vitest.config.ts",
    "eslint.config.js",
    ".prettierrc",
    "pyproject.toml",
    "requirements.txt",
    "go.mod",
    "Makefile",
    "CMakeLists.txt",
)


def file_extension(relative_path: str) -> str:
    """Return the lower-cased extension of ``relative_path`` without the dot."""
    return posixpath.splitext(relative_path)[1][1:].lower()


def is_inspectable(relative_path: str) -> bool:
    """Return whether a file is a text source worth scanning for markers."""
    if file_extension(relative_path) in LANGUAGE_EXTENSIONS:
        return True
    return posixpath.basename(relative_path).lower() in TEXT_BASENAMES


def calculate_language_stats(files: Iterable[str]) -> dict[str, int]:
    """Count files per known extension, most common first."""
    counts = Counter(
        ext for ext in (file_extension(path) for path in files) if ext in LANGUAGE_EXTENSIONS
    )
    return dict(counts.most_common())


__all__ = [
    "LANGUAGE_EXTENSIONS",
    "TEXT_BASENAMES",
    "IMPORTANT_CONFIG_FILES",
    "file_extension",
    "is_inspectable",
    "calculate_language_stats",
]
