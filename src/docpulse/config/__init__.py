"""Configuration management for docpulse."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import AnalysisRootError, ConfigError
from .models import (
    DEFAULT_EXCLUDE_PATTERNS,
    CacheSettings,
    DocpulseConfig,
    ScanSettings,
    TodoScanSettings,
    WatcherSettings,
)
from .resolver import assign_path, extract_env_overrides, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.docpulse/config.yaml")
OVERRIDES_HEADER = (
    "# docpulse configuration overrides.\n"
    "# Anything not listed here uses the built-in default.\n"
)


class ConfigManager:
    """Read and write the user's configuration overrides.

    The YAML file holds only values that differ from the defaults and is
    optional: a missing file means "all defaults". Effective settings are
    resolved as defaults < file < ``DOCPULSE__`` environment < CLI.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
    ) -> DocpulseConfig:
        """Return the effective configuration.

        Raises:
            ConfigError: If the file is malformed or any layer fails validation.
        """
        env_overrides = extract_env_overrides(self._env) if include_env else None
        return resolve_with_precedence(
            defaults=DocpulseConfig(),
            file_overrides=self.read_overrides(),
            env_overrides=env_overrides or None,
            cli_overrides=cli_overrides,
        )

    def read_overrides(self) -> dict[str, Any]:
        """Return the overrides stored on disk, or an empty mapping."""
        text = self.read_text()
        if not text:
            return {}
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def write_overrides(self, overrides: Mapping[str, Any]) -> DocpulseConfig:
        """Validate ``overrides`` and persist them.

        Returns:
            DocpulseConfig: The configuration the new file resolves to, without
            environment overrides.

        Raises:
            ConfigError: If the overrides do not validate; nothing is written.
        """
        resolved = resolve_with_precedence(defaults=DocpulseConfig(), file_overrides=overrides)
        body = yaml.safe_dump(dict(overrides), sort_keys=False) if overrides else ""
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(OVERRIDES_HEADER + body, encoding="utf-8")
        return resolved

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "AnalysisRootError",
    "CacheSettings",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DocpulseConfig",
    "OVERRIDES_HEADER",
    "ScanSettings",
    "TodoScanSettings",
    "WatcherSettings",
    "assign_path",
    "extract_env_overrides",
    "resolve_with_precedence",
]
