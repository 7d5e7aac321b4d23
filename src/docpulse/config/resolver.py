"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DocpulseConfig

ENV_PREFIX = "DOCPULSE__"


def resolve_with_precedence(
    *,
    defaults: DocpulseConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> DocpulseConfig:
    """Merge configuration layers, later layers winning: defaults < file < env < CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: Nested mapping read from the YAML file.
        env_overrides: Nested mapping extracted from ``DOCPULSE__`` variables.
        cli_overrides: Mapping whose keys may use dotted paths (``watcher.enabled``).

    Returns:
        DocpulseConfig: Validated configuration.

    Raises:
        ConfigError: If an override layer is malformed or the result fails validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(source, source_name=name))

    try:
        return DocpulseConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def extract_env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``DOCPULSE__`` variables into a nested override mapping.

    Values are parsed as YAML literals so ``true``, ``1500`` and ``[a, b]`` keep
    their types; unparseable values are kept as raw strings.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_path(overrides, segments, value)
    return overrides


def assign_path(target: dict[str, Any], path: Sequence[str], value: Any) -> None:
    """Assign ``value`` at a nested ``path`` inside ``target``, creating mappings as needed.

    Raises:
        ConfigError: If a non-mapping value already occupies an intermediate segment.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, source_name=source_name)
        nested: dict[str, Any] = {}
        assign_path(nested, key.split("."), value)
        result = _deep_merge(result, nested)
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "extract_env_overrides",
    "assign_path",
]
