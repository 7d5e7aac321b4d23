"""Command line interface for docpulse."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from docpulse.analysis import AnalysisResult, WorkspaceAnalyzer
from docpulse.config import (
    ConfigError,
    ConfigManager,
    OVERRIDES_HEADER,
    DocpulseConfig,
    WatcherSettings,
    assign_path,
    resolve_with_precedence,
)
from docpulse.paths import resolve_analysis_root
from docpulse.watch import WatcherOptions, WatchService

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output.
        click.ClickException: For non-JSON flows.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print ``message`` unless quiet or summary settings suppress ``mode``."""
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _configure_logging(config: DocpulseConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_config(json_output: bool) -> DocpulseConfig:
    try:
        return ConfigManager().load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        raise


def _resolve_output_modes(
    ctx: click.Context,
    config: DocpulseConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if quiet_enabled and explicit_quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if summary_only and explicit_summary:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _analysis_payload(result: AnalysisResult) -> dict[str, Any]:
    return {
        "workspace_root": result.workspace_root.as_posix(),
        "analysis_root": result.analysis_root.as_posix(),
        "snapshot": result.snapshot.model_dump(mode="json", exclude={"file_list"}),
        "diff": result.diff.model_dump(mode="json"),
    }


def _emit_analysis(
    command: str,
    result: AnalysisResult,
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    """Render one analysis result as JSON or rich text."""

    if json_output:
        console.print_json(data=_analysis_payload(result))
        return

    snapshot = result.snapshot
    diff = result.diff

    if snapshot.language_stats and not summary_only:
        table = Table(title="Languages")
        table.add_column("Extension")
        table.add_column("Files", justify="right")
        for extension, count in snapshot.language_stats.items():
            table.add_row(extension, str(count))
        _emit_message(table, mode="detail", quiet=quiet, summary_only=summary_only)

    if not diff.is_initial:
        for label, paths, style in (
            ("New", diff.new_files, "green"),
            ("Removed", diff.removed_files, "red"),
        ):
            for path in paths:
                _emit_message(
                    f"[{style}]{label}: {path}[/{style}]",
                    mode="detail",
                    quiet=quiet,
                    summary_only=summary_only,
                )
        for identifier in diff.changed_configs:
            _emit_message(
                f"[yellow]Config changed: {identifier}[/yellow]",
                mode="warning",
                quiet=quiet,
                summary_only=summary_only,
            )

    for finding in snapshot.findings:
        _emit_message(
            f"{finding.file}:{finding.line} [bold]{finding.tag}[/bold] {finding.text}",
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )

    _emit_message(
        _format_summary_line(command, result.analysis_root, result.summary_metrics()),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="docpulse")
def cli() -> None:
    """docpulse keeps an eye on a workspace and reports what changed."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--exclude",
    "excludes",
    multiple=True,
    help="Additional glob pattern to exclude (repeatable).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the snapshot.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    excludes: tuple[str, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Scan PATH once and report its files, languages, and TODO/FIXME markers.

    Args:
        ctx: Click context for parameter source inspection.
        path: Workspace root to scan.
        excludes: Extra exclusion globs.
        json_output: When True, emit JSON instead of text.
        summary_mode: When True, restrict output to summary lines.
        quiet: When True, suppress non-error output.
        verbose: When True, log at DEBUG level.
    """

    config = _load_config(json_output)
    _configure_logging(config, verbose)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )

    analyzer = WorkspaceAnalyzer(config, extra_excludes=excludes)
    try:
        result = analyzer.analyze(Path(path))
    except ConfigError as exc:
        _handle_cli_error(
            str(exc), code="analysis_root_error", json_output=json_output, original=exc
        )
        return

    _emit_analysis(
        "Scan", result, json_output=json_output, quiet=quiet_enabled, summary_only=summary_only
    )


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--debounce", type=int, help="Override the debounce interval in milliseconds.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON for each update.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def watch(
    ctx: click.Context,
    paths: tuple[str, ...],
    debounce: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Watch PATHS and report changes each time activity settles.

    Args:
        ctx: Click context for parameter source inspection.
        paths: One or more workspace roots to monitor.
        debounce: Optional debounce override in milliseconds.
        json_output: When True, emit JSON payloads instead of text.
        summary_mode: When True, restrict output to summary/warning lines.
        quiet: When True, suppress non-error output entirely.
        verbose: When True, log at DEBUG level.

    Raises:
        click.ClickException: If option combinations are invalid.
    """

    if not paths:
        raise click.ClickException("Provide at least one PATH to monitor.")

    config = _load_config(json_output)
    _configure_logging(config, verbose)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )

    if debounce is not None and debounce < 0:
        raise click.ClickException("--debounce must not be negative.")

    roots = [Path(path).expanduser().resolve() for path in paths]
    try:
        for root in roots:
            resolve_analysis_root(root, config.scan.analysis_root)
    except ConfigError as exc:
        _handle_cli_error(
            str(exc), code="analysis_root_error", json_output=json_output, original=exc
        )
        return

    settings = WatcherSettings(
        enabled=config.watcher.enabled,
        debounce_ms=debounce if debounce is not None else config.watcher.debounce_ms,
    )
    service = WatchService(
        WorkspaceAnalyzer(config),
        roots,
        settings=settings,
        options=WatcherOptions(
            report_directory=config.scan.report_directory,
            snapshot_file=config.scan.snapshot_file,
            exclude_patterns=tuple(config.scan.exclude_patterns),
            analysis_root=config.scan.analysis_root,
        ),
        on_result=lambda result: _emit_analysis(
            "Watch",
            result,
            json_output=json_output,
            quiet=quiet_enabled,
            summary_only=summary_only,
        ),
    )

    if not settings.enabled:
        if not json_output:
            _emit_message(
                "[yellow]Automatic updates are disabled (watcher.enabled is false); "
                "running a single pass.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
    elif not json_output:
        monitored = ", ".join(str(root) for root in roots)
        _emit_message(
            f"[cyan]Watching {monitored}. Press Ctrl+C to stop.[/cyan]",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    try:
        asyncio.run(service.serve())
    except KeyboardInterrupt:
        if not json_output:
            _emit_message(
                "[yellow]Watch stopped by user request.[/yellow]",
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )


@cli.group()
def config() -> None:
    """Manage docpulse configuration values."""


def _setting_at(config: DocpulseConfig, segments: list[str]) -> Any:
    node: Any = config.model_dump(mode="python")
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    source = manager.config_path if manager.config_path.exists() else "built-in defaults"
    console.print(f"[dim]Overrides: {source}[/dim]")
    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Store an override for the dotted KEY, e.g. ``watcher.debounce_ms``.

    VALUE is parsed as a YAML literal, so ``true``, ``1500`` and ``[a, b]``
    keep their types.
    """
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'watcher.debounce_ms'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    try:
        current = manager.load(include_env=False)
        overrides = manager.read_overrides()
        assign_path(overrides, segments, parsed_value)
        updated = resolve_with_precedence(defaults=DocpulseConfig(), file_overrides=overrides)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if updated == current:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    manager.write_overrides(overrides)
    change = f"{_setting_at(current, segments)!r} -> {_setting_at(updated, segments)!r}"
    console.print(f"[green]Updated {'.'.join(segments)}: {escape(change)}[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the overrides file and validate the result before saving."""
    manager = ConfigManager()
    original = manager.read_text() or OVERRIDES_HEADER
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        manager.write_overrides(parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Configuration updated at {manager.config_path}.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
