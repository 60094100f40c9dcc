"""Command line interface for tagdir."""

from __future__ import annotations

import difflib
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from tagdir.config import (
    ConfigError,
    ConfigManager,
    TagdirConfig,
    assign_path,
    resolve_with_precedence,
)
from tagdir.logging_setup import configure_logging
from tagdir.organization import (
    ActionDescription,
    DirectoryRenamer,
    ExecutionReport,
    LocalDirectoryOps,
    RenameMode,
)
from tagdir.tags import TagFormatter, TrackFile, scan_tracks

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
    """Print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _actions_table(descriptions: List[ActionDescription]) -> Table:
    table = Table(title="Planned actions")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Source", style="yellow", overflow="fold")
    table.add_column("Destination", style="green", overflow="fold")
    for number, description in enumerate(descriptions, start=1):
        table.add_row(
            str(number),
            description.verb,
            escape(description.source or ""),
            escape(description.destination),
        )
    return table


@contextmanager
def _abort_on_interrupt(renamer: DirectoryRenamer) -> Iterator[None]:
    """Turn Ctrl-C into a cooperative abort of the running renamer."""

    def _handler(signum: int, frame: Any) -> None:
        renamer.abort()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _resolve_output_modes(
    ctx: click.Context,
    config: TagdirConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _plan_options(func):
    """Attach the options shared by `plan` and `apply`."""
    options = [
        click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str)),
        click.option("--format", "dir_format", type=str, help="Directory name format."),
        click.option(
            "--mode",
            type=click.Choice(["rename", "create"]),
            help="Rename the current directory or create a subdirectory.",
        ),
        click.option(
            "-r/-R",
            "--recursive/--no-recursive",
            default=True,
            help="Include files in subdirectories.",
        ),
        click.option(
            "--tag-source",
            type=click.Choice(["easy", "raw"]),
            help="Tag view used to fill the format; raw ID3/MP4 frames map to the usual codes.",
        ),
        click.option("--json", "json_output", is_flag=True, help="Emit JSON output."),
        click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines."),
        click.option("--quiet", is_flag=True, help="Suppress non-error output."),
        click.pass_context,
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _reorganize(
    ctx: click.Context,
    *,
    path: str,
    dir_format: Optional[str],
    mode: Optional[str],
    recursive: Optional[bool],
    tag_source: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    execute: bool,
) -> None:
    command = "apply" if execute else "plan"
    if ctx.get_parameter_source("recursive") != ParameterSource.COMMANDLINE:
        recursive = None
    cli_overrides = {
        key: value
        for key, value in (
            ("renamer.format", dir_format),
            ("renamer.mode", mode),
            ("renamer.recursive", recursive),
            ("renamer.tag_source", tag_source),
        )
        if value is not None
    }
    try:
        manager = ConfigManager()
        config = manager.load(cli_overrides=cli_overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )
    configure_logging(config.logging, manager.state_dir)

    settings = config.renamer
    root = Path(path).expanduser().resolve()
    tracks: List[TrackFile] = list(
        scan_tracks(
            root,
            recursive=settings.recursive,
            extensions=settings.extensions,
            tag_source=settings.tag_source,
        )
    )
    renamer = DirectoryRenamer(
        TagFormatter(),
        LocalDirectoryOps(tracks),
        template=settings.format,
        mode=RenameMode(settings.mode),
        max_rename_hops=settings.max_rename_hops,
        max_refinement_rounds=settings.max_refinement_rounds,
        max_descend_depth=settings.max_descend_depth,
    )
    renamer.directory_name = root.as_posix()

    if tracks and not (json_output or quiet_enabled or summary_only):
        current, desired = renamer.preview(tracks[0])
        _emit_message(
            f"[cyan]Format '{escape(settings.format)}' ({settings.mode}): "
            f"{escape(current)} -> {escape(desired)}[/cyan]",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    with _abort_on_interrupt(renamer):
        renamer.schedule_all(tracks)
        descriptions = renamer.describe_actions()
        report: Optional[ExecutionReport] = None
        if execute and not renamer.is_aborted():
            report = renamer.run()

    payload: dict[str, Any] = {
        "context": {
            "root": root.as_posix(),
            "format": settings.format,
            "mode": settings.mode,
            "files": len(tracks),
        },
        "actions": [description.model_dump(mode="json") for description in descriptions],
        "aborted": renamer.is_aborted(),
    }
    metrics: dict[str, Any] = {"files": len(tracks), "actions": len(descriptions)}
    if report is not None:
        payload["report"] = {
            "applied": report.applied,
            "remaining": report.remaining,
            "directory": report.directory_name,
            "failures": [
                {"index": failure.index, "kind": failure.kind.value, "message": failure.message}
                for failure in report.failures
            ],
        }
        metrics["applied"] = report.applied
        metrics["failed"] = len(report.failures)

    if json_output:
        console.print_json(data=payload)
    else:
        if descriptions:
            _emit_message(
                _actions_table(descriptions),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        if renamer.is_aborted():
            _emit_message(
                "[yellow]Aborted; remaining files or actions were skipped.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        if report is not None and report.failures:
            _emit_message(
                "[red]Errors encountered:[/red]",
                mode="error",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            for failure in report.failures:
                _emit_message(
                    f"  - {escape(failure.message)}",
                    mode="error",
                    quiet=quiet_enabled,
                    summary_only=summary_only,
                )
        _emit_message(
            _format_summary_line(command, root, metrics),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    if report is not None and report.failures:
        ctx.exit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tagdir")
def cli() -> None:
    """tagdir reorganizes audio directories from their tags."""


@cli.command()
@_plan_options
def plan(ctx: click.Context, **options: Any) -> None:
    """Show the actions needed to reorganize audio files below PATH."""
    _reorganize(ctx, execute=False, **options)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Preview actions without applying them.")
@_plan_options
def apply(ctx: click.Context, dry_run: bool, **options: Any) -> None:
    """Reorganize audio files below PATH, reporting every failed action."""
    _reorganize(ctx, execute=not dry_run, **options)


@cli.group()
def config() -> None:
    """Manage tagdir configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path such as ``renamer.format``.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'renamer.format'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_path(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=TagdirConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    diff = list(
        difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    changed = [
        line
        for line in diff
        if line.startswith(("+", "-"))
        and not line.startswith(("+++", "---"))
        and "Last updated" not in line
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an editor and validate the result."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TagdirConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
