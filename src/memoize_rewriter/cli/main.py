"""Command-line interface for memoize-rewriter."""

import hashlib
import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from memoize_rewriter import __version__
from memoize_rewriter.cli.config_loader import load_runtime_config
from memoize_rewriter.config.runtime_config import ApplicationMode, RuntimeConfig
from memoize_rewriter.core.manifest import load_descriptors
from memoize_rewriter.core.models import RewriteResult
from memoize_rewriter.core.rewriter import UnitRewriter
from memoize_rewriter.utils.files import atomic_write_text

console = Console()
logger = logging.getLogger(__name__)

# Compiled pattern for detecting control characters only.
_INJECTION_PATTERN = re.compile(r"[\x00-\x1f\x7f]")


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Rewrite tagged functions so their calls go through a cache.

    Registers the `plan` and `apply` subcommands; both read a source unit and a
    manifest of function descriptors produced by a front end.
    """


def sanitize_for_output(value: str) -> str:
    """Redact control characters before printing.

    Returns:
        str: "[REDACTED]" if control characters are found; otherwise the original
            string with Rich markup escaped.
    """
    if _INJECTION_PATTERN.search(value):
        value_hash = hashlib.sha256(value.encode("utf-8")).hexdigest()
        logger.debug(
            "Redacting value containing control characters: length=%d, hash=%s",
            len(value),
            value_hash,
        )
        return "[REDACTED]"
    return escape(value)


def _configure_logging(runtime_config: RuntimeConfig) -> None:
    log_handler = (
        logging.FileHandler(runtime_config.log_file)
        if runtime_config.log_file
        else logging.StreamHandler()
    )
    logging.basicConfig(
        level=getattr(logging, runtime_config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[log_handler],
        force=True,
    )


def _load_config(config: str | None, cli_overrides: dict[str, Any]) -> RuntimeConfig:
    """Load runtime configuration and configure logging, aborting on errors."""
    try:
        runtime_config, _ = load_runtime_config(config=config, cli_overrides=cli_overrides)
        _configure_logging(runtime_config)
    except Exception as e:
        console.print(f"[red]❌ Configuration error: {sanitize_for_output(str(e))}[/red]")
        raise click.Abort() from e
    return runtime_config


def _read_source(path: Path) -> str:
    # newline="" keeps \r\n intact so front-end offsets stay valid
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def _run_rewrite(
    runtime_config: RuntimeConfig, source_path: Path, descriptors_path: Path
) -> RewriteResult:
    try:
        source = _read_source(source_path)
        descriptors = load_descriptors(descriptors_path)
        return UnitRewriter(runtime_config).rewrite(source, descriptors)
    except Exception as e:
        console.print(f"[red]❌ Error rewriting {source_path}: {sanitize_for_output(str(e))}[/red]")
        logger.exception("Failed to rewrite %s", source_path)
        raise click.Abort() from e


def _display_result(result: RewriteResult, show_edits: bool) -> None:
    """Display per-function outcomes and, optionally, the planned edits."""
    table = Table(title="Memoize Rewrites")
    table.add_column("Function", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Mangled name / reason", style="yellow")

    for plan in result.plans:
        status = "planned" if result.dry_run else "rewritten"
        table.add_row(
            sanitize_for_output(plan.function_name), status, sanitize_for_output(plan.mangled_name)
        )
    for failure in result.failures:
        table.add_row(
            sanitize_for_output(failure.function_name),
            f"[red]{failure.error_kind}[/red]",
            sanitize_for_output(failure.message),
        )
    console.print(table)

    if show_edits and result.edits:
        edits_table = Table(title="Edits (original positions)")
        edits_table.add_column("Kind", style="magenta")
        edits_table.add_column("Span", style="blue")
        edits_table.add_column("Text", style="white")
        for edit in result.edits:
            edits_table.add_row(
                str(edit.kind),
                f"{edit.span.start}-{edit.span.end}",
                sanitize_for_output(edit.text.replace("\n", "\\n")),
            )
        console.print(edits_table)

    console.print(
        f"\n📊 {len(result.plans)} accepted, {result.failed_count} rejected "
        f"({result.success_rate:.1f}% success)"
    )


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by all rewrite commands."""
    options = [
        click.argument(
            "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
        ),
        click.option(
            "--descriptors",
            "-d",
            required=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="Manifest of matched functions (JSON or YAML)",
        ),
        click.option(
            "--config",
            type=str,
            help="Configuration preset name (strict/legacy) or path to configuration file (YAML/TOML)",
        ),
        click.option(
            "--adapter-name",
            type=str,
            help="Name of the memoize adapter called by generated wrappers (default: memoize)",
        ),
        click.option(
            "--check-collisions/--no-check-collisions",
            default=None,
            help="Reject rewrites whose mangled name is already in use (default: enabled)",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
            help="Logging level (default: INFO)",
        ),
        click.option(
            "--log-file",
            type=click.Path(dir_okay=False),
            help="Path to log file (default: stderr only)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command()
@common_options
def plan(
    source: Path,
    descriptors: Path,
    config: str | None,
    adapter_name: str | None,
    check_collisions: bool | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Plan the rewrite of SOURCE and print the edits without changing it.

    Configuration precedence: CLI flags > environment variables > config file > defaults
    """
    runtime_config = _load_config(
        config,
        {
            "mode": ApplicationMode.DRY_RUN,
            "adapter_name": adapter_name,
            "check_name_collisions": check_collisions,
            "log_level": log_level.upper() if log_level else None,
            "log_file": str(log_file) if log_file else None,
        },
    )

    console.print(f"Planning memoize rewrites for {sanitize_for_output(str(source))}")
    result = _run_rewrite(runtime_config, source, descriptors)
    _display_result(result, show_edits=True)

    if result.failures:
        sys.exit(1)


@cli.command()
@common_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the rewritten unit here instead of overwriting SOURCE",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Plan only; do not write anything",
)
def apply(
    source: Path,
    descriptors: Path,
    config: str | None,
    adapter_name: str | None,
    check_collisions: bool | None,
    log_level: str | None,
    log_file: str | None,
    output: Path | None,
    dry_run: bool | None,
) -> None:
    """Rewrite the matched functions of SOURCE and write the result.

    Functions that cannot be rewritten are reported and left untouched; the
    command exits with status 1 if there were any.
    """
    runtime_config = _load_config(
        config,
        {
            "mode": ApplicationMode.DRY_RUN if dry_run else None,
            "adapter_name": adapter_name,
            "check_name_collisions": check_collisions,
            "log_level": log_level.upper() if log_level else None,
            "log_file": str(log_file) if log_file else None,
        },
    )

    console.print("\n[bold]Memoize Rewriter[/bold]")
    console.print(f"Source: {sanitize_for_output(str(source))}")
    console.print(f"Mode: [cyan]{runtime_config.mode}[/cyan]")
    console.print(f"Adapter: {sanitize_for_output(runtime_config.adapter_name)}")
    collision_status = (
        "[green]enabled[/green]"
        if runtime_config.check_name_collisions
        else "[yellow]disabled[/yellow]"
    )
    console.print(f"Collision checks: {collision_status}")
    console.print()

    result = _run_rewrite(runtime_config, source, descriptors)
    _display_result(result, show_edits=result.dry_run)

    if not result.dry_run and (result.plans or output):
        target = output or source
        try:
            atomic_write_text(target, result.source)
        except OSError as e:
            console.print(f"[red]❌ Failed to write {sanitize_for_output(str(target))}: {e}[/red]")
            logger.exception("Failed to write %s", target)
            raise click.Abort() from e
        console.print(f"[bold green]✅ Wrote {sanitize_for_output(str(target))}[/bold green]")

    if result.failures:
        console.print("\n[yellow]💡 Some functions were not rewritten; see the reasons above[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    cli()
