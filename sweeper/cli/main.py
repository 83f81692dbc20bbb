"""Main CLI entry point using Typer."""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..backends.base import ResourceRemover, ResourceSource
from ..backends.file import FileResourceStore
from ..cleanup.audit import AuditStorage
from ..cleanup.executor import RemovalExecutor
from ..cleanup.orchestrator import SweepOrchestrator, SweepRequest
from ..cleanup.reporter import SummaryReporter
from ..errors import SweeperError
from ..models.summary import OperationStatus, SweepSummary
from ..planning.keys import parse_key_expression
from ..planning.predicates import (
    AnyOf,
    AttributeContains,
    AttributeEquals,
    AttributeMatches,
    Predicate,
    parse_attribute_pair,
)
from ..planning.selection import get_policy
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="sweeper",
    help="Resource Sweeper - find duplicate resources and clean them up safely",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None


@app.callback()
def main(
    config_file: Optional[str] = typer.Option(
        None, "--config", help="Config file (default: ~/.sweeper/config.yaml or $SWEEPER_CONFIG)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Resource Sweeper - find duplicate resources and clean them up safely."""
    global config

    try:
        config = Config.load(config_file)
    except SweeperError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


def _config() -> Config:
    return config if config is not None else Config.load()


@app.command()
def version():
    """Show version information."""
    console.print(f"sweeper version {__version__}")


def _build_backend(
    inventory: Optional[str],
    use_aws: bool,
    regions: Optional[List[str]],
    profile: Optional[str],
) -> Tuple[ResourceSource, ResourceRemover]:
    """Select the source/remover pair from CLI options."""
    if bool(inventory) == use_aws:
        raise typer.BadParameter("Specify exactly one of --inventory or --aws")

    if inventory:
        store = FileResourceStore(inventory)
        return store, store

    from ..backends.aws import AwsResourceRemover, AwsTaggedResourceSource

    cfg = _config()
    aws_profile = profile or cfg.aws_profile
    region_list = list(regions or ([cfg.aws_region] if cfg.aws_region else []))
    source = AwsTaggedResourceSource(regions=region_list, profile_name=aws_profile)
    remover = AwsResourceRemover(profile_name=aws_profile, default_region=cfg.aws_region)
    return source, remover


def _build_orchestrator(source: ResourceSource, remover: ResourceRemover, execute: bool) -> SweepOrchestrator:
    cfg = _config()
    executor = RemovalExecutor(
        remover,
        max_concurrency=cfg.max_concurrency,
        max_retries=cfg.max_retries,
        retry_base_delay=cfg.retry_base_delay,
        request_timeout=cfg.request_timeout,
    )
    audit = AuditStorage(cfg.audit_dir) if execute and cfg.audit_enabled else None
    return SweepOrchestrator(source, executor=executor, audit_storage=audit)


def _parse_predicates(contains: List[str], equals: List[str], matches: List[str]) -> Optional[Predicate]:
    """Combine repeated --contains/--equals/--matches options with OR."""
    predicates: List[Predicate] = []
    try:
        for pair in contains:
            attribute, text = parse_attribute_pair(pair)
            predicates.append(AttributeContains(attribute, text))
        for pair in equals:
            attribute, value = parse_attribute_pair(pair)
            predicates.append(AttributeEquals(attribute, value))
        for pair in matches:
            attribute, pattern = parse_attribute_pair(pair)
            predicates.append(AttributeMatches(attribute, pattern))
    except ValueError as e:
        raise typer.BadParameter(str(e))

    if not predicates:
        return None
    if len(predicates) == 1:
        return predicates[0]
    return AnyOf(predicates)


def _run_sweep(
    request: SweepRequest,
    source: ResourceSource,
    remover: ResourceRemover,
    yes: bool,
    export: Optional[str],
) -> SweepSummary:
    """Preview, confirm if needed, execute, report."""
    orchestrator = _build_orchestrator(source, remover, execute=not request.dry_run)

    try:
        if request.dry_run:
            summary = asyncio.run(orchestrator.preview(request))
        else:
            if not yes:
                preview = asyncio.run(orchestrator.preview(request))
                _print_summary(preview)
                if preview.removals_planned == 0:
                    console.print("[green]Nothing to remove.[/green]")
                    raise typer.Exit(code=0)
                if not typer.confirm(f"Remove {preview.removals_planned} resources?"):
                    console.print("[yellow]Aborted; nothing was removed.[/yellow]")
                    raise typer.Exit(code=2)
            summary = asyncio.run(orchestrator.execute(request, confirmed=True))
    except (SweeperError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    _print_summary(summary)

    if export:
        path = SummaryReporter().export(summary, export)
        console.print(f"[green]✓ Summary exported to {path}[/green]")

    if summary.status in (OperationStatus.PARTIAL, OperationStatus.FAILED):
        raise typer.Exit(code=1)
    return summary


def _print_summary(summary: SweepSummary) -> None:
    for table in SummaryReporter().build_tables(summary):
        console.print(table)


@app.command()
def dedupe(
    inventory: Optional[str] = typer.Option(None, "--inventory", "-i", help="Inventory file (YAML or JSON)"),
    use_aws: bool = typer.Option(False, "--aws", help="Sweep tagged AWS resources"),
    region: Optional[List[str]] = typer.Option(None, "--region", help="AWS region (can specify multiple)"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    scope: Optional[str] = typer.Option(None, "--scope", "-s", help="Only resources in this scope"),
    key: Optional[str] = typer.Option(
        None,
        "--key",
        "-k",
        help="Grouping key: location[:normalized], name[:casefold], attr:NAME, or a,b "
        "(default: location, or attr:name with --aws)",
    ),
    keep: str = typer.Option("first", "--keep", help="Survivor policy: first, last, recent, priority"),
    min_size: Optional[int] = typer.Option(None, "--min-size", help="Smallest group treated as duplicates"),
    protect_contains: List[str] = typer.Option(
        [], "--protect-contains", help="Never remove resources where ATTR contains TEXT (ATTR=TEXT)"
    ),
    execute: bool = typer.Option(False, "--execute", help="Actually remove resources (default: dry run)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    export: Optional[str] = typer.Option(None, "--export", help="Export summary (JSON or YAML by extension)"),
):
    """Remove all but one resource from each duplicate group."""
    try:
        request = SweepRequest(
            scope=scope,
            key_extractor=parse_key_expression(key or ("attr:name" if use_aws else "location")),
            selection_policy=get_policy(keep),
            min_group_size=min_size if min_size is not None else _config().min_group_size,
            dry_run=not execute,
            protect=_parse_predicates(protect_contains, [], []),
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    source, remover = _build_backend(inventory, use_aws, region, profile)
    _run_sweep(request, source, remover, yes=yes, export=export)


@app.command()
def close(
    inventory: Optional[str] = typer.Option(None, "--inventory", "-i", help="Inventory file (YAML or JSON)"),
    use_aws: bool = typer.Option(False, "--aws", help="Sweep tagged AWS resources"),
    region: Optional[List[str]] = typer.Option(None, "--region", help="AWS region (can specify multiple)"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    scope: Optional[str] = typer.Option(None, "--scope", "-s", help="Only resources in this scope"),
    contains: List[str] = typer.Option([], "--contains", help="ATTR=TEXT substring match (case-insensitive)"),
    equals: List[str] = typer.Option([], "--equals", help="ATTR=VALUE exact match"),
    matches: List[str] = typer.Option([], "--matches", help="ATTR=REGEX match"),
    execute: bool = typer.Option(False, "--execute", help="Actually remove resources (default: dry run)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    export: Optional[str] = typer.Option(None, "--export", help="Export summary (JSON or YAML by extension)"),
):
    """Remove every resource matching a predicate."""
    predicate = _parse_predicates(contains, equals, matches)
    if predicate is None:
        raise typer.BadParameter("Give at least one --contains, --equals or --matches")

    request = SweepRequest(scope=scope, predicate=predicate, dry_run=not execute)
    source, remover = _build_backend(inventory, use_aws, region, profile)
    _run_sweep(request, source, remover, yes=yes, export=export)


@app.command()
def history(
    since: Optional[str] = typer.Option(None, "--since", help="Start date (YYYY-MM-DD)"),
    until: Optional[str] = typer.Option(None, "--until", help="End date (YYYY-MM-DD)"),
    audit_dir: Optional[str] = typer.Option(None, "--audit-dir", help="Audit log directory"),
):
    """List executed sweep runs from the audit log."""
    try:
        since_dt = datetime.fromisoformat(since) if since else None
        until_dt = datetime.fromisoformat(until) if until else None
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date: {e}")

    storage = AuditStorage(audit_dir or _config().audit_dir)
    runs = storage.query_runs(since=since_dt, until=until_dt)

    if not runs:
        console.print("[yellow]No sweep runs recorded.[/yellow]")
        return

    table = Table(title="Sweep History")
    table.add_column("Operation")
    table.add_column("Started")
    table.add_column("Status")
    table.add_column("Seen", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Failed", justify="right")

    for entry in runs:
        run = entry["run"]
        table.add_row(
            run["operation_id"],
            run["started_at"],
            run["status"],
            str(run["resources_seen"]),
            str(run["removals_succeeded"]),
            str(len(run["removals_failed"])),
        )

    console.print(table)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
