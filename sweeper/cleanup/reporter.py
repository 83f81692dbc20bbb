"""Sweep summary reporter with terminal and file output formats."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from rich.console import Console
from rich.table import Table

from ..models.group import render_key
from ..models.removal import RemovalStatus
from ..models.summary import OperationMode, SweepSummary

_STATUS_STYLES = {
    RemovalStatus.SUCCEEDED: "green",
    RemovalStatus.ABSENT: "cyan",
    RemovalStatus.SKIPPED: "yellow",
    RemovalStatus.FAILED: "red",
}


class SummaryReporter:
    """Report sweep summaries in various formats (terminal, JSON, YAML)."""

    def build_tables(self, summary: SweepSummary) -> list[Table]:
        """Build the Rich tables describing a run.

        Returns:
            Totals table, then group decisions, outcomes and errors when present
        """
        tables = [self._totals_table(summary)]

        if summary.decisions:
            groups = Table(title="Duplicate Groups")
            groups.add_column("Key", overflow="fold")
            groups.add_column("Keep", style="green")
            groups.add_column("Remove", style="red")
            for decision in summary.decisions:
                groups.add_row(
                    str(render_key(decision.group.key)),
                    decision.survivor.id,
                    ", ".join(decision.removed_ids),
                )
            tables.append(groups)

        if summary.mode == OperationMode.EXECUTE and summary.outcomes:
            outcomes = Table(title="Removal Outcomes")
            outcomes.add_column("Resource")
            outcomes.add_column("Status")
            outcomes.add_column("Reason")
            for outcome in summary.outcomes:
                style = _STATUS_STYLES[outcome.status]
                outcomes.add_row(outcome.resource_id, f"[{style}]{outcome.status.value}[/{style}]", outcome.reason or "")
            tables.append(outcomes)
        elif summary.planned_ids and not summary.decisions:
            planned = Table(title="Planned Removals")
            planned.add_column("Resource")
            for resource_id in summary.planned_ids:
                planned.add_row(resource_id)
            tables.append(planned)

        if summary.errors:
            errors = Table(title="Errors")
            errors.add_column("Resource")
            errors.add_column("Phase")
            errors.add_column("Reason")
            for error in summary.errors:
                errors.add_row(error.resource_id, error.phase.value, error.reason)
            tables.append(errors)

        return tables

    def _totals_table(self, summary: SweepSummary) -> Table:
        title = "Sweep Preview (dry run)" if summary.mode == OperationMode.DRY_RUN else "Sweep Results"
        table = Table(title=title, show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Resources seen", str(summary.resources_seen))
        table.add_row("Duplicate groups", str(summary.groups_found))
        table.add_row("Survivors kept", str(summary.survivors_kept))
        table.add_row("Removals planned", str(summary.removals_planned))
        if summary.protected:
            table.add_row("Protected", str(len(summary.protected)))
        if summary.mode == OperationMode.EXECUTE:
            table.add_row("Removals issued", str(summary.removals_issued))
            table.add_row("Succeeded", f"[green]{summary.removals_succeeded}[/green]")
            table.add_row("Already absent", str(summary.removals_absent))
            table.add_row("Failed", f"[red]{len(summary.removals_failed)}[/red]")
        table.add_row("Extraction errors", str(len(summary.extraction_errors)))
        table.add_row("Predicate errors", str(len(summary.predicate_errors)))
        return table

    def format_terminal(self, summary: SweepSummary) -> str:
        """Format a summary for terminal output using Rich.

        Returns:
            Rendered tables as a string
        """
        console = Console()
        with console.capture() as capture:
            for table in self.build_tables(summary):
                console.print(table)
        return capture.get()

    def export(self, summary: SweepSummary, filepath: str) -> Path:
        """Export a summary to JSON or YAML based on the file extension.

        Args:
            summary: Summary to export
            filepath: Destination; ``.yaml``/``.yml`` for YAML, anything else JSON

        Returns:
            Path written
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = summary.to_dict()

        with open(path, "w") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

        return path
