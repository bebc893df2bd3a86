#!/usr/bin/env python3
"""Smart Orchestrate CLI - run a business request through a role-based workflow.

Usage:
    # Full project workflow
    python main.py "Build a login page with OAuth"

    # Read the request from a file and pin a workflow
    python main.py --input ./request.md --workflow feature --quality high

    # Continue an existing project with external knowledge enrichment
    python main.py "Add rate limiting" --project-id project_acme --enrich --goal "Protect the API"
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from contracts import QualityLevel, RoleName, WorkflowResult
from orchestrator import run_orchestration
from providers import list_providers as get_available_sources
from workflows import WORKFLOW_TEMPLATES
from config import settings


console = Console()

GATE_STYLES = {"pass": "green", "warning": "yellow", "fail": "red"}


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def read_request(request: Optional[str], input_path: Optional[str]) -> str:
    """Request text from the argument, or from a file when --input is given."""
    if input_path:
        path = Path(input_path)
        if not path.is_file():
            raise click.BadParameter(f"not a file: {input_path}", param_hint="--input")
        return path.read_text(encoding="utf-8", errors="replace")
    return request or ""


def render_workflows() -> None:
    table = Table(title="Workflow Templates")
    table.add_column("Name", style="bold")
    table.add_column("Phases")
    table.add_column("Description", style="dim")
    for name, template in WORKFLOW_TEMPLATES.items():
        phases = " → ".join(
            f"{spec.name}{'*' if spec.blocking else ''}" for spec in template.phases
        )
        table.add_row(name, phases, template.description)
    console.print(table)
    console.print("[dim]* blocking phase[/dim]")


def render_sources() -> None:
    console.print("[bold]Knowledge Sources:[/bold]\n")
    for name, available in get_available_sources().items():
        status = "[green]✓ Ready[/green]" if available else "[red]✗ Unavailable[/red]"
        console.print(f"  {name:12} {status}")
    console.print("\n[dim]Set API keys via environment variables:[/dim]")
    console.print("  SMART_ORCHESTRATE_CONTEXT7_API_KEY, SMART_ORCHESTRATE_WEBSEARCH_API_KEY")


def render_result(result: WorkflowResult) -> None:
    """Pretty-print a workflow result."""
    console.print("\n" + "=" * 60)
    if result.workflow is None:
        console.print(f"[red]Error:[/red] {escape(str(result.error))}")
        return

    status_style = "green" if result.success else "red"
    console.print(f"[{status_style}]Status:[/{status_style}] {result.workflow.status.value}")
    console.print(f"[green]Orchestration ID:[/green] {result.orchestration_id}")
    if result.business_context:
        console.print(
            f"[green]Project:[/green] {result.business_context.project_id} "
            f"(context v{result.business_context.version})"
        )

    table = Table(title=f"{result.workflow.template} workflow")
    table.add_column("#", justify="right")
    table.add_column("Phase")
    table.add_column("Role")
    table.add_column("Gate")
    table.add_column("Deliverables", style="dim")
    table.add_column("ms", justify="right")
    results = {r.phase_id: r for r in result.workflow.phase_results}
    for index, phase in enumerate(result.workflow.phases, start=1):
        phase_result = results.get(phase.id)
        if phase_result is None:
            table.add_row(str(index), phase.name, phase.role.value, "[dim]not run[/dim]", "", "")
            continue
        outcome = phase_result.gate.outcome.value if phase_result.gate else "-"
        style = GATE_STYLES.get(outcome, "white")
        table.add_row(
            str(index),
            phase.name + (" *" if phase.blocking else ""),
            phase.role.value,
            f"[{style}]{outcome}[/{style}]",
            ", ".join(phase_result.deliverables),
            f"{phase_result.duration_ms:.1f}",
        )
    console.print(table)

    metrics = result.technical_metrics
    if metrics:
        console.print("\n[bold]Metrics:[/bold]")
        console.print(f"  Response time:        {metrics.response_time:.1f} ms")
        console.print(f"  Context merges:       {metrics.context_merges}")
        console.print(f"  Context preservation: {metrics.context_preservation_accuracy:.0%}")
        console.print(f"  Business alignment:   {metrics.business_alignment_score:.0f}/100")
        console.print(f"  Phase success rate:   {metrics.phase_success_rate:.0%}")

    value = result.business_value
    if value:
        console.print("\n[bold]Business Value:[/bold]")
        console.print(f"  Cost prevention: ${value.cost_prevention:,.0f}")
        console.print(f"  Time saved:      {value.time_saved:.1f} h")

    if result.external_knowledge:
        console.print(f"\n[bold]External knowledge ({len(result.external_knowledge)}):[/bold]")
        for item in result.external_knowledge[:5]:
            console.print(escape(f"  - [{item.source.value}] {item.title} ({item.relevance_score:.2f})"))

    if result.warnings:
        console.print(f"\n[yellow]Warnings ({len(result.warnings)}):[/yellow]")
        for warning in result.warnings:
            console.print(f"  - {escape(warning)}")

    if result.error:
        console.print(f"\n[red]Error ({result.error_type}):[/red] {escape(result.error)}")

    console.print("\n[bold]Next steps:[/bold]")
    for step in result.next_steps:
        label = escape(f"[{step.priority}] {step.step}")
        console.print(f"  - {label} [dim]({step.role.value}, {step.estimated_time})[/dim]")
    console.print("\n" + "=" * 60)


@click.command()
@click.argument("request", required=False)
@click.option(
    "--input", "-i", "input_path",
    help="Read the business request from a file"
)
@click.option(
    "--workflow", "-w",
    type=click.Choice(list(WORKFLOW_TEMPLATES)),
    default=settings.default_workflow,
    help=f"Workflow template (default: {settings.default_workflow})"
)
@click.option(
    "--role", "-r",
    type=click.Choice([r.value for r in RoleName]),
    default=None,
    help="Pin every phase to one role"
)
@click.option(
    "--quality", "-q",
    type=click.Choice([q.value for q in QualityLevel]),
    default=settings.default_quality_level,
    help=f"Quality level for the gates (default: {settings.default_quality_level})"
)
@click.option("--project-id", "-p", default=None, help="Continue an existing project")
@click.option("--goal", "-g", "goals", multiple=True, help="Business goal (repeatable)")
@click.option("--requirement", "requirements", multiple=True, help="Requirement (repeatable)")
@click.option("--skip", "skip_phases", multiple=True, help="Phase id to skip (repeatable)")
@click.option(
    "--enrich/--no-enrich",
    default=False,
    help="Gather external knowledge for every phase"
)
@click.option("--context7/--no-context7", default=True, help="Use Context7 documentation")
@click.option("--web-search/--no-web-search", default=True, help="Use web search")
@click.option("--memory/--no-memory", default=True, help="Use lessons learned")
@click.option("--timeout", type=float, default=None, help="Overall run deadline in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
@click.option("--list-workflows", is_flag=True, help="List workflow templates and exit")
@click.option("--list-sources", is_flag=True, help="List knowledge sources and exit")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(
    request: Optional[str],
    input_path: Optional[str],
    workflow: str,
    role: Optional[str],
    quality: str,
    project_id: Optional[str],
    goals: Tuple[str, ...],
    requirements: Tuple[str, ...],
    skip_phases: Tuple[str, ...],
    enrich: bool,
    context7: bool,
    web_search: bool,
    memory: bool,
    timeout: Optional[float],
    as_json: bool,
    list_workflows: bool,
    list_sources: bool,
    verbose: bool,
):
    """Smart Orchestrate: drive a business request through role-based phases.

    Each phase is executed by its role, checked by a quality gate and recorded
    in the project's shared business context.
    """
    # JSON output keeps the terminal free of progress logs
    configure_logging(verbose, quiet=as_json)

    if list_workflows:
        render_workflows()
        return
    if list_sources:
        render_sources()
        return

    request_text = read_request(request, input_path)
    if not request_text.strip():
        console.print("[red]Error: a request (argument or --input) is required[/red]")
        sys.exit(1)

    if not as_json:
        console.print(Panel.fit(
            "[bold blue]Smart Orchestrate[/bold blue]\n"
            "[dim]Role-based workflow orchestration[/dim]",
            border_style="blue"
        ))
        console.print(f"\n[dim]Workflow:[/dim] {workflow}  [dim]Quality:[/dim] {quality}")

    sources = {"use_context7": context7, "use_web_search": web_search, "use_memory": memory}
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=as_json,
    ) as progress:
        task = progress.add_task("Orchestrating...", total=None)
        result = run_orchestration(
            request_text,
            workflow=workflow,
            role=role,
            quality_level=quality,
            project_id=project_id,
            goals=list(goals),
            requirements=list(requirements),
            enrich=enrich,
            sources=sources,
            skip_phases=list(skip_phases),
            timeout_seconds=timeout,
        )
        progress.update(task, completed=True)

    if as_json:
        click.echo(json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2))
    else:
        render_result(result)

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
