# cli.py
from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from seqci import settings
from seqci.collaborators import Collaborators
from seqci.collaborators.checkout import remote_url
from seqci.context import ExecutionContext
from seqci.errors import CIError, ConfigurationError
from seqci.executor import PipelineExecutor
from seqci.loader import load_workflow, select_jobs
from seqci.ui.console import Console, get_console, set_console

EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def find_workflow_files(directory: Path = Path(".")) -> list[Path]:
    """
    Find all workflow files in a directory.

    Returns:
        List of Path objects for workflow files
    """
    workflow_files = []

    default_workflow = directory / settings.WORKFLOW
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for path in directory.glob("*_workflow.py"):
        if path != default_workflow:
            workflow_files.append(path)

    return sorted(workflow_files)


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix != ".py":
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  seqci run --workflow my_workflow.py",
            )
            sys.exit(EXIT_CONFIG)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=[
                "Looked for:",
                f"  {settings.WORKFLOW}",
                "  *_workflow.py",
            ],
            suggestion=f"Create a workflow file:\n  {settings.WORKFLOW}\n\nOr specify a workflow explicitly:\n  seqci run --workflow my_workflow.py",
        )
        sys.exit(EXIT_CONFIG)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a workflow explicitly:\n  seqci run --workflow {settings.WORKFLOW}",
        )
        sys.exit(EXIT_CONFIG)

    return workflow_files[0]


def _load(workflow_path: Path, debug: bool):
    console = get_console()
    try:
        return load_workflow(workflow_path)
    except (CIError, FileNotFoundError, ValueError, TypeError) as e:
        console.print_error(
            "Failed to load workflow",
            f"Could not load workflow from {workflow_path}",
            details=str(e).splitlines(),
        )
        if debug:
            console.print_exception(e)
        sys.exit(EXIT_CONFIG)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """seqci: sequential, fail-fast CI pipeline runner."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {settings.WORKFLOW} if present)",
)
@click.option("--job", "job_name", default=None, help="Run only this job")
@click.option("--event", default=None, help="Triggering event (push, pull_request, ...)")
@click.option("--branch", default=None, help="Branch the event applies to")
@click.option(
    "--workspace",
    default=settings.WORKSPACE,
    show_default=True,
    type=click.Path(file_okay=False),
    help="Workspace directory the steps run in",
)
@click.option(
    "--timeout",
    default=settings.STEP_TIMEOUT,
    type=float,
    help="Per-step timeout in seconds (expiry fails the step)",
)
@click.pass_context
def run(ctx, workflow, job_name, event, branch, workspace, timeout):
    """Run the jobs of a workflow, each step in order, stopping at the first failure."""
    console = get_console()
    debug = ctx.obj.get("debug", False)

    workflow_path = discover_workflow(workflow)
    jobs = _load(workflow_path, debug)

    workspace_path = Path(workspace)
    url = remote_url(workspace_path) if workspace_path.is_dir() else None
    repo_name = (
        url.rstrip("/").split("/")[-1].replace(".git", "")
        if url
        else workspace_path.resolve().name
    )

    selected = select_jobs(jobs, event=event, branch=branch, only=job_name, print_plan=debug)
    if not selected:
        console.print_error(
            "No jobs selected",
            "No job in the workflow matches the given filters.",
            details=[f"job={job_name}", f"event={event}", f"branch={branch}"],
        )
        sys.exit(EXIT_CONFIG)

    console.print_run_started(
        repository=repo_name,
        workflow=workflow_path.name,
        job_count=len(selected),
    )

    results = {}
    try:
        for j in selected:
            context = ExecutionContext.fresh(workspace_path, step_timeout=timeout)
            executor = PipelineExecutor(Collaborators.default(), console=console)
            results[j.name] = executor.execute(j, context)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except ConfigurationError as e:
        if results:
            console.print_results(results)
        console.print_error("Invalid job configuration", e.message, details=str(e).splitlines()[1:])
        sys.exit(EXIT_CONFIG)

    console.print_results(results)

    if any(not r.ok for r in results.values()):
        sys.exit(EXIT_FAILED)


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {settings.WORKFLOW} if present)",
)
@click.option("--event", default=None, help="Triggering event (push, pull_request, ...)")
@click.option("--branch", default=None, help="Branch the event applies to")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the plan as JSON")
@click.pass_context
def plan(ctx, workflow, event, branch, as_json):
    """Show which jobs and steps would run, without running anything."""
    console = get_console()
    workflow_path = discover_workflow(workflow)
    jobs = _load(workflow_path, ctx.obj.get("debug", False))

    selected = select_jobs(jobs, event=event, branch=branch, print_plan=not as_json)

    if as_json:
        click.echo(json.dumps([j.to_dict() for j in selected], indent=2))
        return

    for j in selected:
        console.print_header(f"{j.name} (runs-on: {j.runs_on})")
        for i, step in enumerate(j.steps, start=1):
            console.print_info(f"  {i}. [{step.kind}] {step.name}")


if __name__ == "__main__":
    cli()
