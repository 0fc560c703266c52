"""Entry point for the diagnostics CLI."""

import json
from typing import Optional

import click
from rich.console import Console

from app_factory import create_debugging_controller
from domain.diagnostics import ErrorObservation, classify_error, generate_error_signature
from domain.reflexion import TaskContext, TaskOutcome
from infrastructure.logging import get_logger

from .display import show_analysis, show_classification, show_recorded_fix, show_reflexion_result, show_status

logger = get_logger(__name__)


def _observation(message: str, code: Optional[str], stack: Optional[str]) -> ErrorObservation:
    return ErrorObservation(message=message, code=code or None, stack=stack or None)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """Diagnose failures and learn from task outcomes."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj.setdefault("console", Console())


def _controller(ctx: click.Context):
    if "controller" not in ctx.obj:
        ctx.obj["controller"] = create_debugging_controller(debug=ctx.obj.get("debug", False))
    return ctx.obj["controller"]


@main.command()
@click.argument("message")
@click.option("--code", help="Error code, e.g. ENOENT or 401")
@click.option("--stack", help="Stack trace text")
@click.option("--workspace", help="Workspace whose fix memory to use")
@click.option("--fix", "fix_applied", help="Record this fix for the error")
@click.option("--verified/--unverified", default=True, help="Whether the recorded fix was verified")
@click.option("--json", "as_json", is_flag=True, help="Print the analysis as JSON")
@click.pass_context
def analyze(ctx, message, code, stack, workspace, fix_applied, verified, as_json) -> None:
    """Analyze an error message and print the routed report."""
    controller = _controller(ctx)
    console = ctx.obj["console"]

    analysis = controller.analyze(_observation(message, code, stack), workspace)
    logger.info(f"CLI analysis {analysis.id} ({analysis.category.value})")

    entry = None
    if fix_applied:
        entry = controller.record_fix(analysis, fix_applied, verified=verified, workspace=workspace)

    if as_json:
        click.echo(json.dumps(analysis.to_dict(), indent=2))
        return

    show_analysis(console, analysis, controller.route(analysis))
    if fix_applied:
        show_recorded_fix(console, entry)


@main.command()
@click.argument("message")
@click.option("--code", help="Error code, e.g. ENOENT or 401")
@click.pass_context
def classify(ctx, message, code) -> None:
    """Print the category and signature of an error message."""
    observation = _observation(message, code, None)
    show_classification(ctx.obj["console"], classify_error(observation).value, generate_error_signature(observation))


@main.command()
@click.option("--actor", required=True, help="Agent or persona that ran the task")
@click.option("--task-type", required=True, help="Task type, e.g. deploy or code-review")
@click.option("--description", required=True, help="What the task tried to do")
@click.option("--attempt", default=1, show_default=True, type=int, help="Attempt number")
@click.option("--success/--failure", default=False, help="Whether the task succeeded")
@click.option("--partial", is_flag=True, help="The task partially succeeded")
@click.option("--error", "error_message", help="Error message of a failed task")
@click.option("--code", help="Error code of a failed task")
@click.option("--session-id", help="Session the task belongs to")
@click.pass_context
def outcome(ctx, actor, task_type, description, attempt, success, partial, error_message, code, session_id) -> None:
    """Record a task outcome and show any prior learnings."""
    controller = _controller(ctx)
    context = TaskContext(
        actor=actor,
        task_type=task_type,
        task_description=description,
        session_id=session_id,
        attempt_number=attempt,
    )
    error = _observation(error_message, code, None) if error_message else None
    result = controller.process_outcome(context, TaskOutcome(success=success, partial=partial, error=error))
    show_reflexion_result(ctx.obj["console"], result)
    if result.storage_errors:
        ctx.exit(1)


@main.command()
@click.argument("reflection_id")
@click.option("--helped/--not-helped", required=True, help="Whether the reflection helped on retry")
@click.pass_context
def feedback(ctx, reflection_id, helped) -> None:
    """Report whether a reflection helped."""
    console = ctx.obj["console"]
    if _controller(ctx).record_outcome(reflection_id, helped):
        console.print(f"[green]Updated reflection {reflection_id}[/green]")
        return
    console.print(f"[red]Could not update reflection {reflection_id}[/red]")
    ctx.exit(1)


@main.command()
@click.option("--actor", help="Also summarize this actor")
@click.pass_context
def status(ctx, actor) -> None:
    """Show learning memory statistics."""
    show_status(ctx.obj["console"], _controller(ctx).status(actor))


if __name__ == "__main__":
    main()
