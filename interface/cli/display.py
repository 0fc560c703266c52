"""Console output and formatting helpers for the diagnostics CLI."""

from typing import Any, Dict

from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from domain.diagnostics import Analysis, ErrorResponse, FixMemoryEntry
from domain.reflexion import ReflexionResult

CATEGORY_STYLES = {
    "NETWORK": "cyan",
    "AUTH": "magenta",
    "SYNTAX": "yellow",
    "RUNTIME": "red",
    "RESOURCE": "blue",
    "CONFIG": "green",
    "DEPENDENCY": "bright_blue",
    "STATE": "bright_red",
    "UNKNOWN": "dim",
}


def category_label(category: str) -> str:
    style = CATEGORY_STYLES.get(category, "white")
    return f"[{style}]{category}[/{style}]"


def show_classification(console, category: str, signature: str) -> None:
    """Print a category and signature pair."""
    console.print(f"Category:  {category_label(category)}")
    console.print(f"Signature: {signature}", markup=False, highlight=False)


def show_analysis(console, analysis: Analysis, response: ErrorResponse) -> None:
    """Display a routed analysis."""
    console.print(
        f"🧭 {escape(response.mission)} "
        f"(primary: [bold]{response.primary_persona.value}[/bold], "
        f"secondary: {response.secondary_persona.value})"
    )
    console.print()
    console.print(Markdown(response.report))

    if analysis.suggested_fixes:
        table = Table(title="Suggested Fixes", show_header=True, header_style="bold magenta")
        table.add_column("Confidence", justify="right", width=10)
        table.add_column("Fix", width=60)
        for fix in analysis.suggested_fixes:
            text = escape(fix.description)
            if fix.code:
                text += f"\n[dim]{escape(fix.code)}[/dim]"
            table.add_row(f"{fix.confidence}%", text)
        console.print(table)


def show_recorded_fix(console, entry: FixMemoryEntry | None) -> None:
    if entry is None:
        console.print("[yellow]Fix not recorded: only verified fixes are remembered.[/yellow]")
        return
    console.print(f"[green]Remembered fix {entry.id}[/green] for {escape(entry.signature)}", highlight=False)


def show_reflexion_result(console, result: ReflexionResult) -> None:
    """Display what the reflexion loop did with an outcome."""
    console.print(f"Episodic record: {result.episodic_id or '-'}")
    if result.reflection is not None:
        reflection = result.reflection
        console.print(f"Reflection:      {result.reflection_id}")
        console.print(f"Root cause:      {reflection.root_cause}", markup=False)
        console.print(
            f"Correction:      {reflection.correction_action} "
            f"({reflection.correction_confidence:.0%} confidence)",
            markup=False,
        )
    console.print(f"Retry:           {'yes' if result.should_retry else 'no'}")
    if result.injected_context:
        console.print()
        console.print(result.injected_context, markup=False)
    for error in result.storage_errors:
        console.print(f"[red]Storage error:[/red] {escape(error)}")


def show_status(console, status: Dict[str, Any]) -> None:
    """Display memory statistics as a table."""
    memory = status["memory"]
    table = Table(title="Learning Memory", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="dim", width=28)
    table.add_column("Value", justify="right", width=12)
    table.add_row("Episodic records", str(memory.episodic_count))
    table.add_row("Reflections", str(memory.reflection_count))
    table.add_row("Average effectiveness", f"{memory.average_effectiveness:.0%}")
    table.add_row("Fix memory entries", str(status["fix_memory_entries"]))
    console.print(table)

    actor = status.get("actor")
    if actor is not None:
        actor_table = Table(title=f"Actor: {actor.actor}", show_header=True, header_style="bold magenta")
        actor_table.add_column("Metric", style="dim", width=28)
        actor_table.add_column("Value", justify="right", width=26)
        actor_table.add_row("Episodic records", str(actor.episodic_count))
        actor_table.add_row("Failures", str(actor.failure_count))
        actor_table.add_row("Reflections", str(actor.reflection_count))
        actor_table.add_row("Last activity", actor.last_activity or "never")
        console.print(actor_table)
