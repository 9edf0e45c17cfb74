"""
Command-line interface for Calc Studio.

Provides commands for:
- Replaying a sequence of keys
- An interactive calculator session
- Listing the accepted key names
- Running the API server
"""

from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from calc_studio.config import settings
from calc_studio.engine import Calculator
from calc_studio.exceptions import TokenError
from calc_studio.logging_config import setup_logging
from calc_studio.models import Snapshot
from calc_studio.tokens import KEY_GROUPS, decode_tokens

app = typer.Typer(
    name="calc-studio",
    help="Calc Studio - scientific calculator engine",
    add_completion=False,
)

console = Console()

QUIT_WORDS = {"quit", "exit", "q"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine events"),
):
    """Configure logging before any command runs."""
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_json)


# =============================================================================
# Calculator Commands
# =============================================================================

@app.command()
def run(
    keys: List[str] = typer.Argument(..., help="Key names, e.g. 3 + 4 '*' 2 ="),
    history: bool = typer.Option(True, "--history/--no-history", help="Show the history table"),
):
    """Replay keys into a fresh calculator and print the result."""
    calculator = Calculator()
    try:
        snapshot = calculator.press_many(keys)
    except TokenError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(1)

    _render(snapshot)
    if history:
        _render_history(snapshot)


@app.command()
def repl():
    """Start an interactive calculator session."""
    calculator = Calculator()
    console.print("[bold]Calc Studio[/] - type key names separated by spaces, 'keys' for help, 'quit' to leave")
    _render(calculator.snapshot())

    while True:
        try:
            line = console.input("[bold cyan]calc>[/] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        words = line.strip().lower()
        if words in QUIT_WORDS:
            break
        if words == "keys":
            console.print(_keys_table())
            continue
        if words == "history":
            _render_history(calculator.snapshot())
            continue

        try:
            calculator.press_many(decode_tokens(line))
        except TokenError as e:
            console.print(f"[red]{escape(str(e))}[/]")
            continue
        _render(calculator.snapshot())


@app.command()
def keys():
    """List the accepted key names."""
    console.print(_keys_table())


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
):
    """Start the Calc Studio API server."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting Calc Studio server on {host}:{port}[/]")

    uvicorn.run(
        "calc_studio.api:app",
        host=host,
        port=port,
        reload=reload,
    )


# =============================================================================
# Helpers
# =============================================================================

def _render(snapshot: Snapshot) -> None:
    """Print the display panel."""
    lines = []
    if snapshot.pending_expression:
        lines.append(f"[dim]{snapshot.pending_expression}[/]")
    color = "red" if snapshot.is_error else "bold white"
    lines.append(f"[{color}]{snapshot.display}[/]")
    if snapshot.has_memory:
        lines.append(f"[blue]M: {snapshot.memory_display}[/]")

    console.print(Panel("\n".join(lines), expand=False))


def _render_history(snapshot: Snapshot) -> None:
    if not snapshot.history:
        console.print("[yellow]No calculations yet[/]")
        return

    table = Table(title="History")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Expression", style="cyan")
    table.add_column("Result", style="green")

    for index, entry in enumerate(snapshot.history):
        table.add_row(str(index), entry.expression, entry.result)

    console.print(table)


def _keys_table() -> Table:
    table = Table(title="Keys")
    table.add_column("Action", style="cyan")
    table.add_column("Names", style="green")

    table.add_row("Digit", "0 1 2 3 4 5 6 7 8 9")
    for description, _, names in KEY_GROUPS:
        table.add_row(description, " ".join(names))
    table.add_row("Recall history entry", "recall:<n>  h<n>")

    return table


if __name__ == "__main__":
    app()
