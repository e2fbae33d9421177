"""CLI commands for trimwire."""

import json
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from trimwire import __logo__, __version__
from trimwire.config.loader import load_config
from trimwire.formats import FORMATS, detect_format
from trimwire.rewriter import RequestRewriter
from trimwire.state.persistence import StatePersistence
from trimwire.state.store import SessionStore
from trimwire.ui.formatting import format_token_count

app = typer.Typer(
    name="trimwire",
    help=f"{__logo__} trimwire - context pruning for LLM request bodies",
    no_args_is_help=True,
)

console = Console()


def _configure_logging(debug: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")


def _read_body(path: Path) -> dict:
    try:
        body = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(body, dict):
        console.print(f"[red]{path} does not contain a JSON object[/red]")
        raise typer.Exit(1)
    return body


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Verbose logging to stderr"),
) -> None:
    _configure_logging(debug)


@app.command()
def version() -> None:
    """Show the trimwire version."""
    console.print(f"{__logo__} trimwire v{__version__}")


@app.command()
def detect(body_file: Path = typer.Argument(..., help="JSON request body")) -> None:
    """Report which wire format a request body uses."""
    body = _read_body(body_file)
    fmt = detect_format(body)
    if fmt is None:
        supported = ", ".join(f.name for f in FORMATS)
        console.print(f"[yellow]Unrecognized format[/yellow] (supported: {supported})")
        raise typer.Exit(1)

    data = fmt.get_data_array(body) or []
    console.print(f"[green]{fmt.name}[/green]: {len(data)} entries, "
                  f"tool outputs: {'yes' if fmt.has_tool_outputs(data) else 'no'}")


@app.command()
def rewrite(
    body_file: Path = typer.Argument(..., help="JSON request body"),
    session: str = typer.Option(..., "--session", "-s", help="Session id whose state to apply"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result here"),
) -> None:
    """Apply a session's pruning state to a request body."""
    config = load_config()
    store = SessionStore(StatePersistence(config.state_path))
    state = store.get_or_create(session)

    body = _read_body(body_file)
    result = RequestRewriter(config).rewrite(body, state, url=str(body_file))
    if result.format is None:
        console.print("[yellow]Unrecognized format, body left unchanged[/yellow]")

    text = json.dumps(body, indent=2, ensure_ascii=False)
    if output:
        output.write_text(text)
        console.print(
            f"[green]✓[/green] {result.format}: replaced {result.replaced_count} outputs"
            f"{', nudged' if result.nudged else ''} → {output}"
        )
    else:
        typer.echo(text)


@app.command()
def stats(session: str = typer.Argument(..., help="Session id")) -> None:
    """Show persisted pruning statistics for a session."""
    config = load_config()
    state = StatePersistence(config.state_path).load(session)
    if state is None:
        console.print(f"[yellow]No saved state for session {session}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Session {session}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Tokens saved", format_token_count(state.stats.total_prune_tokens))
    table.add_row("Cached tool calls", str(len(state.tool_cache)))
    table.add_row("Pruned tool ids", str(len(set(state.prune.tool_ids))))
    table.add_row("Squash summaries", str(len(state.squash_summaries)))
    table.add_row("Tool results seen", str(state.tracker.result_count))
    table.add_row("Nudge counter", str(state.nudge_counter))
    console.print(table)


if __name__ == "__main__":
    app()
