import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nodecalc._editor import EditError, GraphEditor, PortPolicy
from nodecalc._eval_engine import longest_path_length
from nodecalc._history import EditHistory

from .config import ConfigError, NodecalcConfig, get_config
from .render import render_evaluation_summary, render_node_table, render_output_trees
from .script import HistoryAction, ScriptError, ScriptStep, parse_script

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Nodecalc CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> NodecalcConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_script(script: Path) -> list[ScriptStep]:
    err_console.print(f"[cyan]Loading script from:[/cyan] {script}")
    try:
        text = script.read_text(encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]✗ Cannot read {script}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    try:
        return parse_script(text)
    except ScriptError as e:
        err_console.print(f"[red]✗ {script}:{e.line}: {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e


def _run_step(editor: GraphEditor, step: ScriptStep) -> None:
    match step.action:
        case HistoryAction.UNDO:
            if not editor.undo():
                logger.info("Line %d: nothing to undo", step.line)
        case HistoryAction.REDO:
            if not editor.redo():
                logger.info("Line %d: nothing to redo", step.line)
        case command:
            created = editor.dispatch(command)
            if created is not None:
                logger.info("Line %d: created %s", step.line, created)


@app.command()
def demo(
    *,
    tree: Annotated[
        bool,
        typer.Option("--tree", help="Also show the tree feeding each output"),
    ] = False,
) -> None:
    """Evaluate the built-in 10 + 5 calculator."""
    config = _load_config()
    editor = GraphEditor.from_default(max_passes=config.max_passes)

    render_node_table(editor.graph, out_console)
    if tree:
        out_console.print()
        render_output_trees(editor.graph, out_console)


@app.command()
def run(
    script: Annotated[
        Path,
        typer.Argument(help="Path to an edit-command script"),
    ],
    *,
    from_default: Annotated[
        bool,
        typer.Option("--from-default", help="Start from the built-in calculator instead of an empty graph"),
    ] = False,
    tree: Annotated[
        bool,
        typer.Option("--tree", help="Also show the tree feeding each output"),
    ] = False,
    max_passes: Annotated[
        int | None,
        typer.Option("--max-passes", min=1, help="Evaluation pass ceiling (overrides config)"),
    ] = None,
    port_policy: Annotated[
        PortPolicy | None,
        typer.Option("--port-policy", help="What connecting into a wired port does (overrides config)"),
    ] = None,
) -> None:
    """Apply an edit-command script and show the resulting graph."""
    config = _load_config()
    err_console.print()

    steps = _load_script(script)

    options = {
        "history": EditHistory(limit=config.history_limit),
        "max_passes": max_passes if max_passes is not None else config.max_passes,
        "port_policy": port_policy if port_policy is not None else config.port_policy,
    }
    editor = GraphEditor.from_default(**options) if from_default else GraphEditor(**options)  # type: ignore[arg-type]

    err_console.print(f"[cyan]Applying {len(steps)} command(s)...[/cyan]")
    for step in steps:
        try:
            _run_step(editor, step)
        except EditError as e:
            err_console.print(f"[red]✗ {script}:{step.line}: {escape(step.text)}[/red]")
            err_console.print(f"  [red]{escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
    err_console.print()

    render_node_table(editor.graph, out_console)
    if editor.last_result is not None:
        render_evaluation_summary(editor.last_result, out_console)
    if tree:
        out_console.print()
        render_output_trees(editor.graph, out_console)

    history = editor.history
    err_console.print()
    err_console.print(f"[dim]History: {len(history.past)} undo step(s), {len(history.future)} redo step(s)[/dim]")

    depth = longest_path_length(editor.nodes, editor.edges)
    if depth is None:
        err_console.print("[yellow]⚠ The graph contains a cycle[/yellow]")
    else:
        logger.debug("Longest path: %d edge(s)", depth)


@app.command()
def check(
    script: Annotated[
        Path,
        typer.Argument(help="Path to an edit-command script"),
    ],
) -> None:
    """Parse a script and list its commands without applying them."""
    err_console.print()
    steps = _load_script(script)
    err_console.print()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Command")

    for step in steps:
        table.add_row(str(step.line), escape(step.text))

    err_console.print(
        Panel(
            table,
            title=f"[bold]Script: {escape(script.name)}[/bold]",
            subtitle=f"[dim]{len(steps)} commands[/dim]",
            border_style="cyan",
        ),
    )

    err_console.print()
    err_console.print("[green]✓ Script is valid[/green]")
    err_console.print()


def main() -> None:
    app()
