"""Rich rendering of calculator graphs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from nodecalc._eval_engine import index_inbound
from nodecalc._models import NodeKind
from nodecalc._values import is_taint

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rich.console import Console

    from nodecalc._eval_engine import EvaluationResult
    from nodecalc._models import Edge, GraphSnapshot, Node


def format_value(value: float | None) -> str:
    """Format a value for display, marking unresolved values and taint."""
    if value is None:
        return "[dim]unresolved[/dim]"
    if is_taint(value):
        return "[red]NaN[/red]"
    return f"{value:g}"


def describe_node(node: Node) -> str:
    """Short label such as ``3 operator (+)``."""
    label = f"{escape(node.id)} {node.kind}"
    if node.kind == NodeKind.OPERATOR and node.operation is not None:
        label += f" ({node.operation.symbol})"
    return label


def node_value(node: Node) -> float | None:
    """The value a node displays: entered for inputs, computed otherwise."""
    return node.entered_value if node.has_entered_value else node.computed_value


def render_node_table(graph: GraphSnapshot, console: Console) -> None:
    """Render the nodes of a graph as a Rich table.

    Args:
        graph: The graph to render.
        console: Rich Console to output to.

    """
    if not graph.nodes:
        console.print("[dim]The graph has no nodes[/dim]")
        return

    inbound = index_inbound(graph.edges)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Kind")
    table.add_column("Inputs", style="dim")
    table.add_column("Value", justify="right")

    for node in graph.nodes:
        kind_style = _get_kind_style(node.kind)
        kind = str(node.kind)
        if node.kind == NodeKind.OPERATOR and node.operation is not None:
            kind += f" {node.operation.symbol}"
        wires = ", ".join(
            f"{escape(edge.source)}→{edge.target_port}" if edge.target_port else escape(edge.source)
            for edge in inbound.get(node.id, ())
        )
        table.add_row(
            escape(node.id),
            f"[{kind_style}]{kind}[/{kind_style}]",
            wires,
            format_value(node_value(node)),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(graph.nodes)} nodes, {len(graph.edges)} edges[/dim]")


def render_evaluation_summary(result: EvaluationResult, console: Console) -> None:
    """Report how evaluation finished."""
    if result.converged:
        console.print(f"[dim]Converged after {result.passes} pass(es)[/dim]")
    else:
        console.print(f"[yellow]Stopped at the {result.max_passes} pass ceiling (cyclic wiring?)[/yellow]")


def render_output_trees(graph: GraphSnapshot, console: Console) -> None:
    """Render the upstream tree of every output node.

    A node that is already on the current branch is shown once more and not
    expanded, so cyclic wiring still renders.

    Args:
        graph: The graph to render.
        console: Rich Console to output to.

    """
    nodes = {node.id: node for node in graph.nodes}
    inbound = index_inbound(graph.edges)

    outputs = [node for node in graph.nodes if node.kind == NodeKind.OUTPUT]
    if not outputs:
        console.print("[dim]No output nodes[/dim]")
        return

    for output in outputs:
        rich_tree = Tree(f"[bold]{describe_node(output)}[/bold] = {format_value(output.computed_value)}")
        _add_tree_children(rich_tree, output.id, nodes, inbound, frozenset({output.id}))
        console.print(rich_tree)


def _add_tree_children(
    parent: Tree,
    node_id: str,
    nodes: Mapping[str, Node],
    inbound: Mapping[str, tuple[Edge, ...]],
    branch: frozenset[str],
) -> None:
    """Recursively add the sources feeding a node to a Rich Tree."""
    for edge in inbound.get(node_id, ()):
        port = f"{edge.target_port}: " if edge.target_port else ""
        source = nodes.get(edge.source)
        if source is None:
            parent.add(f"{port}[red]missing node {escape(edge.source)}[/red]")
            continue
        label = f"{port}{describe_node(source)} = {format_value(node_value(source))}"
        if source.id in branch:
            parent.add(f"{label} [yellow](cycle)[/yellow]")
            continue
        child = parent.add(label)
        _add_tree_children(child, source.id, nodes, inbound, branch | {source.id})


def _get_kind_style(kind: NodeKind) -> str:
    """Get Rich style string for a node kind.

    Args:
        kind: The NodeKind.

    Returns:
        Rich style string.

    """
    match kind:
        case NodeKind.INPUT:
            return "blue"
        case NodeKind.OPERATOR:
            return "green"
        case NodeKind.OUTPUT:
            return "yellow"
