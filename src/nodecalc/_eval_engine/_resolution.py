"""Value resolution utilities for the evaluation engine."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from nodecalc._models import Edge, Node, Port


def index_inbound(edges: Iterable[Edge]) -> dict[str, tuple[Edge, ...]]:
    """Group edges by target node id, keeping their original order.

    Args:
        edges: The edge collection, in edge order.

    Returns:
        Mapping from target node id to the edges pointing at it.

    """
    inbound: defaultdict[str, list[Edge]] = defaultdict(list)
    for edge in edges:
        inbound[edge.target].append(edge)
    return {target: tuple(group) for target, group in inbound.items()}


def find_inbound_edge(inbound: Sequence[Edge], port: Port | None) -> Edge | None:
    """Pick the edge that feeds a port.

    When several edges feed the same port, the first one in edge order wins.
    A port-less lookup accepts any edge pointing at the target.

    Args:
        inbound: Edges pointing at the target, in edge order.
        port: The operand slot to look up, or None for single-input nodes.

    Returns:
        The matching edge, or None if the port is not wired.

    """
    for edge in inbound:
        if port is None or edge.target_port == port:
            return edge
    return None


def resolve_input(
    inbound: Sequence[Edge],
    port: Port | None,
    nodes: Mapping[str, Node],
) -> float | None:
    """Resolve the value flowing into a port.

    Input sources contribute their entered value; any other source contributes
    its current computed value, which may itself still be unresolved.

    Args:
        inbound: Edges pointing at the target, in edge order.
        port: The operand slot to look up, or None for single-input nodes.
        nodes: Current node state by id.

    Returns:
        The resolved value, or None when nothing is wired or the source is missing.

    """
    edge = find_inbound_edge(inbound, port)
    if edge is None:
        return None

    source = nodes.get(edge.source)
    if source is None:
        return None

    if source.has_entered_value:
        return source.entered_value
    return source.computed_value
