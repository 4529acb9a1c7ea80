"""Structural analysis of calculator wiring.

These helpers describe a graph without evaluating it. They are used to report
cycles and to reason about how many passes evaluation needs; the evaluator
itself does not depend on them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nodecalc._graph import DependencyGraph

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nodecalc._models import Edge, Node


def build_dependency_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> DependencyGraph[str]:
    """Build a node-id dependency graph from nodes and edges.

    Edges whose endpoints are not both present are left out, since the
    evaluator treats them as unresolved rather than as wiring.
    """
    node_ids = [node.id for node in nodes]
    known = set(node_ids)
    pairs = [(edge.source, edge.target) for edge in edges if edge.source in known and edge.target in known]
    return DependencyGraph.from_edges(pairs, nodes=node_ids)


def has_cycle(nodes: Iterable[Node], edges: Iterable[Edge]) -> bool:
    """Check if the wiring contains a directed cycle."""
    return build_dependency_graph(nodes, edges).has_cycle()


def longest_path_length(nodes: Iterable[Node], edges: Iterable[Edge]) -> int | None:
    """Count the edges on the longest path, or None if the wiring is cyclic.

    Evaluation of an acyclic graph converges within this many passes plus one.
    """
    return build_dependency_graph(nodes, edges).longest_path_length()
