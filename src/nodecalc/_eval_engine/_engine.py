"""Core evaluation engine for calculator graphs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nodecalc._models import Node, NodeKind, Port
from nodecalc._values import values_equal

from ._operations import apply_operation
from ._resolution import index_inbound, resolve_input

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from nodecalc._models import Edge

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 50


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Result of evaluating a calculator graph.

    Evaluation never fails: unresolved inputs, taint and cycles all show up as
    values. Whether the pass ceiling stopped the run is recorded here so it
    can be observed without being treated as an error.

    Attributes:
        nodes: The evaluated nodes, in the order they were given.
        passes: Number of full passes that were run.
        converged: True if the last pass changed no computed value.
        max_passes: The pass ceiling that applied to this run.

    """

    nodes: tuple[Node, ...]
    passes: int
    converged: bool
    max_passes: int = DEFAULT_MAX_PASSES

    @property
    def hit_ceiling(self) -> bool:
        """Check if evaluation stopped at the pass ceiling without converging."""
        return not self.converged

    @property
    def values(self) -> dict[str, float | None]:
        """Computed values of every non-input node by id."""
        return {node.id: node.computed_value for node in self.nodes if not node.has_entered_value}

    def get_value(self, node_id: str) -> float | None:
        """Get the computed value of a node.

        Raises:
            KeyError: If no non-input node has the given id.

        """
        return self.values[node_id]

    def changed_from(self, previous: Iterable[Node]) -> list[str]:
        """List the ids whose computed value differs from a previous node set.

        Nodes absent from ``previous`` are not reported.
        """
        before = {node.id: node.computed_value for node in previous}
        return [
            node.id
            for node in self.nodes
            if node.id in before and not values_equal(before[node.id], node.computed_value)
        ]


def _compute_node_value(
    node: Node,
    inbound: Mapping[str, tuple[Edge, ...]],
    nodes: Mapping[str, Node],
) -> float | None:
    edges = inbound.get(node.id, ())

    if node.kind == NodeKind.OUTPUT:
        return resolve_input(edges, None, nodes)

    a = resolve_input(edges, Port.A, nodes)
    b = resolve_input(edges, Port.B, nodes)
    if a is None or b is None or node.operation is None:
        return None
    return apply_operation(node.operation, a, b)


def evaluate_graph(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    *,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> EvaluationResult:
    """Evaluate a calculator graph to a fixed point.

    This is a pure function. Wiring is unordered and may be cyclic, so instead
    of sorting the graph it repeats full passes over every non-input node,
    recomputing each value from the current state, until a pass changes
    nothing or ``max_passes`` passes have run. Values written earlier in a pass
    are visible to nodes visited later in the same pass.

    Args:
        nodes: The node collection. Input nodes are read, never written.
        edges: The edge collection, in edge order.
        max_passes: Ceiling on the number of full passes.

    Returns:
        EvaluationResult containing the evaluated nodes and run statistics.

    Raises:
        ValueError: If max_passes is less than 1.

    Example:
        >>> result = evaluate_graph(
        ...     [Node.input("1", 10), Node.input("2", 5), Node.operator("3", Operation.ADD), Node.output("4")],
        ...     [Edge(id="e1", source="1", target="3", target_port=Port.A),
        ...      Edge(id="e2", source="2", target="3", target_port=Port.B),
        ...      Edge(id="e3", source="3", target="4")],
        ... )
        >>> result.values
        {'3': 15.0, '4': 15.0}

    """
    if max_passes < 1:
        msg = f"max_passes must be at least 1, got {max_passes}"
        raise ValueError(msg)

    original = tuple(nodes)
    working: dict[str, Node] = {node.id: node for node in original}
    inbound = index_inbound(edges)
    computed_ids = [node_id for node_id, node in working.items() if not node.has_entered_value]

    passes = 0
    changed = True
    while changed and passes < max_passes:
        changed = False
        passes += 1

        for node_id in computed_ids:
            node = working[node_id]
            new_value = _compute_node_value(node, inbound, working)
            if not values_equal(node.computed_value, new_value):
                working[node_id] = node.with_computed_value(new_value)
                changed = True

    converged = not changed
    if converged:
        logger.debug("Evaluation converged after %d pass(es) over %d node(s)", passes, len(working))
    else:
        logger.info("Evaluation stopped at the %d pass ceiling without converging", max_passes)

    return EvaluationResult(
        nodes=tuple(working[node.id] for node in original),
        passes=passes,
        converged=converged,
        max_passes=max_passes,
    )


def evaluate(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    *,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> tuple[Node, ...]:
    """Evaluate a graph and return only the evaluated nodes.

    See evaluate_graph for the semantics.
    """
    return evaluate_graph(nodes, edges, max_passes=max_passes).nodes
