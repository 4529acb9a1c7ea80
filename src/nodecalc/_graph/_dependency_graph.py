"""Generic dependency graph abstraction."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from ._algorithms import longest_path_length, topological_sort

T = TypeVar("T")

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class DependencyGraph(Generic[T]):
    """A directed graph of "reads from" relationships between nodes.

    Unlike the evaluator, this structure is only used for analysis: it can
    answer whether the wiring is cyclic and how deep it is, but the
    evaluator never needs an ordering from it.

    - predecessors[b] = {a} means "b reads a"
    - successors[a] = {b} means "a feeds b"

    Attributes:
        _predecessors: Mapping from node to the nodes it reads.
        _successors: Mapping from node to the nodes it feeds.

    """

    _predecessors: dict[T, frozenset[T]] = field(default_factory=dict)
    _successors: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[T, T]], nodes: Iterable[T] = ()) -> DependencyGraph[T]:
        """Build a graph from (source, target) pairs.

        Args:
            edges: Pairs where (a, b) means "b reads a".
            nodes: Extra nodes to include even when no edge touches them.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_edges([("1", "3"), ("3", "4")], nodes=["5"])
            >>> graph.predecessors("3")
            frozenset({'1'})

        """
        predecessors: defaultdict[T, set[T]] = defaultdict(set)
        successors: defaultdict[T, set[T]] = defaultdict(set)

        for node in nodes:
            predecessors.setdefault(node, set())
            successors.setdefault(node, set())

        for src, dst in edges:
            predecessors[dst].add(src)
            successors[src].add(dst)
            predecessors.setdefault(src, set())
            successors.setdefault(dst, set())

        return cls(
            _predecessors={k: frozenset(v) for k, v in predecessors.items()},
            _successors={k: frozenset(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        """All nodes in the graph."""
        return frozenset(self._predecessors.keys()) | frozenset(self._successors.keys())

    def predecessors(self, node: T) -> frozenset[T]:
        """Get the nodes that directly feed a node."""
        return self._predecessors.get(node, frozenset())

    def successors(self, node: T) -> frozenset[T]:
        """Get the nodes that a node directly feeds."""
        return self._successors.get(node, frozenset())

    def topological_order(self) -> list[T]:
        """Return nodes with sources before the nodes they feed.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return topological_sort(dict(self._successors))

    def has_cycle(self) -> bool:
        """Check if the graph contains a directed cycle."""
        try:
            self.topological_order()
        except ValueError:
            return True
        return False

    def longest_path_length(self) -> int | None:
        """Count the edges on the longest path, or None if the graph is cyclic."""
        try:
            return longest_path_length(dict(self._successors))
        except ValueError:
            return None

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self.nodes)

    def __contains__(self, node: T) -> bool:
        """Check if a node is in the graph."""
        return node in self._predecessors or node in self._successors
