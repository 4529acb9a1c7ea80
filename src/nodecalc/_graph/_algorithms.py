"""Graph algorithms over successor mappings."""

from collections import defaultdict, deque
from collections.abc import Collection, Hashable, Mapping
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


def topological_sort(successors: Mapping[T, Collection[T]]) -> list[T]:
    """Sort a graph topologically (sources before the nodes they feed).

    Args:
        successors: Mapping from node to the nodes it feeds.
            An edge (a -> b) means "b reads a".

    Returns:
        List of nodes in topological order.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> topological_sort({"1": ["3"], "2": ["3"], "3": ["4"], "4": []})
        ['1', '2', '3', '4']

    """
    indegree: defaultdict[T, int] = defaultdict(int)
    for node, targets in successors.items():
        indegree[node] = indegree.get(node, 0)
        for target in targets:
            indegree[target] += 1

    queue = deque([node for node, deg in indegree.items() if deg == 0])
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, []):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        msg = "Cycle detected in graph"
        raise ValueError(msg)

    return order


def longest_path_length(successors: Mapping[T, Collection[T]]) -> int:
    """Count the edges on the longest directed path of an acyclic graph.

    Args:
        successors: Mapping from node to the nodes it feeds.

    Returns:
        Number of edges on the longest path, 0 for graphs without edges.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> longest_path_length({"1": ["3"], "2": ["3"], "3": ["4"], "4": []})
        2

    """
    depth: dict[T, int] = {}
    for node in topological_sort(successors):
        current = depth.setdefault(node, 0)
        for successor in successors.get(node, []):
            depth[successor] = max(depth.get(successor, 0), current + 1)
    return max(depth.values(), default=0)
