"""Graph module providing dependency graph abstractions.

This module contains:
- DependencyGraph[T]: A generic, immutable directed graph
- topological_sort: Ordering nodes so that sources come first
- longest_path_length: Depth of an acyclic graph in edges
"""

from ._algorithms import longest_path_length, topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "longest_path_length", "topological_sort"]
