"""Evaluation engine module for nodecalc.

This module provides pure functions for evaluating calculator graphs.
The evaluation engine takes nodes and edges and produces nodes with fresh
computed values, without side effects.

Key types:
- EvaluationResult: Evaluated nodes plus pass count and convergence flag
- evaluate_graph: Pure fixed-point evaluation of a graph
- evaluate: Same, returning only the evaluated nodes
- build_dependency_graph / has_cycle / longest_path_length: Wiring analysis
"""

from ._analysis import build_dependency_graph, has_cycle, longest_path_length
from ._engine import DEFAULT_MAX_PASSES, EvaluationResult, evaluate, evaluate_graph
from ._operations import apply_operation
from ._resolution import find_inbound_edge, index_inbound, resolve_input

__all__ = [
    "DEFAULT_MAX_PASSES",
    "EvaluationResult",
    "apply_operation",
    "build_dependency_graph",
    "evaluate",
    "evaluate_graph",
    "find_inbound_edge",
    "has_cycle",
    "index_inbound",
    "longest_path_length",
    "resolve_input",
]
