"""Live-evaluating node calculator: graph evaluation engine and edit history."""

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_MAX_PASSES",
    "TAINT",
    "AddNode",
    "Command",
    "Connect",
    "CounterIdGenerator",
    "DependencyGraph",
    "Disconnect",
    "Edge",
    "EditError",
    "EditHistory",
    "EvaluationResult",
    "GraphEditor",
    "GraphSnapshot",
    "IdGenerator",
    "MoveNode",
    "Node",
    "NodeKind",
    "Operation",
    "Port",
    "PortPolicy",
    "Position",
    "RemoveNode",
    "SetInputValue",
    "SetOperation",
    "default_graph",
    "evaluate",
    "evaluate_graph",
    "has_cycle",
    "is_taint",
    "longest_path_length",
    "values_equal",
]

from ._editor import (
    AddNode,
    Command,
    Connect,
    CounterIdGenerator,
    Disconnect,
    EditError,
    GraphEditor,
    IdGenerator,
    MoveNode,
    PortPolicy,
    RemoveNode,
    SetInputValue,
    SetOperation,
    default_graph,
)
from ._eval_engine import (
    DEFAULT_MAX_PASSES,
    EvaluationResult,
    evaluate,
    evaluate_graph,
    has_cycle,
    longest_path_length,
)
from ._graph import DependencyGraph
from ._history import DEFAULT_HISTORY_LIMIT, EditHistory
from ._models import Edge, GraphSnapshot, Node, NodeKind, Operation, Port, Position
from ._values import TAINT, is_taint, values_equal
