"""Graph data model: nodes, edges and immutable graph snapshots."""

from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, model_validator

from ._values import canonical, is_taint, values_equal

if TYPE_CHECKING:
    from collections.abc import Iterable


class NodeKind(StrEnum):
    """The kind of node in the calculator graph."""

    INPUT = auto()  # User-entered number
    OUTPUT = auto()  # Displays its single input
    OPERATOR = auto()  # Binary arithmetic on ports a and b


class Operation(StrEnum):
    """Binary arithmetic operation carried by an operator node.

    Each member also carries the symbol used to display it.
    """

    symbol: str

    def __new__(cls, value: str, symbol: str = "") -> Self:
        """Create a new member with its display symbol."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.symbol = symbol
        return obj

    ADD = "add", "+"
    SUBTRACT = "subtract", "-"
    MULTIPLY = "multiply", "×"
    DIVIDE = "divide", "÷"


class Port(StrEnum):
    """Operand slot on an operator node."""

    A = "a"
    B = "b"


class Position(BaseModel):
    """Canvas position. Presentation only, never read by the evaluator."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class Node(BaseModel):
    """A node in the graph.

    Only input nodes carry ``entered_value``, only operator nodes carry
    ``operation``, and ``computed_value`` is written by the evaluator alone and
    never appears on input nodes.

    Equality treats every taint as the same value, so snapshots holding a
    tainted result still compare equal by value.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: NodeKind
    position: Position = Field(default_factory=Position)
    entered_value: FiniteFloat | None = None
    operation: Operation | None = None
    computed_value: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_entered_value(cls, data: Any) -> Any:
        # New input nodes start at zero
        if isinstance(data, dict) and data.get("kind") == NodeKind.INPUT and data.get("entered_value") is None:
            return {**data, "entered_value": 0.0}
        return data

    @model_validator(mode="after")
    def _check_payload(self) -> Self:
        match self.kind:
            case NodeKind.INPUT:
                if self.operation is not None:
                    msg = f"Input node '{self.id}' cannot carry an operation"
                    raise ValueError(msg)
                if self.computed_value is not None:
                    msg = f"Input node '{self.id}' cannot carry a computed value"
                    raise ValueError(msg)
            case NodeKind.OPERATOR:
                if self.operation is None:
                    msg = f"Operator node '{self.id}' requires an operation"
                    raise ValueError(msg)
                if self.entered_value is not None:
                    msg = f"Operator node '{self.id}' cannot carry an entered value"
                    raise ValueError(msg)
            case NodeKind.OUTPUT:
                if self.entered_value is not None or self.operation is not None:
                    msg = f"Output node '{self.id}' only carries a computed value"
                    raise ValueError(msg)
        return self

    @classmethod
    def input(cls, id: str, value: float = 0.0, *, position: Position | None = None) -> Node:  # noqa: A002
        """Create an input node holding a user-entered value."""
        return cls(id=id, kind=NodeKind.INPUT, entered_value=value, position=position or Position())

    @classmethod
    def operator(
        cls,
        id: str,  # noqa: A002
        operation: Operation,
        *,
        position: Position | None = None,
        computed_value: float | None = None,
    ) -> Node:
        """Create an operator node."""
        return cls(
            id=id,
            kind=NodeKind.OPERATOR,
            operation=operation,
            position=position or Position(),
            computed_value=computed_value,
        )

    @classmethod
    def output(cls, id: str, *, position: Position | None = None, computed_value: float | None = None) -> Node:  # noqa: A002
        """Create an output node."""
        return cls(id=id, kind=NodeKind.OUTPUT, position=position or Position(), computed_value=computed_value)

    @property
    def has_entered_value(self) -> bool:
        """Whether this node is a value source rather than a computed node."""
        return self.kind == NodeKind.INPUT

    def with_computed_value(self, value: float | None) -> Node:
        """Return a copy of this node with a new computed value.

        Raises:
            ValueError: If this is an input node.

        """
        if self.has_entered_value:
            msg = f"Input node '{self.id}' has no computed value"
            raise ValueError(msg)
        return self.model_copy(update={"computed_value": canonical(value)})

    def _key(self) -> tuple[Any, ...]:
        return (self.id, self.kind, self.position, self.entered_value, self.operation)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._key() == other._key() and values_equal(self.computed_value, other.computed_value)

    def __hash__(self) -> int:
        computed = "taint" if is_taint(self.computed_value) else self.computed_value
        return hash((*self._key(), computed))


class Edge(BaseModel):
    """A directed connection feeding ``source``'s value into ``target``.

    ``target_port`` selects the operand slot on operator targets and is
    ``None`` for output targets.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    target_port: Port | None = None


class GraphSnapshot(BaseModel):
    """Immutable pairing of the full node and edge collections at one instant."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    @classmethod
    def copy_of(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphSnapshot:
        """Build a snapshot from deep copies of the given nodes and edges."""
        return cls(
            nodes=tuple(node.model_copy(deep=True) for node in nodes),
            edges=tuple(edge.model_copy(deep=True) for edge in edges),
        )

    def deep_copy(self) -> GraphSnapshot:
        """Return a deep copy that shares no data with this snapshot."""
        return GraphSnapshot.copy_of(self.nodes, self.edges)

    @property
    def node_ids(self) -> tuple[str, ...]:
        """Ids of all nodes, in collection order."""
        return tuple(node.id for node in self.nodes)

    def get_node(self, node_id: str) -> Node:
        """Get a node by id.

        Raises:
            KeyError: If no node has the given id.

        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def get_edge(self, edge_id: str) -> Edge:
        """Get an edge by id.

        Raises:
            KeyError: If no edge has the given id.

        """
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        raise KeyError(edge_id)

    def computed_values(self) -> dict[str, float | None]:
        """Map each non-input node id to its computed value."""
        return {node.id: node.computed_value for node in self.nodes if not node.has_entered_value}

    def __contains__(self, node_id: object) -> bool:
        """Check if a node with the given id exists."""
        return any(node.id == node_id for node in self.nodes)
