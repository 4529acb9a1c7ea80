"""Editing session: turns edit commands into snapshot, mutate, evaluate."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, TypeAlias

from ._eval_engine import DEFAULT_MAX_PASSES, EvaluationResult, evaluate_graph
from ._history import EditHistory
from ._models import Edge, GraphSnapshot, Node, NodeKind, Operation, Port, Position

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class EditError(Exception):
    """An edit command violates a precondition of the graph."""


class PortPolicy(StrEnum):
    """What connecting into an already wired port does."""

    APPEND = "append"  # Keep every edge; the first one in edge order feeds the port
    REPLACE = "replace"  # Drop the edges already feeding the port


class IdGenerator(Protocol):
    """Source of fresh node ids."""

    def next_id(self) -> str: ...


class CounterIdGenerator:
    """Monotonic counter yielding "1", "2", ..."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def next_id(self) -> str:
        value = str(self._next)
        self._next += 1
        return value


# --- Commands ---


@dataclass(frozen=True, slots=True)
class AddNode:
    kind: NodeKind
    value: float | None = None
    operation: Operation | None = None
    position: Position | None = None


@dataclass(frozen=True, slots=True)
class RemoveNode:
    """Remove a node together with every edge touching it."""

    node_id: str


@dataclass(frozen=True, slots=True)
class Connect:
    source: str
    target: str
    port: Port | None = None


@dataclass(frozen=True, slots=True)
class Disconnect:
    edge_id: str


@dataclass(frozen=True, slots=True)
class SetInputValue:
    node_id: str
    value: float


@dataclass(frozen=True, slots=True)
class SetOperation:
    node_id: str
    operation: Operation


@dataclass(frozen=True, slots=True)
class MoveNode:
    node_id: str
    x: float
    y: float


Command: TypeAlias = AddNode | RemoveNode | Connect | Disconnect | SetInputValue | SetOperation | MoveNode


def edge_id_for(source: str, target: str, port: Port | None) -> str:
    """Derive the conventional id of an edge, e.g. ``e1-3a``."""
    return f"e{source}-{target}{port or ''}"


def default_graph() -> GraphSnapshot:
    """The starting calculator: 10 + 5 shown on an output."""
    nodes = (
        Node.input("1", 10, position=Position(x=50, y=50)),
        Node.input("2", 5, position=Position(x=50, y=200)),
        Node.operator("3", Operation.ADD, position=Position(x=300, y=100)),
        Node.output("4", position=Position(x=600, y=125)),
    )
    edges = (
        Edge(id=edge_id_for("1", "3", Port.A), source="1", target="3", target_port=Port.A),
        Edge(id=edge_id_for("2", "3", Port.B), source="2", target="3", target_port=Port.B),
        Edge(id=edge_id_for("3", "4", None), source="3", target="4"),
    )
    return GraphSnapshot(nodes=nodes, edges=edges)


class GraphEditor:
    """The live graph plus its history.

    Every command is checked first and rejected with EditError before
    anything changes. An accepted command records the pre-edit graph in the
    history, applies the edit and re-evaluates. The evaluated nodes replace
    the displayed ones only when some computed value actually changed.
    """

    def __init__(
        self,
        graph: GraphSnapshot | None = None,
        *,
        history: EditHistory | None = None,
        id_generator: IdGenerator | None = None,
        max_passes: int = DEFAULT_MAX_PASSES,
        port_policy: PortPolicy = PortPolicy.APPEND,
    ) -> None:
        self._graph = graph if graph is not None else GraphSnapshot()
        self.history = history if history is not None else EditHistory()
        self._ids = id_generator if id_generator is not None else CounterIdGenerator()
        self.max_passes = max_passes
        self.port_policy = port_policy
        self.last_result: EvaluationResult | None = None
        self._refresh()

    @classmethod
    def from_default(cls, **kwargs: object) -> GraphEditor:
        """Create an editor on the default calculator, numbering new nodes from 5."""
        kwargs.setdefault("id_generator", CounterIdGenerator(start=5))
        return cls(default_graph(), **kwargs)  # type: ignore[arg-type]

    @property
    def graph(self) -> GraphSnapshot:
        return self._graph

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._graph.nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._graph.edges

    def dispatch(self, command: Command) -> str | None:
        """Apply an edit command.

        Args:
            command: The edit to apply.

        Returns:
            The id of the node or edge the command created, if any.

        Raises:
            EditError: If the command is not valid for the current graph.

        """
        edited, created = self._apply(command)
        self.history.snapshot(self._graph)
        self._graph = edited
        logger.debug("Applied %r", command)
        self._refresh()
        return created

    def undo(self) -> bool:
        """Restore the state before the most recent edit. Returns False if there was none."""
        if not self.history.can_undo:
            return False
        self._graph = self.history.undo(self._graph)
        self._refresh()
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone edit. Returns False if there was none."""
        if not self.history.can_redo:
            return False
        self._graph = self.history.redo(self._graph)
        self._refresh()
        return True

    def _refresh(self) -> None:
        result = evaluate_graph(self._graph.nodes, self._graph.edges, max_passes=self.max_passes)
        self.last_result = result
        changed = result.changed_from(self._graph.nodes)
        if changed:
            logger.debug("Computed values changed for %s", ", ".join(changed))
            self._graph = GraphSnapshot(nodes=result.nodes, edges=self._graph.edges)

    # --- Command handlers ---

    def _apply(self, command: Command) -> tuple[GraphSnapshot, str | None]:
        match command:
            case AddNode():
                return self._add_node(command)
            case RemoveNode(node_id=node_id):
                self._require_node(node_id)
                nodes = tuple(n for n in self.nodes if n.id != node_id)
                edges = tuple(e for e in self.edges if node_id not in (e.source, e.target))
                return GraphSnapshot(nodes=nodes, edges=edges), None
            case Connect():
                return self._connect(command)
            case Disconnect(edge_id=edge_id):
                try:
                    self._graph.get_edge(edge_id)
                except KeyError:
                    msg = f"Unknown edge '{edge_id}'"
                    raise EditError(msg) from None
                edges = tuple(e for e in self.edges if e.id != edge_id)
                return GraphSnapshot(nodes=self.nodes, edges=edges), None
            case SetInputValue(node_id=node_id, value=value):
                node = self._require_node(node_id)
                if node.kind != NodeKind.INPUT:
                    msg = f"Node '{node_id}' is not an input node"
                    raise EditError(msg)
                if not math.isfinite(value):
                    msg = f"Input value must be a finite number, got {value}"
                    raise EditError(msg)
                return self._replace_node(node.model_copy(update={"entered_value": float(value)})), None
            case SetOperation(node_id=node_id, operation=operation):
                node = self._require_node(node_id)
                if node.kind != NodeKind.OPERATOR:
                    msg = f"Node '{node_id}' is not an operator node"
                    raise EditError(msg)
                return self._replace_node(node.model_copy(update={"operation": operation})), None
            case MoveNode(node_id=node_id, x=x, y=y):
                node = self._require_node(node_id)
                return self._replace_node(node.model_copy(update={"position": Position(x=x, y=y)})), None
        msg = f"Unsupported command: {command!r}"
        raise EditError(msg)

    def _add_node(self, command: AddNode) -> tuple[GraphSnapshot, str]:
        position = command.position or Position()

        match command.kind:
            case NodeKind.INPUT:
                if command.operation is not None:
                    msg = "Input nodes take a value, not an operation"
                    raise EditError(msg)
                value = 0.0 if command.value is None else command.value
                if not math.isfinite(value):
                    msg = f"Input value must be a finite number, got {value}"
                    raise EditError(msg)
                node_id = self._fresh_node_id()
                node = Node.input(node_id, value, position=position)
            case NodeKind.OPERATOR:
                if command.operation is None:
                    msg = "Operator nodes require an operation"
                    raise EditError(msg)
                if command.value is not None:
                    msg = "Operator nodes do not take a value"
                    raise EditError(msg)
                node_id = self._fresh_node_id()
                node = Node.operator(node_id, command.operation, position=position)
            case NodeKind.OUTPUT:
                if command.value is not None or command.operation is not None:
                    msg = "Output nodes take neither a value nor an operation"
                    raise EditError(msg)
                node_id = self._fresh_node_id()
                node = Node.output(node_id, position=position)

        return GraphSnapshot(nodes=(*self.nodes, node), edges=self.edges), node_id

    def _connect(self, command: Connect) -> tuple[GraphSnapshot, str]:
        self._require_node(command.source)
        target = self._require_node(command.target)

        if command.source == command.target:
            msg = f"Cannot connect node '{command.source}' to itself"
            raise EditError(msg)

        match target.kind:
            case NodeKind.INPUT:
                msg = f"Input node '{target.id}' accepts no connections"
                raise EditError(msg)
            case NodeKind.OPERATOR:
                if command.port is None:
                    msg = f"Operator node '{target.id}' needs a port (a or b)"
                    raise EditError(msg)
            case NodeKind.OUTPUT:
                if command.port is not None:
                    msg = f"Output node '{target.id}' has no port '{command.port}'"
                    raise EditError(msg)

        for edge in self.edges:
            if (edge.source, edge.target, edge.target_port) == (command.source, command.target, command.port):
                msg = f"Node '{command.source}' is already connected to '{command.target}' as edge '{edge.id}'"
                raise EditError(msg)

        edges = self.edges
        if self.port_policy == PortPolicy.REPLACE:
            edges = tuple(e for e in edges if (e.target, e.target_port) != (command.target, command.port))

        edge_id = self._fresh_edge_id(edge_id_for(command.source, command.target, command.port))
        edge = Edge(id=edge_id, source=command.source, target=command.target, target_port=command.port)
        return GraphSnapshot(nodes=self.nodes, edges=(*edges, edge)), edge_id

    # --- Helpers ---

    def _require_node(self, node_id: str) -> Node:
        try:
            return self._graph.get_node(node_id)
        except KeyError:
            msg = f"Unknown node '{node_id}'"
            raise EditError(msg) from None

    def _replace_node(self, replacement: Node) -> GraphSnapshot:
        nodes = tuple(replacement if n.id == replacement.id else n for n in self.nodes)
        return GraphSnapshot(nodes=nodes, edges=self.edges)

    def _fresh_node_id(self) -> str:
        node_id = self._ids.next_id()
        while node_id in self._graph:
            node_id = self._ids.next_id()
        return node_id

    def _fresh_edge_id(self, base: str) -> str:
        taken = {edge.id for edge in self.edges}
        candidates: Iterator[str] = (base if i == 1 else f"{base}-{i}" for i in range(1, len(taken) + 2))
        return next(c for c in candidates if c not in taken)
