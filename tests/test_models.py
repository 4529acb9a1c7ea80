"""Tests for the graph data model."""

import math

import pytest
from pydantic import ValidationError

from nodecalc import TAINT, Edge, GraphSnapshot, Node, NodeKind, Operation, Port, Position, is_taint, values_equal


class TestValues:
    """Tests for value helpers."""

    def test_taint_is_nan(self) -> None:
        assert math.isnan(TAINT)
        assert is_taint(TAINT)
        assert is_taint(float("nan"))

    def test_none_and_numbers_are_not_taint(self) -> None:
        assert not is_taint(None)
        assert not is_taint(0.0)

    def test_values_equal(self) -> None:
        assert values_equal(None, None)
        assert values_equal(1.5, 1.5)
        assert values_equal(15, 15.0)
        assert values_equal(TAINT, float("nan"))
        assert not values_equal(None, 0.0)
        assert not values_equal(0.0, None)
        assert not values_equal(TAINT, 1.0)
        assert not values_equal(1.0, 2.0)


class TestNode:
    """Tests for Node construction and validation."""

    def test_input_factory(self) -> None:
        node = Node.input("1", 10)
        assert node.kind == NodeKind.INPUT
        assert node.entered_value == 10.0
        assert node.computed_value is None
        assert node.has_entered_value

    def test_input_defaults_to_zero(self) -> None:
        node = Node(id="1", kind=NodeKind.INPUT)
        assert node.entered_value == 0.0

    def test_input_rejects_non_finite_value(self) -> None:
        with pytest.raises(ValidationError):
            Node.input("1", float("inf"))

    def test_input_rejects_operation(self) -> None:
        with pytest.raises(ValidationError, match="cannot carry an operation"):
            Node(id="1", kind=NodeKind.INPUT, operation=Operation.ADD)

    def test_input_rejects_computed_value(self) -> None:
        with pytest.raises(ValidationError, match="computed value"):
            Node(id="1", kind=NodeKind.INPUT, computed_value=3.0)

    def test_operator_requires_operation(self) -> None:
        with pytest.raises(ValidationError, match="requires an operation"):
            Node(id="3", kind=NodeKind.OPERATOR)

    def test_operator_rejects_entered_value(self) -> None:
        with pytest.raises(ValidationError):
            Node(id="3", kind=NodeKind.OPERATOR, operation=Operation.ADD, entered_value=1.0)

    def test_output_rejects_payload(self) -> None:
        with pytest.raises(ValidationError):
            Node(id="4", kind=NodeKind.OUTPUT, operation=Operation.ADD)

    def test_operation_from_string(self) -> None:
        node = Node(id="3", kind="operator", operation="divide")
        assert node.operation is Operation.DIVIDE
        assert node.operation.symbol == "÷"

    def test_with_computed_value(self) -> None:
        node = Node.output("4")
        updated = node.with_computed_value(15.0)
        assert updated.computed_value == 15.0
        assert node.computed_value is None

    def test_with_computed_value_rejects_input(self) -> None:
        with pytest.raises(ValueError, match="no computed value"):
            Node.input("1", 1).with_computed_value(2.0)

    def test_nodes_are_frozen(self) -> None:
        node = Node.output("4")
        with pytest.raises(ValidationError):
            node.computed_value = 1.0  # type: ignore[misc]

    def test_taint_compares_equal(self) -> None:
        first = Node.output("4", computed_value=float("nan"))
        second = Node.output("4", computed_value=float("nan"))
        assert first == second
        assert hash(first) == hash(second)

    def test_different_values_compare_unequal(self) -> None:
        assert Node.output("4", computed_value=1.0) != Node.output("4", computed_value=2.0)
        assert Node.output("4") != Node.output("4", computed_value=0.0)

    def test_position_is_part_of_equality(self) -> None:
        assert Node.input("1", 1) != Node.input("1", 1, position=Position(x=5, y=5))


class TestGraphSnapshot:
    """Tests for GraphSnapshot."""

    @pytest.fixture
    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            nodes=(Node.input("1", 10), Node.operator("3", Operation.ADD), Node.output("4", computed_value=TAINT)),
            edges=(Edge(id="e1-3a", source="1", target="3", target_port=Port.A),),
        )

    def test_value_equality(self, snapshot: GraphSnapshot) -> None:
        assert snapshot == snapshot.deep_copy()

    def test_deep_copy_shares_no_nodes(self, snapshot: GraphSnapshot) -> None:
        copy = snapshot.deep_copy()
        assert all(a is not b for a, b in zip(copy.nodes, snapshot.nodes, strict=True))
        assert all(a is not b for a, b in zip(copy.edges, snapshot.edges, strict=True))

    def test_copy_of_accepts_lists(self) -> None:
        nodes = [Node.input("1", 1)]
        copy = GraphSnapshot.copy_of(nodes, [])
        nodes.append(Node.output("2"))
        assert copy.node_ids == ("1",)

    def test_get_node(self, snapshot: GraphSnapshot) -> None:
        assert snapshot.get_node("3").operation is Operation.ADD
        with pytest.raises(KeyError):
            snapshot.get_node("99")

    def test_get_edge(self, snapshot: GraphSnapshot) -> None:
        assert snapshot.get_edge("e1-3a").target == "3"
        with pytest.raises(KeyError):
            snapshot.get_edge("missing")

    def test_contains(self, snapshot: GraphSnapshot) -> None:
        assert "1" in snapshot
        assert "99" not in snapshot

    def test_computed_values_skip_inputs(self, snapshot: GraphSnapshot) -> None:
        values = snapshot.computed_values()
        assert set(values) == {"3", "4"}
        assert values["3"] is None
        assert is_taint(values["4"])
