"""Tests for the GraphEditor editing session."""

import pytest

from nodecalc import (
    AddNode,
    Connect,
    CounterIdGenerator,
    Disconnect,
    EditError,
    EditHistory,
    GraphEditor,
    GraphSnapshot,
    MoveNode,
    NodeKind,
    Operation,
    Port,
    PortPolicy,
    RemoveNode,
    SetInputValue,
    SetOperation,
    default_graph,
    is_taint,
)


@pytest.fixture
def editor() -> GraphEditor:
    return GraphEditor.from_default()


class TestDefaultGraph:
    """Tests for the starting calculator."""

    def test_shape(self) -> None:
        graph = default_graph()
        assert graph.node_ids == ("1", "2", "3", "4")
        assert [edge.id for edge in graph.edges] == ["e1-3a", "e2-3b", "e3-4"]

    def test_evaluated_on_open(self, editor: GraphEditor) -> None:
        assert editor.graph.computed_values() == {"3": 15.0, "4": 15.0}
        assert editor.last_result is not None
        assert editor.last_result.converged

    def test_opening_records_no_history(self, editor: GraphEditor) -> None:
        assert not editor.history.can_undo

    def test_empty_editor(self) -> None:
        editor = GraphEditor()
        assert editor.graph == GraphSnapshot()


class TestEditing:
    """Tests for applying commands."""

    def test_set_input_value(self, editor: GraphEditor) -> None:
        editor.dispatch(SetInputValue(node_id="1", value=20))
        assert editor.graph.get_node("4").computed_value == 25

    def test_set_operation(self, editor: GraphEditor) -> None:
        editor.dispatch(SetOperation(node_id="3", operation=Operation.MULTIPLY))
        assert editor.graph.get_node("4").computed_value == 50

    def test_divide_by_zero(self, editor: GraphEditor) -> None:
        editor.dispatch(SetInputValue(node_id="2", value=0))
        editor.dispatch(SetOperation(node_id="3", operation=Operation.DIVIDE))
        assert is_taint(editor.graph.get_node("4").computed_value)

    def test_add_node_ids(self, editor: GraphEditor) -> None:
        assert editor.dispatch(AddNode(kind=NodeKind.INPUT, value=2)) == "5"
        assert editor.dispatch(AddNode(kind=NodeKind.OUTPUT)) == "6"
        assert editor.graph.get_node("5").entered_value == 2
        assert editor.graph.get_node("6").computed_value is None

    def test_add_input_defaults_to_zero(self, editor: GraphEditor) -> None:
        node_id = editor.dispatch(AddNode(kind=NodeKind.INPUT))
        assert editor.graph.get_node(node_id).entered_value == 0

    def test_new_ids_skip_taken_ones(self) -> None:
        editor = GraphEditor(default_graph(), id_generator=CounterIdGenerator(start=3))
        assert editor.dispatch(AddNode(kind=NodeKind.OUTPUT)) == "5"

    def test_connect_returns_edge_id(self, editor: GraphEditor) -> None:
        editor.dispatch(AddNode(kind=NodeKind.OUTPUT))
        assert editor.dispatch(Connect(source="3", target="5")) == "e3-5"
        assert editor.graph.get_node("5").computed_value == 15

    def test_disconnect(self, editor: GraphEditor) -> None:
        editor.dispatch(Disconnect(edge_id="e3-4"))
        assert editor.graph.get_node("4").computed_value is None
        assert editor.graph.get_node("3").computed_value == 15

    def test_remove_node_drops_its_edges(self, editor: GraphEditor) -> None:
        editor.dispatch(RemoveNode(node_id="3"))
        assert "3" not in editor.graph
        assert editor.edges == ()
        assert editor.graph.get_node("4").computed_value is None

    def test_chain_of_operators(self, editor: GraphEditor) -> None:
        multiply = editor.dispatch(AddNode(kind=NodeKind.OPERATOR, operation=Operation.MULTIPLY))
        editor.dispatch(Disconnect(edge_id="e3-4"))
        editor.dispatch(Connect(source="3", target=multiply, port=Port.A))
        editor.dispatch(Connect(source="2", target=multiply, port=Port.B))
        editor.dispatch(Connect(source=multiply, target="4"))
        assert editor.graph.get_node("4").computed_value == 75

    def test_move_keeps_values(self, editor: GraphEditor) -> None:
        operator = editor.graph.get_node("3")
        editor.dispatch(MoveNode(node_id="1", x=10, y=20))

        assert editor.graph.get_node("1").position.x == 10
        assert editor.graph.get_node("3") is operator
        assert editor.history.can_undo


class TestPreconditions:
    """Tests for rejected commands."""

    @pytest.mark.parametrize(
        ("command", "match"),
        [
            (RemoveNode(node_id="99"), "Unknown node"),
            (Disconnect(edge_id="e9-9"), "Unknown edge"),
            (SetInputValue(node_id="3", value=1), "not an input node"),
            (SetInputValue(node_id="1", value=float("inf")), "finite"),
            (SetOperation(node_id="1", operation=Operation.ADD), "not an operator node"),
            (MoveNode(node_id="99", x=0, y=0), "Unknown node"),
            (AddNode(kind=NodeKind.OPERATOR), "require an operation"),
            (AddNode(kind=NodeKind.INPUT, value=float("nan")), "finite"),
            (AddNode(kind=NodeKind.OUTPUT, value=1), "neither"),
            (Connect(source="1", target="99", port=Port.A), "Unknown node"),
            (Connect(source="3", target="3", port=Port.A), "to itself"),
            (Connect(source="3", target="1"), "accepts no connections"),
            (Connect(source="1", target="3"), "needs a port"),
            (Connect(source="1", target="4", port=Port.A), "has no port"),
            (Connect(source="1", target="3", port=Port.A), "already connected"),
        ],
    )
    def test_rejected(self, editor: GraphEditor, command: object, match: str) -> None:
        before = editor.graph
        with pytest.raises(EditError, match=match):
            editor.dispatch(command)  # type: ignore[arg-type]
        assert editor.graph is before
        assert not editor.history.can_undo

    def test_rejected_add_consumes_no_id(self, editor: GraphEditor) -> None:
        with pytest.raises(EditError):
            editor.dispatch(AddNode(kind=NodeKind.OPERATOR))
        assert editor.dispatch(AddNode(kind=NodeKind.OUTPUT)) == "5"


class TestPortPolicy:
    """Tests for connecting into an already wired port."""

    def test_append_keeps_first_edge(self, editor: GraphEditor) -> None:
        node_id = editor.dispatch(AddNode(kind=NodeKind.INPUT, value=100))
        editor.dispatch(Connect(source=node_id, target="3", port=Port.A))

        assert len(editor.edges) == 4
        assert editor.graph.get_node("3").computed_value == 15

    def test_replace_drops_old_edge(self) -> None:
        editor = GraphEditor.from_default(port_policy=PortPolicy.REPLACE)
        node_id = editor.dispatch(AddNode(kind=NodeKind.INPUT, value=100))
        editor.dispatch(Connect(source=node_id, target="3", port=Port.A))

        assert [edge.id for edge in editor.edges] == ["e2-3b", "e3-4", "e5-3a"]
        assert editor.graph.get_node("3").computed_value == 105

    def test_removing_first_edge_promotes_next(self, editor: GraphEditor) -> None:
        node_id = editor.dispatch(AddNode(kind=NodeKind.INPUT, value=100))
        editor.dispatch(Connect(source=node_id, target="3", port=Port.A))
        editor.dispatch(Disconnect(edge_id="e1-3a"))
        assert editor.graph.get_node("3").computed_value == 105


class TestUndoRedo:
    """Tests for undo and redo through the editor."""

    def test_undo_and_redo_value_change(self, editor: GraphEditor) -> None:
        editor.dispatch(SetInputValue(node_id="1", value=20))

        assert editor.undo()
        assert editor.graph.get_node("1").entered_value == 10
        assert editor.graph.get_node("4").computed_value == 15

        assert editor.redo()
        assert editor.graph.get_node("1").entered_value == 20
        assert editor.graph.get_node("4").computed_value == 25

    def test_undo_restores_removed_node(self, editor: GraphEditor) -> None:
        original = editor.graph
        editor.dispatch(RemoveNode(node_id="3"))
        editor.undo()
        assert editor.graph == original

    def test_nothing_to_undo(self, editor: GraphEditor) -> None:
        assert not editor.undo()
        assert not editor.redo()

    def test_new_edit_discards_redo(self, editor: GraphEditor) -> None:
        editor.dispatch(SetInputValue(node_id="1", value=20))
        editor.undo()
        editor.dispatch(SetInputValue(node_id="2", value=7))
        assert not editor.redo()

    def test_repeated_no_op_moves_record_once(self, editor: GraphEditor) -> None:
        node = editor.graph.get_node("1")
        for _ in range(2):
            editor.dispatch(MoveNode(node_id="1", x=node.position.x, y=node.position.y))
        assert len(editor.history.past) == 1

    def test_history_is_bounded(self, editor: GraphEditor) -> None:
        for value in range(25):
            editor.dispatch(SetInputValue(node_id="1", value=value))
        assert len(editor.history.past) == 21

        while editor.undo():
            pass
        assert editor.graph.get_node("1").entered_value == 3

    def test_custom_history_limit(self) -> None:
        editor = GraphEditor.from_default(history=EditHistory(limit=2))
        for value in range(5):
            editor.dispatch(SetInputValue(node_id="1", value=value))
        assert len(editor.history.past) == 3


class TestCycles:
    """Tests for cyclic wiring built through the editor."""

    def test_cycle_stays_unresolved(self, editor: GraphEditor) -> None:
        node_id = editor.dispatch(AddNode(kind=NodeKind.OPERATOR, operation=Operation.ADD))
        editor.dispatch(Connect(source="3", target=node_id, port=Port.A))
        editor.dispatch(Connect(source="1", target=node_id, port=Port.B))
        editor.dispatch(Disconnect(edge_id="e2-3b"))
        editor.dispatch(Connect(source=node_id, target="3", port=Port.B))

        assert editor.last_result is not None
        assert editor.last_result.converged
        assert editor.graph.get_node("3").computed_value is None
        assert editor.graph.get_node("4").computed_value is None

    def test_cycle_with_stale_seed_hits_ceiling(self) -> None:
        editor = GraphEditor.from_default(max_passes=5)
        node_id = editor.dispatch(AddNode(kind=NodeKind.OPERATOR, operation=Operation.ADD))
        editor.dispatch(Connect(source="1", target=node_id, port=Port.A))
        editor.dispatch(Connect(source="3", target=node_id, port=Port.B))
        assert editor.graph.get_node(node_id).computed_value == 25

        # Operator 3 now reads its own previous value through node 5
        editor.dispatch(Connect(source=node_id, target="3", port=Port.A))
        editor.dispatch(Disconnect(edge_id="e1-3a"))

        assert editor.last_result is not None
        assert editor.last_result.hit_ceiling
