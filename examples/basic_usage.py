"""Basic usage: editing a calculator graph from Python.

This example starts from the built-in 10 + 5 calculator, extends it with a
multiplication, and walks back through the edit history.
"""

from nodecalc import (
    AddNode,
    Connect,
    Disconnect,
    GraphEditor,
    NodeKind,
    Operation,
    Port,
    SetInputValue,
)

editor = GraphEditor.from_default()
print("10 + 5 =", editor.graph.get_node("4").computed_value)

# Route the sum through a new multiply operator: (10 + 5) x 2
factor = editor.dispatch(AddNode(kind=NodeKind.INPUT, value=2))
multiply = editor.dispatch(AddNode(kind=NodeKind.OPERATOR, operation=Operation.MULTIPLY))
editor.dispatch(Disconnect(edge_id="e3-4"))
editor.dispatch(Connect(source="3", target=multiply, port=Port.A))
editor.dispatch(Connect(source=factor, target=multiply, port=Port.B))
editor.dispatch(Connect(source=multiply, target="4"))
print("(10 + 5) x 2 =", editor.graph.get_node("4").computed_value)

editor.dispatch(SetInputValue(node_id="1", value=20))
print("(20 + 5) x 2 =", editor.graph.get_node("4").computed_value)

# Each edit above is one undo step
editor.undo()
print("after undo:", editor.graph.get_node("4").computed_value)
editor.redo()
print("after redo:", editor.graph.get_node("4").computed_value)
print(f"{len(editor.history.past)} undo step(s) recorded")
