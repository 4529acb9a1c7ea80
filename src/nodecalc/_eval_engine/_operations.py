"""Arithmetic for operator nodes."""

from nodecalc._models import Operation
from nodecalc._values import TAINT, canonical


def apply_operation(operation: Operation, a: float, b: float) -> float:
    """Apply a binary operation to two resolved operands.

    Dividing by zero yields the taint sentinel instead of raising, and any
    taint operand taints the result.
    """
    match operation:
        case Operation.ADD:
            result = a + b
        case Operation.SUBTRACT:
            result = a - b
        case Operation.MULTIPLY:
            result = a * b
        case Operation.DIVIDE:
            if b == 0:
                return TAINT
            result = a / b
    return canonical(result)  # type: ignore[return-value]
