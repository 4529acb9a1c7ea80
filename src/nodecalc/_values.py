"""Numeric value helpers shared by the evaluator and the data model.

A computed value is either a float or ``None`` (unresolved). Division by zero
produces the taint sentinel, a single canonical NaN object. Every NaN that
arithmetic produces is folded back onto that object so that a repeated taint
compares equal to itself.
"""

import math

TAINT: float = float("nan")


def is_taint(value: float | None) -> bool:
    """Check whether a value is the taint sentinel (any NaN)."""
    return value is not None and math.isnan(value)


def canonical(value: float | None) -> float | None:
    """Fold any NaN onto the canonical taint sentinel."""
    if is_taint(value):
        return TAINT
    return value


def values_equal(left: float | None, right: float | None) -> bool:
    """Compare two computed values for change detection.

    ``None`` only equals ``None``, and two taints are equal.
    """
    if left is None or right is None:
        return left is right
    if math.isnan(left) or math.isnan(right):
        return math.isnan(left) and math.isnan(right)
    return left == right
