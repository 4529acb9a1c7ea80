"""Parser for edit-command scripts.

A script holds one command per line; ``#`` starts a comment::

    add input 10
    add operator multiply
    add output
    connect 1 2 a
    set 1 12
    undo

Parsing is pure: it turns text into commands for GraphEditor and never
touches a graph.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from nodecalc._editor import (
    AddNode,
    Command,
    Connect,
    Disconnect,
    MoveNode,
    RemoveNode,
    SetInputValue,
    SetOperation,
)
from nodecalc._models import NodeKind, Operation, Port


E = TypeVar("E", bound=StrEnum)


class ScriptError(Exception):
    """A script line could not be parsed."""

    def __init__(self, line: int, message: str) -> None:
        self.line = line
        self.message = message
        super().__init__(f"line {line}: {message}")


class HistoryAction(StrEnum):
    UNDO = "undo"
    REDO = "redo"


@dataclass(frozen=True, slots=True)
class ScriptStep:
    """A parsed script line."""

    line: int
    text: str
    action: Command | HistoryAction


def _number(token: str, what: str) -> float:
    try:
        value = float(token)
    except ValueError:
        msg = f"{what} must be a number, got '{token}'"
        raise ValueError(msg) from None
    if not math.isfinite(value):
        msg = f"{what} must be finite, got '{token}'"
        raise ValueError(msg)
    return value


def _enum(enum_cls: type[E], token: str, what: str) -> E:
    try:
        return enum_cls(token.lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        msg = f"Unknown {what} '{token}' (expected one of: {choices})"
        raise ValueError(msg) from None


def _expect_args(words: list[str], minimum: int, maximum: int, usage: str) -> None:
    count = len(words) - 1
    if not minimum <= count <= maximum:
        msg = f"Usage: {usage}"
        raise ValueError(msg)


def _parse_add(words: list[str]) -> AddNode:
    _expect_args(words, 1, 2, "add input <value> | add operator <operation> | add output")
    kind = _enum(NodeKind, words[1], "node kind")
    match kind:
        case NodeKind.INPUT:
            value = _number(words[2], "Input value") if len(words) == 3 else None
            return AddNode(kind=kind, value=value)
        case NodeKind.OPERATOR:
            if len(words) != 3:
                msg = "Usage: add operator <operation>"
                raise ValueError(msg)
            return AddNode(kind=kind, operation=_enum(Operation, words[2], "operation"))
        case NodeKind.OUTPUT:
            _expect_args(words, 1, 1, "add output")
            return AddNode(kind=kind)


def parse_line(text: str) -> Command | HistoryAction | None:  # noqa: PLR0911
    """Parse one script line.

    Returns:
        The command or history action, or None for blank and comment lines.

    Raises:
        ValueError: If the line is not a valid command.

    """
    words = text.split("#", 1)[0].split()
    if not words:
        return None

    match words[0].lower():
        case "add":
            return _parse_add(words)
        case "remove":
            _expect_args(words, 1, 1, "remove <node>")
            return RemoveNode(node_id=words[1])
        case "connect":
            _expect_args(words, 2, 3, "connect <source> <target> [a|b]")
            port = _enum(Port, words[3], "port") if len(words) == 4 else None
            return Connect(source=words[1], target=words[2], port=port)
        case "disconnect":
            _expect_args(words, 1, 1, "disconnect <edge>")
            return Disconnect(edge_id=words[1])
        case "set":
            _expect_args(words, 2, 2, "set <node> <value>")
            return SetInputValue(node_id=words[1], value=_number(words[2], "Input value"))
        case "op":
            _expect_args(words, 2, 2, "op <node> <operation>")
            return SetOperation(node_id=words[1], operation=_enum(Operation, words[2], "operation"))
        case "move":
            _expect_args(words, 3, 3, "move <node> <x> <y>")
            return MoveNode(node_id=words[1], x=_number(words[2], "x"), y=_number(words[3], "y"))
        case "undo" | "redo":
            _expect_args(words, 0, 0, words[0].lower())
            return HistoryAction(words[0].lower())
        case other:
            msg = f"Unknown command '{other}'"
            raise ValueError(msg)


def parse_script(text: str) -> list[ScriptStep]:
    """Parse a whole script.

    Raises:
        ScriptError: On the first line that cannot be parsed.

    """
    steps: list[ScriptStep] = []
    for number, raw in enumerate(text.splitlines(), start=1):
        try:
            action = parse_line(raw)
        except ValueError as e:
            raise ScriptError(number, str(e)) from e
        if action is not None:
            steps.append(ScriptStep(line=number, text=raw.strip(), action=action))
    return steps
