"""Bounded linear undo/redo history of graph snapshots."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._models import GraphSnapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class EditHistory:
    """Two stacks of graph snapshots behind undo and redo.

    ``past`` holds the states before each recorded edit, newest last, and keeps
    at most ``limit + 1`` entries: the ``limit`` undo steps plus the state the
    current edit started from. The oldest entry is evicted first. ``future``
    holds undone states, nearest first, and is cleared by every new snapshot.

    Every stored snapshot is a deep copy, so later changes to the live graph
    cannot reach archived entries.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 0:
            msg = f"History limit must not be negative, got {limit}"
            raise ValueError(msg)
        self._limit = limit
        self._past: deque[GraphSnapshot] = deque(maxlen=limit + 1)
        self._future: deque[GraphSnapshot] = deque()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def past(self) -> tuple[GraphSnapshot, ...]:
        """Recorded states, oldest first."""
        return tuple(self._past)

    @property
    def future(self) -> tuple[GraphSnapshot, ...]:
        """Undone states, the next one to redo first."""
        return tuple(self._future)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def snapshot(self, graph: GraphSnapshot) -> bool:
        """Record the state a forward edit is about to change.

        Call this before applying the edit. The state is skipped if it equals
        the newest recorded one, so no-op interactions leave no entry. Any redo
        entries are discarded either way.

        Args:
            graph: The live graph before the edit.

        Returns:
            True if a new entry was recorded.

        """
        self._future.clear()

        copy = graph.deep_copy()
        if self._past and self._past[-1] == copy:
            logger.debug("Skipping snapshot identical to the newest history entry")
            return False

        if len(self._past) == self._past.maxlen:
            logger.debug("History full, evicting the oldest entry")
        self._past.append(copy)
        logger.debug("Recorded snapshot (%d past)", len(self._past))
        return True

    def undo(self, current: GraphSnapshot) -> GraphSnapshot:
        """Step back one edit.

        Args:
            current: The live graph, which becomes the first redo entry.

        Returns:
            The state to make live, or ``current`` itself if there is nothing to undo.

        """
        if not self._past:
            return current
        restored = self._past.pop()
        self._future.appendleft(current.deep_copy())
        logger.debug("Undo (%d past, %d future)", len(self._past), len(self._future))
        return restored

    def redo(self, current: GraphSnapshot) -> GraphSnapshot:
        """Step forward one undone edit.

        Args:
            current: The live graph, which is appended to the past.

        Returns:
            The state to make live, or ``current`` itself if there is nothing to redo.

        """
        if not self._future:
            return current
        restored = self._future.popleft()
        self._past.append(current.deep_copy())
        logger.debug("Redo (%d past, %d future)", len(self._past), len(self._future))
        return restored

    def clear(self) -> None:
        """Forget all recorded states."""
        self._past.clear()
        self._future.clear()
