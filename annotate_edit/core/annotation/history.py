"""
Snapshot-based undo/redo.

Every snapshot is a deep copy of the whole annotation list. Lists are small
(tens to low hundreds of annotations), so no diffing is done.
"""

import copy
import logging
from typing import List, Optional

from .state import Annotation

logger = logging.getLogger(__name__)


class HistoryManager:
    """
    Linear undo/redo history over annotation list snapshots.

    Any mutation that is not itself an undo/redo must call :meth:`record`
    with the pre-mutation list before applying its change. Recording clears
    the redo stack, so redoing after a fresh edit is impossible.
    """

    def __init__(self, max_history: int = 0):
        """
        Args:
            max_history: Maximum number of undo snapshots (0 keeps all)
        """
        self.max_history = max_history
        self._undo_stack: List[List[Annotation]] = []
        self._redo_stack: List[List[Annotation]] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)

    def record(self, current: List[Annotation]):
        """Push a snapshot of ``current`` onto the undo stack and clear redo."""
        self._undo_stack.append(copy.deepcopy(current))
        self._redo_stack.clear()

        # Limit history size
        if self.max_history > 0 and len(self._undo_stack) > self.max_history:
            self._undo_stack.pop(0)

    def undo(self, current: List[Annotation]) -> Optional[List[Annotation]]:
        """
        Step back one snapshot.

        Args:
            current: The list as it is now; saved for redo

        Returns:
            The list to restore, or None if there is nothing to undo
        """
        if not self._undo_stack:
            return None
        previous = self._undo_stack.pop()
        self._redo_stack.append(copy.deepcopy(current))
        logger.debug(f"Undo ({len(self._undo_stack)} left)")
        return previous

    def redo(self, current: List[Annotation]) -> Optional[List[Annotation]]:
        """Symmetric to :meth:`undo`, using the redo stack."""
        if not self._redo_stack:
            return None
        following = self._redo_stack.pop()
        self._undo_stack.append(copy.deepcopy(current))
        logger.debug(f"Redo ({len(self._redo_stack)} left)")
        return following

    def clear(self):
        self._undo_stack.clear()
        self._redo_stack.clear()
