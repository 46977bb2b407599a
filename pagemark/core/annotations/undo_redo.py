"""
Undo/Redo history over whole-collection snapshots.
"""
import copy
from typing import Dict, List, Optional

from .models import Annotation

Snapshot = Dict[str, Annotation]


class UndoRedoStack:
    """Linear undo/redo history; a new checkpoint discards the redo branch."""

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize the undo/redo stack.

        Args:
            max_size: Maximum number of states to keep in history, or None
                for no limit
        """
        self.undo_stack: List[Snapshot] = []
        self.redo_stack: List[Snapshot] = []
        self.max_size = max_size

    def push_state(self, state: Snapshot) -> None:
        """
        Push a state onto the undo stack and clear the redo stack.

        Args:
            state: Annotation collection to save
        """
        self.undo_stack.append(copy.deepcopy(state))
        self.redo_stack.clear()

        if self.max_size is not None and len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self.redo_stack) > 0

    def undo(self, current_state: Snapshot) -> Optional[Snapshot]:
        """
        Perform undo and return the previous state.

        Args:
            current_state: Current annotations before undo

        Returns:
            Previous state of annotations, or None if undo not available
        """
        if not self.can_undo():
            return None

        self.redo_stack.append(copy.deepcopy(current_state))
        return self.undo_stack.pop()

    def redo(self, current_state: Snapshot) -> Optional[Snapshot]:
        """
        Perform redo and return the next state.

        Args:
            current_state: Current annotations before redo

        Returns:
            Next state of annotations, or None if redo not available
        """
        if not self.can_redo():
            return None

        self.undo_stack.append(copy.deepcopy(current_state))
        return self.redo_stack.pop()

    def clear(self) -> None:
        """Clear both stacks."""
        self.undo_stack.clear()
        self.redo_stack.clear()
