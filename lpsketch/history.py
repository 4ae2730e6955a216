"""
LP Sketch - Undo/Redo History
=============================

Bounded past/future stacks of complete document snapshots.

Usage:
    history = DocumentHistory()
    current = history.commit(current, edited)   # edited becomes current
    previous = history.undo(current)
    if previous is not None:
        current = previous
"""

from typing import List, Optional

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import history_max_depth
from lpsketch.document import Document


class DocumentHistory:
    """
    Snapshot history. ``undo_stack[-1]`` is the most recent past state,
    ``redo_stack[-1]`` the next state to redo. Both stacks are capped at
    ``max_undo``; the oldest entries fall off first.
    """

    def __init__(self, max_undo: Optional[int] = None):
        self.max_undo = max_undo if max_undo is not None else history_max_depth()
        self.undo_stack: List[Document] = []
        self.redo_stack: List[Document] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def clear(self):
        self.undo_stack.clear()
        self.redo_stack.clear()

    def push(self, snapshot: Document):
        """Records ``snapshot`` as the latest past state and drops the redo branch."""
        self.undo_stack.append(snapshot.clone())
        self.redo_stack.clear()
        if len(self.undo_stack) > self.max_undo:
            del self.undo_stack[:len(self.undo_stack) - self.max_undo]
        self._trace("push")

    def commit(self, current: Document, next_document: Document) -> Document:
        """Pushes ``current`` and returns a private copy of ``next_document`` to install."""
        self.push(current)
        logger.info("Document change committed")
        return next_document.clone()

    def undo(self, current: Document) -> Optional[Document]:
        if not self.undo_stack:
            logger.debug("Nothing to undo")
            return None

        previous = self.undo_stack.pop()
        self.redo_stack.append(current.clone())
        if len(self.redo_stack) > self.max_undo:
            del self.redo_stack[:len(self.redo_stack) - self.max_undo]
        logger.info("Undo performed")
        self._trace("undo")
        return previous

    def redo(self, current: Document) -> Optional[Document]:
        if not self.redo_stack:
            logger.debug("Nothing to redo")
            return None

        following = self.redo_stack.pop()
        self.undo_stack.append(current.clone())
        if len(self.undo_stack) > self.max_undo:
            del self.undo_stack[:len(self.undo_stack) - self.max_undo]
        logger.info("Redo performed")
        self._trace("redo")
        return following

    def _trace(self, action: str):
        if is_enabled("history_debug"):
            logger.debug(f"[HISTORY] {action}: undo={len(self.undo_stack)} redo={len(self.redo_stack)}")
