"""Undo/redo over bounded snapshot stacks.

- capture(label): snapshot the store before a mutating action; clears redo.
- undo(): push the current state onto redo, restore the latest capture.
- redo(): mirror of undo().

Both stacks hold at most `max_depth` snapshots; pushing beyond that drops
the oldest entry. Empty stacks make undo()/redo() a no-op returning None.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

from speech_segmenter.history.snapshot import HistorySnapshot
from speech_segmenter.store import AnnotationStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50


class HistoryManager:
    """Snapshot-based undo/redo for an AnnotationStore.

    Interface:
      history = HistoryManager(store, max_depth=50)
      history.capture("delete segment")   # before mutating the store
      store.delete_segment(seg_id)
      history.undo()    # -> restored HistorySnapshot, or None
      history.redo()    # -> restored HistorySnapshot, or None
    """

    def __init__(self, store: AnnotationStore, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.store = store
        self.max_depth = max_depth
        self._undo: Deque[HistorySnapshot] = deque(maxlen=max_depth)
        self._redo: Deque[HistorySnapshot] = deque(maxlen=max_depth)

    def capture(self, action_label: str = "action") -> HistorySnapshot:
        """Snapshot the current state onto the undo stack and clear redo."""
        snapshot = HistorySnapshot.capture(self.store, action_label)
        self._undo.append(snapshot)
        self._redo.clear()
        logger.info("State saved: %s (%d states in history)", action_label, len(self._undo))
        return snapshot

    def undo(self) -> Optional[HistorySnapshot]:
        if not self._undo:
            logger.info("Nothing to undo")
            return None
        self._redo.append(HistorySnapshot.capture(self.store, "before_undo"))
        snapshot = self._undo.pop()
        self.restore(snapshot)
        logger.info("Undo: %s", snapshot.action_label)
        return snapshot

    def redo(self) -> Optional[HistorySnapshot]:
        if not self._redo:
            logger.info("Nothing to redo")
            return None
        self._undo.append(HistorySnapshot.capture(self.store, "before_redo"))
        snapshot = self._redo.pop()
        self.restore(snapshot)
        logger.info("Redo applied")
        return snapshot

    def restore(self, snapshot: HistorySnapshot) -> None:
        """Replace segments and speakers with the snapshot's, in one swap."""
        segments, speakers = snapshot.materialize()
        self.store.replace(segments, speakers)

    def clear(self) -> None:
        """Drop all history (e.g. when new audio is loaded)."""
        self._undo.clear()
        self._redo.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def undo_labels(self) -> List[str]:
        """Action labels on the undo stack, oldest first."""
        return [s.action_label for s in self._undo]
