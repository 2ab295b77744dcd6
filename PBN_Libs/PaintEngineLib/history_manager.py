"""
Undo/redo history for the paint engine.

The timeline is linear: pushing a snapshot after an undo discards every entry
past the current step. Each snapshot holds a private, read-only copy of every
paintable layer so restoring one is a global checkpoint across layers.

Classes:
    HistorySnapshot: Immutable mapping of layer id -> PixelBuffer copy
    HistoryManager: Timeline of snapshots with a current step
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional

from PBN_Libs.ImageEditingLib.image_models import PixelBuffer

logger = logging.getLogger(__name__)


class HistorySnapshot(Mapping[int, PixelBuffer]):
    """
    Frozen copy of all layer buffers at one point in time.

    Buffers are copied on construction and their arrays are made read-only,
    so a snapshot never aliases a live layer buffer.
    """

    def __init__(self, buffers: Mapping[int, PixelBuffer]):
        self._buffers: Dict[int, PixelBuffer] = {
            int(layer_id): buffer.frozen_copy() for layer_id, buffer in buffers.items()
        }

    def __getitem__(self, layer_id: int) -> PixelBuffer:
        return self._buffers[layer_id]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._buffers))

    def __len__(self) -> int:
        return len(self._buffers)

    def __repr__(self) -> str:
        return f"HistorySnapshot(layers={list(self)})"


class HistoryManager:
    """
    Linear undo/redo timeline.

    Example:
        >>> history = HistoryManager()
        >>> history.push(engine.capture_snapshot())
        >>> snapshot = history.undo()
        >>> if snapshot is not None:
        ...     engine.restore_snapshot(snapshot)
    """

    def __init__(self, max_entries: Optional[int] = None):
        """
        Args:
            max_entries: Oldest entries are dropped beyond this many (None = unlimited)
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: List[HistorySnapshot] = []
        self._step = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def step(self) -> int:
        return self._step

    @property
    def can_undo(self) -> bool:
        return self._step > 0

    @property
    def can_redo(self) -> bool:
        return self._step < len(self._entries) - 1

    def current(self) -> Optional[HistorySnapshot]:
        if self._step < 0:
            return None
        return self._entries[self._step]

    def push(self, snapshot: HistorySnapshot) -> None:
        """Append a snapshot, discarding any redoable entries."""
        del self._entries[self._step + 1:]
        self._entries.append(snapshot)

        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]

        self._step = len(self._entries) - 1
        logger.debug(f"History push: step {self._step} of {len(self._entries)}")

    def undo(self) -> Optional[HistorySnapshot]:
        """
        Step back one entry.

        Returns:
            The snapshot to restore, or None if there is nothing to undo
        """
        if not self.can_undo:
            return None
        self._step -= 1
        return self._entries[self._step]

    def redo(self) -> Optional[HistorySnapshot]:
        """
        Step forward one entry.

        Returns:
            The snapshot to restore, or None if there is nothing to redo
        """
        if not self.can_redo:
            return None
        self._step += 1
        return self._entries[self._step]

    def reset(self, snapshot: HistorySnapshot) -> None:
        """Discard the whole timeline and start over from one snapshot."""
        self._entries = [snapshot]
        self._step = 0
        logger.debug("History reset")

    def clear(self) -> None:
        self._entries = []
        self._step = -1
