# frames.py
# Ordered frame sequence of the active project

import logging

from PyQt5 import QtCore

from .models import Frame

logger = logging.getLogger(__name__)


class FrameStore(QtCore.QObject):
    """Edits the open project's frame list in place.

    Index problems (out of range, empty sets) are silent no-ops. Every
    operation computes the new ordering first and then swaps it into the
    shared list, so listeners never see a half-applied edit.
    """

    frames_changed = QtCore.pyqtSignal()

    def __init__(self, frames=None, parent=None):
        super().__init__(parent)
        self._frames = frames if frames is not None else []

    def bind(self, frames):
        """Point the store at another project's list without copying it."""
        self._frames = frames

    @property
    def frames(self):
        return self._frames

    def __len__(self):
        return len(self._frames)

    def __getitem__(self, index):
        return self._frames[index]

    def __iter__(self):
        return iter(self._frames)

    def _replace(self, new_frames):
        self._frames[:] = new_frames
        self.frames_changed.emit()

    # ---------------- Mutations ----------------

    def append(self, frame: Frame) -> int:
        self._replace(self._frames + [frame])
        return len(self._frames)

    def insert_at(self, index, frame: Frame) -> int:
        index = max(0, min(index, len(self._frames)))
        new_frames = list(self._frames)
        new_frames.insert(index, frame)
        self._replace(new_frames)
        return index

    def move_to(self, from_index, to_index) -> bool:
        n = len(self._frames)
        if not 0 <= from_index < n or from_index == to_index:
            return False
        new_frames = list(self._frames)
        item = new_frames.pop(from_index)
        new_frames.insert(max(0, min(to_index, len(new_frames))), item)
        self._replace(new_frames)
        return True

    def delete_indices(self, indices) -> int:
        n = len(self._frames)
        doomed = {i for i in indices if 0 <= i < n}
        if not doomed:
            return 0
        self._replace([f for i, f in enumerate(self._frames) if i not in doomed])
        logger.debug("Deleted %d frame(s)", len(doomed))
        return len(doomed)

    def delete_at(self, index) -> bool:
        return self.delete_indices({index}) == 1

    def duplicate_indices(self, indices) -> int:
        n = len(self._frames)
        sources = sorted({i for i in indices if 0 <= i < n})
        if not sources:
            return n
        copies = [self._frames[i].copy() for i in sources]
        self._replace(self._frames + copies)
        logger.debug("Duplicated frames %s", sources)
        return len(self._frames)


__all__ = ["FrameStore"]
