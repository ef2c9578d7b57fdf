# selection.py
# Multi-select and drag-reorder over the frame list

import logging

from .session import Session

logger = logging.getLogger(__name__)


class SelectionController:
    """Selections never survive a structural edit; index meaning shifts."""

    def __init__(self, session: Session):
        self.session = session
        session.store.frames_changed.connect(self.clear)

    @property
    def selected(self):
        return sorted(self.session.selection)

    def toggle(self, index, additive=False):
        if not 0 <= index < len(self.session.store):
            return
        sel = self.session.selection
        if not additive:
            sel.clear()
            sel.add(index)
        elif index in sel:
            sel.discard(index)
        else:
            sel.add(index)

    def select_all(self):
        self.session.selection.clear()
        self.session.selection.update(range(len(self.session.store)))

    def clear(self):
        self.session.selection.clear()

    def drag_reorder(self, from_index, to_index) -> bool:
        return self.session.store.move_to(from_index, to_index)

    def delete_selected(self) -> int:
        return self.session.store.delete_indices(set(self.session.selection))

    def duplicate_selected(self) -> int:
        return self.session.store.duplicate_indices(set(self.session.selection))
