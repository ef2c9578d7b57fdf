# session.py
# Explicit context shared by the components working on the open project

from dataclasses import dataclass, field
from typing import Optional, Set

from .frames import FrameStore
from .models import Project


@dataclass
class Session:
    """Active project pointer, selection and playback cursor.

    The frame store is bound to ``project.frames``; there is exactly one
    list of frames and every component edits or reads that one.
    """

    store: FrameStore = field(default_factory=FrameStore)
    project: Optional[Project] = None
    selection: Set[int] = field(default_factory=set)
    cursor: int = 0

    @property
    def is_open(self) -> bool:
        return self.project is not None

    @property
    def fps(self) -> int:
        return self.project.fps if self.project is not None else 0

    def activate(self, project: Project):
        self.project = project
        self.store.bind(project.frames)
        self.selection.clear()
        self.cursor = 0

    def deactivate(self):
        self.project = None
        self.store.bind([])
        self.selection.clear()
        self.cursor = 0
