# studio.py
# Wires the frame-sequence engine together and routes the capture keys

import logging

from .capture import CapturePipeline
from .onion import OnionSkin
from .playback import PlaybackScheduler
from .projects import ProjectManager
from .selection import SelectionController
from .session import Session
from .store import JsonProjectStore
from .timers import qt_timer_factory

logger = logging.getLogger(__name__)


class Studio:
    def __init__(self, store=None, source=None, importer=None, timer_factory=qt_timer_factory):
        self.session = Session()
        self.pipeline = CapturePipeline(self.session, source=source, importer=importer)
        self.onion = OnionSkin()
        self.scheduler = PlaybackScheduler(self.session, timer_factory=timer_factory)
        self.selection = SelectionController(self.session)
        self.manager = ProjectManager(
            store if store is not None else JsonProjectStore(),
            self.session,
            scheduler=self.scheduler,
            capture=self.pipeline,
            timer_factory=timer_factory,
        )
        self.pipeline.frame_added.connect(self.scheduler.seek)

    @property
    def frames(self):
        return self.session.store

    def handle_key(self, key):
        """Space captures, p toggles playback, o cycles onion depth."""
        if not self.session.is_open:
            return False
        if key == " ":
            self.pipeline.capture_frame()
        elif key == "p":
            self.scheduler.toggle()
        elif key == "o":
            self.onion.cycle_depth()
        else:
            return False
        return True

    def shutdown(self):
        self.manager.close()
        self.pipeline.release()
