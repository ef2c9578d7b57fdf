# playback.py
# Periodic cursor advance through the frame list

import logging

from PyQt5 import QtCore

from .session import Session
from .timers import qt_timer_factory

logger = logging.getLogger(__name__)


class PlaybackScheduler(QtCore.QObject):
    """Stopped -> Playing -> Stopped.

    A changed fps is picked up when the pending tick fires, so at most
    one tick runs on the old interval.
    """

    cursor_changed = QtCore.pyqtSignal(int)
    playing_changed = QtCore.pyqtSignal(bool)

    def __init__(self, session: Session, timer_factory=qt_timer_factory, parent=None):
        super().__init__(parent)
        self.session = session
        self._timer = timer_factory(self.tick)
        self._playing = False
        session.store.frames_changed.connect(self._clamp_cursor)

    @property
    def is_playing(self):
        return self._playing

    @property
    def cursor(self):
        return self.session.cursor

    @property
    def interval_ms(self):
        fps = self.session.fps
        return int(1000 / fps) if fps > 0 else 1000

    def start(self):
        if self._playing or len(self.session.store) == 0:
            return
        self._playing = True
        self._timer.start(self.interval_ms)
        logger.debug("Playback started at %d fps from frame %d", self.session.fps, self.cursor)
        self.playing_changed.emit(True)

    def stop(self):
        # Always cancel the timer, even if we think we're stopped.
        self._timer.stop()
        if self._playing:
            self._playing = False
            logger.debug("Playback stopped at frame %d", self.cursor)
            self.playing_changed.emit(False)

    def toggle(self):
        if self._playing:
            self.stop()
        else:
            self.start()

    def tick(self):
        if not self._playing:
            return
        n = len(self.session.store)
        if n == 0:
            self.stop()
            return
        self._set_cursor((self.session.cursor + 1) % n)
        interval = self.interval_ms
        if self._timer.interval() != interval:
            self._timer.set_interval(interval)

    # ---------------- Navigation ----------------

    def seek(self, index):
        n = len(self.session.store)
        if n == 0:
            self._set_cursor(0)
            return
        self._set_cursor(max(0, min(index, n - 1)))

    def step(self, delta):
        self.stop()
        self.seek(self.session.cursor + delta)

    def _clamp_cursor(self):
        n = len(self.session.store)
        self._set_cursor(min(self.session.cursor, n - 1) if n else 0)

    def _set_cursor(self, index):
        if index != self.session.cursor:
            self.session.cursor = index
            self.cursor_changed.emit(index)
