# projects.py
# Project CRUD, open/close and debounced persistence

import logging

from PyQt5 import QtCore

from .config import PERSIST_DEBOUNCE_MS
from .errors import PersistenceError, ValidationError
from .models import Project, now_iso
from .session import Session
from .timers import qt_timer_factory

logger = logging.getLogger(__name__)


def clean_name(name):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name must not be empty")
    return name


class ProjectManager(QtCore.QObject):
    """Owns the project collection and which one is open.

    Edits mark the session dirty; a single-shot timer writes once after
    ``PERSIST_DEBOUNCE_MS`` of quiet. ``flush`` writes immediately and
    ``close`` always flushes first.
    """

    projects_changed = QtCore.pyqtSignal()
    project_opened = QtCore.pyqtSignal(object)
    project_closed = QtCore.pyqtSignal()

    def __init__(self, store, session: Session, scheduler=None, capture=None,
                 timer_factory=qt_timer_factory, debounce_ms=PERSIST_DEBOUNCE_MS, parent=None):
        super().__init__(parent)
        self.store = store
        self.session = session
        self.scheduler = scheduler
        self.capture = capture
        self.debounce_ms = debounce_ms
        self.dirty = False
        self._debounce = timer_factory(self._on_debounce, single_shot=True)
        self.projects = store.load_all()
        session.store.frames_changed.connect(self.mark_dirty)

    @property
    def active(self):
        return self.session.project

    def find(self, project_id):
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    # ---------------- Persistence ----------------

    def _write(self):
        """Write the whole collection; PersistenceError is logged, not raised."""
        try:
            self.store.save_all(self.projects)
        except PersistenceError:
            logger.error("Saving projects failed, will retry", exc_info=True)
            return False
        return True

    def _write_or_retry(self):
        if self._write():
            # the whole collection went out, pending edits included
            self.dirty = False
            return True
        # keep the change queued for the next debounce window and for flush
        self.dirty = True
        self._debounce.stop()
        self._debounce.start(self.debounce_ms)
        return False

    def mark_dirty(self):
        if not self.session.is_open:
            return
        self.dirty = True
        # restart: a burst of edits yields one write
        self._debounce.stop()
        self._debounce.start(self.debounce_ms)

    def persist(self):
        project = self.session.project
        if project is not None:
            project.last_modified = now_iso()
        if self._write():
            self.dirty = False
            if project is not None:
                logger.debug("Persisted %r (%d frames, %.2fs)",
                             project.name, len(project.frames), project.duration)
            return True
        # retry on the next debounce window, even after the project is closed
        self._debounce.start(self.debounce_ms)
        return False

    def _on_debounce(self):
        if self.dirty:
            self.persist()

    def flush(self):
        self._debounce.stop()
        if self.dirty:
            return self.persist()
        return True

    # ---------------- Lifecycle ----------------

    def create(self, name) -> Project:
        project = Project(name=clean_name(name))
        self.projects.append(project)
        self._write_or_retry()
        logger.info("Created project %r", project.name)
        self.projects_changed.emit()
        return project

    def open(self, project):
        if isinstance(project, str):
            found = self.find(project)
            if found is None:
                raise ValidationError(f"No project with id {project}")
            project = found
        if self.session.project is not None:
            self.close()
        self.session.activate(project)
        logger.info("Opened project %r", project.name)
        self.project_opened.emit(project)
        return project

    def close(self):
        if self.scheduler is not None:
            self.scheduler.stop()
        self.flush()
        if self.capture is not None:
            self.capture.release()
        if self.session.project is not None:
            logger.info("Closed project %r", self.session.project.name)
            self.session.deactivate()
            self.project_closed.emit()

    def set_fps(self, fps):
        if isinstance(fps, bool) or not isinstance(fps, int) or fps <= 0:
            raise ValidationError(f"fps must be a positive integer, got {fps!r}")
        project = self.session.project
        if project is None or project.fps == fps:
            return
        project.fps = fps
        self.mark_dirty()

    def rename(self, project_id, name):
        name = clean_name(name)
        project = self.find(project_id)
        if project is None:
            raise ValidationError(f"No project with id {project_id}")
        project.name = name
        project.last_modified = now_iso()
        self._write_or_retry()
        self.projects_changed.emit()

    def delete(self, project_id):
        project = self.find(project_id)
        if project is None:
            return False
        if project is self.session.project:
            self.close()
        self.projects.remove(project)
        self._write_or_retry()
        logger.info("Deleted project %r", project.name)
        self.projects_changed.emit()
        return True
