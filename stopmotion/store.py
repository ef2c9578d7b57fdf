# store.py
# Whole-collection JSON persistence of projects

import json
import logging
import os
from pathlib import Path

from .config import DEFAULT_PROJECT_NAME, STORE_KEY, STORE_PATH
from .errors import PersistenceError
from .models import Project

logger = logging.getLogger(__name__)


def ensure_dir(p):
    Path(p).mkdir(parents=True, exist_ok=True)


def default_projects():
    return [Project(name=DEFAULT_PROJECT_NAME)]


class JsonProjectStore:
    """All projects live in one JSON document under ``STORE_KEY``.

    Reads never fail: a missing, empty or corrupt file yields a single
    seeded project. Writes replace the whole document.
    """

    def __init__(self, path=STORE_PATH, key=STORE_KEY):
        self.path = Path(path)
        self.key = key

    def load_all(self):
        if not self.path.exists():
            return default_projects()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            records = data[self.key]
            projects = [Project.from_dict(r) for r in records]
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Project store %s unreadable, starting fresh", self.path, exc_info=True)
            return default_projects()
        if not projects:
            return default_projects()
        logger.info("Loaded %d project(s) from %s", len(projects), self.path)
        return projects

    def save_all(self, projects):
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            ensure_dir(self.path.parent)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({self.key: [p.to_dict() for p in projects]}, f, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
        logger.debug("Wrote %d project(s) to %s", len(projects), self.path)
