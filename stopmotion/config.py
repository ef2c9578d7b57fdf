# config.py
# Constants and environment overrides for StopMotion Studio

import logging
import os
from pathlib import Path

APP_NAME = "StopMotion Studio"
DEFAULT_PROJECTS_ROOT = str(Path.home() / "StopMotionProjects")
STORE_PATH = os.environ.get(
    "STOPMOTION_STORE", str(Path(DEFAULT_PROJECTS_ROOT) / "projects.json")
)
STORE_KEY = "stopmotion-projects"
DEFAULT_PROJECT_NAME = "My First Film"

DEFAULT_FPS = 12
FPS_CHOICES = [8, 12, 16, 24, 48]

FULL_QUALITY = 85
THUMBNAIL_QUALITY = 40

# Imports are bounded; live captures keep the camera's native size.
IMPORT_MAX_SIZE = (1920, 1080)
DEFAULT_CAPTURE_SIZE = (1280, 720)

PERSIST_DEBOUNCE_MS = 1000
PREVIEW_INTERVAL_MS = 30
FLASH_MS = 100

ONION_LAYER_COUNTS = (1, 3, 5)
DEFAULT_ONION_OPACITY = 0.5

LOG_LEVEL = os.environ.get("STOPMOTION_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level=None):
    level = (level or LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
