"""Frame-sequence engine for stop-motion capture."""

from .capture import CameraSource, CapturePipeline, CaptureState, FileImportSource
from .errors import (
    CodecError,
    DeviceError,
    DeviceErrorReason,
    PersistenceError,
    StopMotionError,
    ValidationError,
)
from .frames import FrameStore
from .models import Frame, Project
from .onion import OnionLayer, OnionSkin, snap_opacity
from .playback import PlaybackScheduler
from .projects import ProjectManager
from .selection import SelectionController
from .session import Session
from .store import JsonProjectStore
from .studio import Studio

__version__ = "0.2.0"

__all__ = [
    "CameraSource",
    "CapturePipeline",
    "CaptureState",
    "CodecError",
    "DeviceError",
    "DeviceErrorReason",
    "FileImportSource",
    "Frame",
    "FrameStore",
    "JsonProjectStore",
    "OnionLayer",
    "OnionSkin",
    "PersistenceError",
    "PlaybackScheduler",
    "Project",
    "ProjectManager",
    "SelectionController",
    "Session",
    "StopMotionError",
    "Studio",
    "ValidationError",
    "snap_opacity",
]
