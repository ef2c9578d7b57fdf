# capture.py
# Camera and file sources, and the capture-to-frame pipeline

import contextlib
import enum
import logging
import mimetypes
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError
from PyQt5 import QtCore

from . import codec
from .config import DEFAULT_CAPTURE_SIZE, IMPORT_MAX_SIZE
from .errors import CodecError, DeviceError, DeviceErrorReason
from .models import Frame
from .session import Session

logger = logging.getLogger(__name__)


def list_camera_indices(max_index=8):
    """Return indices of cameras that can be opened."""
    available = []
    for i in range(max_index):
        cap = cv2.VideoCapture(i)
        if not cap.isOpened():
            cap.release()
            continue
        ret, _ = cap.read()
        if ret:
            available.append(i)
        cap.release()
    return available


# ---------------- Sources ----------------

class CameraSource:
    """Owns at most one OpenCV device handle at a time."""

    def __init__(self):
        self.capture = None
        self.device_index = None

    @property
    def is_open(self):
        return self.capture is not None

    def open(self, index, constraints=DEFAULT_CAPTURE_SIZE):
        # never leak the previous handle
        self.close()
        cap = cv2.VideoCapture(index)
        width, height = constraints
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        if not cap.isOpened():
            cap.release()
            raise DeviceError(DeviceErrorReason.NOT_FOUND, f"Failed to open device {index}")
        ret, _ = cap.read()
        if not ret:
            cap.release()
            raise DeviceError(DeviceErrorReason.BUSY, f"No frames from device {index}")
        self.capture = cap
        self.device_index = index
        logger.info("Opened device %s at %s", index, self.resolution())

    def resolution(self):
        if self.capture is None:
            return None
        w = int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        h = int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        if w <= 0 or h <= 0:
            return None
        return w, h

    def current_bitmap(self):
        if self.capture is None:
            return None
        ret, frame = self.capture.read()
        return frame if ret else None

    def close(self):
        if self.capture is not None:
            self.capture.release()
            logger.debug("Released device %s", self.device_index)
        self.capture = None
        self.device_index = None


class FileImportSource:
    @staticmethod
    def is_image(path):
        mime, _ = mimetypes.guess_type(str(path))
        return bool(mime) and mime.startswith("image/")

    def decode(self, path) -> np.ndarray:
        try:
            with Image.open(path) as img:
                rgb = np.asarray(img.convert("RGB"))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise CodecError(f"Unsupported image {Path(path).name}: {e}") from e
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


# ---------------- Pipeline ----------------

class CaptureState(enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class CapturePipeline(QtCore.QObject):
    """Source -> codec -> frame store, one capture at a time."""

    acknowledged = QtCore.pyqtSignal()
    frame_added = QtCore.pyqtSignal(int)
    status_changed = QtCore.pyqtSignal(str)

    def __init__(self, session: Session, source=None, importer=None, parent=None):
        super().__init__(parent)
        self.session = session
        self.source = source if source is not None else CameraSource()
        self.importer = importer if importer is not None else FileImportSource()
        self.state = CaptureState.IDLE
        self.status_message = ""
        self.last_error = None

    @contextlib.contextmanager
    def _in_flight(self):
        self.state = CaptureState.IN_FLIGHT
        try:
            yield
        finally:
            self.state = CaptureState.IDLE

    def _set_status(self, message):
        self.status_message = message
        self.status_changed.emit(message)

    def _append(self, bitmap, bound, imported=False):
        encoded = codec.encode(bitmap, *bound)
        frame = Frame(image=encoded.image, thumbnail=encoded.thumbnail, imported=imported)
        return self.session.store.append(frame)

    # ---------------- Camera ----------------

    def open_camera(self, index, constraints=DEFAULT_CAPTURE_SIZE):
        try:
            self.source.open(index, constraints)
        except DeviceError as e:
            logger.warning("Camera unavailable: %s", e)
            self.last_error = e
            self._set_status(e.user_message)
            return False
        self.last_error = None
        self._set_status("")
        return True

    def release(self):
        self.source.close()

    def capture_frame(self):
        """Returns the new frame count, or None when nothing was captured."""
        if self.state is CaptureState.IN_FLIGHT or not self.session.is_open:
            return None
        with self._in_flight():
            bitmap = self.source.current_bitmap()
            if bitmap is None:
                return None
            h, w = bitmap.shape[:2]
            bound = self.source.resolution() or DEFAULT_CAPTURE_SIZE
            try:
                count = self._append(bitmap, bound)
            except CodecError as e:
                logger.error("Capture failed: %s", e, exc_info=True)
                self.last_error = e
                self._set_status(f"Capture failed: {e}")
                return None
        logger.debug("Captured frame %d (%dx%d)", count, w, h)
        if self.status_message:
            self._set_status("")
        self.frame_added.emit(count - 1)
        self.acknowledged.emit()
        return count

    # ---------------- Import ----------------

    def import_files(self, paths, max_size=IMPORT_MAX_SIZE):
        """Append every decodable image in order; returns how many were added."""
        if self.state is CaptureState.IN_FLIGHT or not self.session.is_open:
            return 0
        added = 0
        with self._in_flight():
            for path in paths:
                if not self.importer.is_image(path):
                    continue
                try:
                    bitmap = self.importer.decode(path)
                    count = self._append(bitmap, max_size, imported=True)
                except CodecError as e:
                    logger.warning("Skipping %s: %s", path, e)
                    self.last_error = e
                    continue
                added += 1
                self.frame_added.emit(count - 1)
        if added:
            logger.info("Imported %d image(s)", added)
        return added
