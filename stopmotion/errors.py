"""Error taxonomy for StopMotion Studio.

None of these are fatal to the process. Each one degrades a single
operation while the in-memory project state stays authoritative.
"""
import enum


class StopMotionError(Exception):
    """Base exception for all StopMotion Studio errors."""


class DeviceErrorReason(enum.Enum):
    DENIED = "denied"
    NOT_FOUND = "not_found"
    BUSY = "busy"


DEVICE_MESSAGES = {
    DeviceErrorReason.DENIED: "Camera access denied. Allow it in the system privacy settings.",
    DeviceErrorReason.NOT_FOUND: "No camera found.",
    DeviceErrorReason.BUSY: "Camera already in use by another application.",
}


class DeviceError(StopMotionError):
    """The capture device could not be opened or read."""

    def __init__(self, reason: DeviceErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(detail or DEVICE_MESSAGES[reason])

    @property
    def user_message(self) -> str:
        return DEVICE_MESSAGES[self.reason]


class CodecError(StopMotionError):
    """An image could not be decoded or encoded."""


class PersistenceError(StopMotionError):
    """The project store could not be written."""


class ValidationError(StopMotionError):
    """Input rejected before any state was touched."""
