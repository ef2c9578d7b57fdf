# codec.py
# Dual-resolution JPEG encoding of raw BGR bitmaps

import base64
import logging
from typing import NamedTuple

import cv2
import numpy as np

from .config import FULL_QUALITY, THUMBNAIL_QUALITY
from .errors import CodecError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/jpeg;base64,"


class EncodedImage(NamedTuple):
    image: str
    thumbnail: str


def fit_within(width, height, max_width, max_height):
    """Return (w, h) scaled uniformly to fit the bound. Never upscales."""
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    new_w = min(max_width, max(1, round(width * ratio)))
    new_h = min(max_height, max(1, round(height * ratio)))
    return new_w, new_h


def downscale(bitmap: np.ndarray, max_width, max_height) -> np.ndarray:
    h, w = bitmap.shape[:2]
    new_w, new_h = fit_within(w, h, max_width, max_height)
    if (new_w, new_h) == (w, h):
        return bitmap
    return cv2.resize(bitmap, (new_w, new_h), interpolation=cv2.INTER_AREA)


def to_data_url(bitmap: np.ndarray, quality: int) -> str:
    ok, buf = cv2.imencode(".jpg", bitmap, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise CodecError(f"JPEG encoding failed at quality {quality}")
    return DATA_URL_PREFIX + base64.b64encode(buf.tobytes()).decode("ascii")


def encode(bitmap, max_width, max_height) -> EncodedImage:
    if bitmap is None or not isinstance(bitmap, np.ndarray) or bitmap.size == 0:
        raise CodecError("Empty bitmap")
    if bitmap.ndim not in (2, 3):
        raise CodecError(f"Unsupported bitmap shape {bitmap.shape}")
    if bitmap.dtype != np.uint8:
        bitmap = np.clip(bitmap, 0, 255).astype(np.uint8)
    scaled = downscale(bitmap, max_width, max_height)
    try:
        return EncodedImage(
            image=to_data_url(scaled, FULL_QUALITY),
            thumbnail=to_data_url(scaled, THUMBNAIL_QUALITY),
        )
    except cv2.error as e:
        raise CodecError(str(e)) from e


def decode(payload: str) -> np.ndarray:
    """Decode a data URL (or bare base64) back into a BGR bitmap."""
    if not isinstance(payload, str):
        raise CodecError(f"Payload must be a string, got {type(payload).__name__}")
    data = payload.split(",", 1)[1] if payload.startswith("data:") else payload
    try:
        raw = base64.b64decode(data, validate=True)
    except (ValueError, TypeError) as e:
        raise CodecError("Payload is not valid base64") from e
    if not raw:
        raise CodecError("Empty payload")
    try:
        img = cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise CodecError(str(e)) from e
    if img is None:
        raise CodecError("Payload is not a decodable image")
    return img


__all__ = ["EncodedImage", "fit_within", "downscale", "encode", "decode"]
