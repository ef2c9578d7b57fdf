# onion.py
# Onion-skin layers over the live capture preview

import logging
from typing import NamedTuple

import cv2
import numpy as np

from . import codec
from .config import DEFAULT_ONION_OPACITY, ONION_LAYER_COUNTS
from .errors import CodecError, ValidationError
from .models import Frame

logger = logging.getLogger(__name__)

SNAP_CENTER = 0.5
SNAP_RADIUS = 0.05


def snap_opacity(value):
    """Values within 0.05 of the middle land exactly on 0.5."""
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"Opacity {value} outside [0, 1]")
    # 0.55 - 0.5 is a hair above 0.05 in binary floating point
    if abs(value - SNAP_CENTER) <= SNAP_RADIUS + 1e-9:
        return SNAP_CENTER
    return value


class OnionLayer(NamedTuple):
    frame: Frame
    opacity: float


class OnionSkin:
    def __init__(self, depth=0, opacity=DEFAULT_ONION_OPACITY, enabled=True):
        self.depth = depth
        self.opacity = snap_opacity(opacity)
        self.enabled = enabled
        self._thumb_cache = {}

    @property
    def layer_count(self):
        return ONION_LAYER_COUNTS[self.depth]

    def cycle_depth(self):
        self.depth = (self.depth + 1) % len(ONION_LAYER_COUNTS)
        return self.depth

    def set_depth(self, depth):
        if depth not in range(len(ONION_LAYER_COUNTS)):
            raise ValidationError(f"Onion depth {depth} not in 0..{len(ONION_LAYER_COUNTS) - 1}")
        self.depth = depth

    def set_opacity(self, value):
        self.opacity = snap_opacity(value)
        return self.opacity

    def layers(self, frames):
        """Most recent frames, nearest first, each fainter than the one before."""
        if not self.enabled:
            return []
        recent = list(frames)[-self.layer_count:]
        recent.reverse()
        return [OnionLayer(f, self.opacity / distance) for distance, f in enumerate(recent, start=1)]

    # ---------------- Compositing ----------------

    def _thumbnail_bitmap(self, frame: Frame):
        img = self._thumb_cache.get(frame.id)
        if img is None:
            img = codec.decode(frame.thumbnail)
            self._thumb_cache[frame.id] = img
        return img

    def composite(self, live: np.ndarray, frames) -> np.ndarray:
        layers = self.layers(frames)
        if not layers:
            return live
        h, w = live.shape[:2]
        out = live.astype(np.float32)
        # farthest first so the nearest frame ends up on top
        for layer in reversed(layers):
            try:
                thumb = self._thumbnail_bitmap(layer.frame)
            except CodecError:
                logger.warning("Skipping onion layer for frame %s", layer.frame.id, exc_info=True)
                continue
            overlay = cv2.resize(thumb, (w, h)).astype(np.float32)
            if live.ndim == 2:
                overlay = cv2.cvtColor(overlay, cv2.COLOR_BGR2GRAY)
            out = cv2.addWeighted(out, 1 - layer.opacity, overlay, layer.opacity, 0)
        return np.clip(out, 0, 255).astype(np.uint8)

    def forget(self, keep_ids):
        """Drop cached thumbnails for frames no longer in the project."""
        for fid in list(self._thumb_cache):
            if fid not in keep_ids:
                del self._thumb_cache[fid]
