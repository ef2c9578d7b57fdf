# models.py
# Frame and Project records

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from .config import DEFAULT_FPS

logger = logging.getLogger(__name__)


def new_id():
    # uuid4 keeps ids distinct even for captures within one clock tick
    return uuid.uuid4().hex


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def current_time_label():
    return time.strftime("%H:%M:%S")


@dataclass
class Frame:
    image: str
    thumbnail: str
    imported: bool = False
    id: str = field(default_factory=new_id)
    captured_at: str = field(default_factory=current_time_label)

    def copy(self) -> "Frame":
        """Same payloads, fresh identity."""
        return Frame(
            image=self.image,
            thumbnail=self.thumbnail,
            imported=self.imported,
            captured_at=self.captured_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "captured_at": self.captured_at,
            "image": self.image,
            "thumbnail": self.thumbnail,
            "imported": self.imported,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Frame":
        image, thumbnail = data["image"], data["thumbnail"]
        if not (isinstance(image, str) and image and isinstance(thumbnail, str) and thumbnail):
            raise TypeError("Frame record has no image payloads")
        return cls(
            image=image,
            thumbnail=thumbnail,
            imported=bool(data.get("imported", False)),
            id=str(data.get("id") or new_id()),
            captured_at=data.get("captured_at", ""),
        )


@dataclass
class Project:
    name: str
    frames: List[Frame] = field(default_factory=list)
    fps: int = DEFAULT_FPS
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_iso)
    last_modified: str = field(default_factory=now_iso)

    @property
    def thumbnail(self) -> Optional[str]:
        return self.frames[0].thumbnail if self.frames else None

    @property
    def duration(self) -> float:
        return len(self.frames) / self.fps if self.fps > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        # thumbnail and duration are stored for listings only; from_dict recomputes them
        return {
            "id": self.id,
            "name": self.name,
            "frames": [f.to_dict() for f in self.frames],
            "fps": self.fps,
            "created_at": self.created_at,
            "last_modified": self.last_modified,
            "thumbnail": self.thumbnail,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        frames = []
        for raw in data.get("frames", []):
            try:
                frames.append(Frame.from_dict(raw))
            except (KeyError, TypeError):
                logger.warning("Dropping malformed frame record in project %r", data.get("name"))
        try:
            fps = int(data.get("fps", DEFAULT_FPS))
        except (TypeError, ValueError):
            fps = DEFAULT_FPS
        created = data.get("created_at") or now_iso()
        return cls(
            name=str(data.get("name", "Untitled")),
            frames=frames,
            fps=fps if fps > 0 else DEFAULT_FPS,
            id=str(data.get("id") or new_id()),
            created_at=created,
            last_modified=data.get("last_modified") or created,
        )


__all__ = ["Frame", "Project", "new_id", "now_iso", "current_time_label"]
