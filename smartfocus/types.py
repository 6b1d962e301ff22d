from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Tuple


PERSON_LABEL = "person"

Velocity = Tuple[float, float]


@dataclass(frozen=True)
class BBox:
    """Axis-aligned rectangle in source-frame pixels: top-left corner plus size."""

    x: float
    y: float
    w: float
    h: float

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    def shifted(self, dx: float, dy: float) -> BBox:
        """Same size, moved by (dx, dy)."""
        return replace(self, x=self.x + dx, y=self.y + dy)

    def contains(self, px: float, py: float) -> bool:
        # Inclusive on all four edges.
        return self.x <= px <= self.x2 and self.y <= py <= self.y2

    def is_valid(self) -> bool:
        coords = (self.x, self.y, self.w, self.h)
        return all(math.isfinite(c) for c in coords) and self.w >= 0 and self.h >= 0

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.w, self.h


@dataclass(frozen=True)
class Detection:
    """Single detector output for one frame, in absolute pixel coordinates."""

    bbox: BBox
    score: float
    label: str = PERSON_LABEL


@dataclass
class Track:
    """
    Tracking output record used by the renderer, point query and HTTP layer.

    `age` counts frames since the last confirmed match; `velocity` is the
    per-frame (dx, dy) taken from the last two confirmed positions.
    """

    track_id: int
    bbox: BBox
    score: float
    age: int = 0
    velocity: Velocity = field(default=(0.0, 0.0))

    def snapshot(self) -> Track:
        # BBox and the velocity tuple are immutable, so a shallow copy is enough.
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "id": self.track_id,
            "bbox": list(self.bbox.as_tuple()),
            "score": self.score,
            "age": self.age,
            "velocity": list(self.velocity),
        }
