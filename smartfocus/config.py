from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrackerConfig:
    """
    Association and lifecycle constants for PersonTracker.

    Fixed for the lifetime of a tracker; build a new tracker to change them.
    """

    # A (track, detection) pair is considered only if its combined score is strictly above this.
    match_threshold: float = 0.1
    # Tracks unmatched for this many consecutive frames are dropped.
    max_age: int = 15

    iou_weight: float = 0.6
    proximity_weight: float = 0.4
    # Lower bound (px) on the box dimension used to normalize center distance.
    proximity_floor: float = 100.0

    def __post_init__(self) -> None:
        if self.match_threshold < 0:
            raise ValueError(f"match_threshold must be >= 0, got {self.match_threshold}")
        if self.max_age < 1:
            raise ValueError(f"max_age must be >= 1, got {self.max_age}")
        if self.iou_weight < 0 or self.proximity_weight < 0:
            raise ValueError("iou_weight and proximity_weight must be non-negative")
        if self.proximity_floor <= 0:
            raise ValueError(f"proximity_floor must be > 0, got {self.proximity_floor}")


@dataclass(frozen=True)
class AppConfig:
    """
    Centralized configuration for the focus demo.

    Keep config small and explicit so the pipeline is easy to debug.
    """

    det_model_xml: str
    device: str = "CPU"

    det_conf_threshold: float = 0.3
    max_detections: int = 10
    # Run the detector on every Nth frame and reuse its boxes in between.
    detect_every_n: int = 3
    blur_amount: int = 15

    tracker: TrackerConfig = field(default_factory=TrackerConfig)

    def __post_init__(self) -> None:
        if self.detect_every_n < 1:
            raise ValueError(f"detect_every_n must be >= 1, got {self.detect_every_n}")
        if self.max_detections < 1:
            raise ValueError(f"max_detections must be >= 1, got {self.max_detections}")
        if not 0 <= self.blur_amount <= 100:
            raise ValueError(f"blur_amount must be within 0..100, got {self.blur_amount}")
