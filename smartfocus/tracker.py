from __future__ import annotations

"""
Greedy IoU + centroid tracker for person detections (no appearance features).

How it works:
- Each frame provides person detections.
- Every track predicts its box by adding its last velocity.
- (track, detection) pairs are scored by 0.6 * IoU + 0.4 * centroid proximity
  against the predicted box; pairs at or below the acceptance threshold are dropped.
- Pairs are committed greedily, highest score first. Equal scores keep
  enumeration order (track-major) because the sort is stable.
- Unmatched tracks coast on their velocity and expire after `max_age` frames.
- Unmatched detections start new tracks.

The greedy pass can be swapped for a minimum-cost matcher behind `update()`
without touching the data model, but tie-breaking behavior would change.
"""

import math
from dataclasses import replace
from typing import List, Optional, Sequence, Set, Tuple

from loguru import logger

from smartfocus.config import TrackerConfig
from smartfocus.types import PERSON_LABEL, BBox, Detection, Track
from smartfocus.utils import clamp


def iou_xywh(a: BBox, b: BBox) -> float:
    x1 = max(a.x, b.x)
    y1 = max(a.y, b.y)
    x2 = min(a.x2, b.x2)
    y2 = min(a.y2, b.y2)
    inter = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    union = a.area + b.area - inter
    return float(inter / union) if union > 0 else 0.0


def center_distance(a: BBox, b: BBox) -> float:
    (ax, ay), (bx, by) = a.center, b.center
    return math.hypot(ax - bx, ay - by)


def proximity_score(predicted: BBox, candidate: BBox, floor: float = 100.0) -> float:
    """1.0 for identical centers, falling linearly to 0.0 at twice the normalizing size."""
    norm = max(predicted.w, predicted.h, floor) * 2
    return max(0.0, 1.0 - center_distance(predicted, candidate) / norm)


def sanitize_detections(detections: Sequence[Detection]) -> List[Detection]:
    """
    Keep person detections with usable geometry.

    Non-finite coordinates, negative sizes and non-finite scores are rejected;
    finite scores outside [0, 1] are clamped.
    """
    out: List[Detection] = []
    for d in detections:
        if d.label != PERSON_LABEL:
            continue
        if not d.bbox.is_valid() or not math.isfinite(d.score):
            logger.debug(f"Rejected malformed detection: {d}")
            continue
        if not 0.0 <= d.score <= 1.0:
            d = replace(d, score=clamp(d.score, 0.0, 1.0))
        out.append(d)
    return out


class PersonTracker:
    """
    Tiny tracker that returns Track snapshots per frame.

    `track_id` is assigned from a per-instance counter starting at 1 and is
    never reused, even after the track is evicted.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self._next_id = 1
        self._tracks: List[Track] = []

    @property
    def next_id(self) -> int:
        return self._next_id

    def update(self, detections: Sequence[Detection]) -> List[Track]:
        dets = sanitize_detections(detections)

        if not self._tracks:
            for d in dets:
                self._spawn(d)
            return self.get_tracked()

        pairs = self._score_pairs(dets)

        # Stable sort: equal scores keep (track, detection) enumeration order.
        pairs.sort(key=lambda p: p[2], reverse=True)

        matched_tracks: Set[int] = set()
        matched_dets: Set[int] = set()
        for ti, di, _score in pairs:
            if ti in matched_tracks or di in matched_dets:
                continue
            tr = self._tracks[ti]
            det = dets[di]
            # Velocity is measured from the pre-update position, not the prediction.
            tr.velocity = (det.bbox.x - tr.bbox.x, det.bbox.y - tr.bbox.y)
            tr.bbox = det.bbox
            tr.score = det.score
            tr.age = 0
            matched_tracks.add(ti)
            matched_dets.add(di)

        # Coast unmatched tracks
        for ti, tr in enumerate(self._tracks):
            if ti in matched_tracks:
                continue
            tr.age += 1
            tr.bbox = tr.bbox.shifted(*tr.velocity)

        # Prune old tracks
        kept: List[Track] = []
        for tr in self._tracks:
            if tr.age >= self.config.max_age:
                logger.debug(f"Track lost: {tr.track_id} (unmatched for {tr.age} frames)")
            else:
                kept.append(tr)
        self._tracks = kept

        for di, d in enumerate(dets):
            if di not in matched_dets:
                self._spawn(d)

        return self.get_tracked()

    def reset(self) -> None:
        self._tracks = []
        self._next_id = 1
        logger.info("Person tracker reset")

    def get_tracked(self) -> List[Track]:
        return [tr.snapshot() for tr in self._tracks]

    def _score_pairs(self, dets: Sequence[Detection]) -> List[Tuple[int, int, float]]:
        cfg = self.config
        pairs: List[Tuple[int, int, float]] = []
        for ti, tr in enumerate(self._tracks):
            predicted = tr.bbox.shifted(*tr.velocity)
            for di, d in enumerate(dets):
                score = cfg.iou_weight * iou_xywh(predicted, d.bbox) + cfg.proximity_weight * proximity_score(
                    predicted, d.bbox, cfg.proximity_floor
                )
                if score > cfg.match_threshold:
                    pairs.append((ti, di, score))
        return pairs

    def _spawn(self, det: Detection) -> Track:
        tr = Track(track_id=self._next_id, bbox=det.bbox, score=det.score)
        self._next_id += 1
        self._tracks.append(tr)
        logger.debug(f"New track created: {tr.track_id}")
        return tr
