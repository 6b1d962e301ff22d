from __future__ import annotations

"""
One-call-per-frame driver shared by the desktop window (`main.py`) and the
browser backend runner:

1) Detect persons (every Nth frame; the last boxes are reused in between)
2) Update the tracker
3) Blur everything except the locked person
4) Draw the overlay
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np
from loguru import logger

from smartfocus.config import AppConfig
from smartfocus.point_query import find_person_at_point
from smartfocus.renderer import render_with_selective_blur
from smartfocus.selection import FocusSelection
from smartfocus.tracker import PersonTracker
from smartfocus.types import Detection, Track
from smartfocus.utils import FpsMeter
from smartfocus.visualizer import Visualizer


class Detector(Protocol):
    def detect(self, frame_bgr: np.ndarray) -> List[Detection]: ...


@dataclass
class FrameResult:
    output: np.ndarray
    tracks: List[Track]
    selected_id: Optional[int]
    fps: float


class FocusPipeline:
    def __init__(
        self,
        detector: Detector,
        cfg: AppConfig,
        visualizer: Optional[Visualizer] = None,
        canvas_size: Optional[Tuple[int, int]] = None,
    ):
        self.detector = detector
        self.cfg = cfg
        self.tracker = PersonTracker(cfg.tracker)
        self.selection = FocusSelection()
        self.visualizer = visualizer
        # (width, height) of the rendered output; None renders at source size.
        self.canvas_size = canvas_size
        self.blur_amount = cfg.blur_amount

        self.frame_size: Optional[Tuple[int, int]] = None
        self._frame_idx = 0
        self._last_dets: List[Detection] = []
        self._fps = FpsMeter()

    def process(self, frame_bgr: np.ndarray) -> FrameResult:
        h, w = frame_bgr.shape[:2]
        self.frame_size = (w, h)

        self._frame_idx += 1
        if self._frame_idx % self.cfg.detect_every_n == 0:
            self._last_dets = self._detect(frame_bgr)

        tracks = self.tracker.update(self._last_dets)
        fps = self._fps.tick()

        selected = self.selection.selected_id
        out = render_with_selective_blur(frame_bgr, tracks, selected, self.blur_amount, self.canvas_size)
        if self.visualizer is not None:
            oh, ow = out.shape[:2]
            out = self.visualizer.draw(out, tracks, selected, fps, scale=(ow / w, oh / h))

        return FrameResult(output=out, tracks=tracks, selected_id=selected, fps=fps)

    def _detect(self, frame_bgr: np.ndarray) -> List[Detection]:
        # A failed inference counts as an empty frame; tracks age instead of the loop dying.
        try:
            return list(self.detector.detect(frame_bgr))
        except Exception:
            logger.exception("Person detection failed; treating frame as empty")
            return []

    def click(self, x: float, y: float, canvas_width: float, canvas_height: float) -> Optional[int]:
        """Toggle focus on whoever is under a display-space click. Returns the new selected id."""
        if self.frame_size is None:
            return self.selection.selected_id
        vw, vh = self.frame_size
        person = find_person_at_point(self.tracker.get_tracked(), x, y, canvas_width, canvas_height, vw, vh)
        return self.selection.click(person)

    def clear_selection(self) -> None:
        self.selection.clear()

    def set_blur(self, amount: float) -> None:
        if not 0 <= amount <= 100:
            raise ValueError(f"blur amount must be within 0..100, got {amount}")
        self.blur_amount = amount

    @property
    def tracks(self) -> Sequence[Track]:
        return self.tracker.get_tracked()

    def reset(self) -> None:
        """Call when the source changes: ids restart at 1 and focus is dropped."""
        self.tracker.reset()
        self.selection.clear()
        self.frame_size = None
        self._frame_idx = 0
        self._last_dets = []
        self._fps = FpsMeter()
