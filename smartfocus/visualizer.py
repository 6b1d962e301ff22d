from __future__ import annotations

"""
OpenCV overlay drawn on top of the blurred output:
- Track boxes with person id (optional)
- Locked person highlight
- People count / focus status / FPS HUD
"""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from smartfocus.types import Track


SELECTED_COLOR = (0, 200, 255)
TRACK_COLOR = (0, 255, 0)
COASTING_COLOR = (128, 128, 128)


class Visualizer:
    def __init__(self, show_boxes: bool = False, show_fps: bool = False):
        self.show_boxes = show_boxes
        self.show_fps = show_fps

    def draw(
        self,
        frame_bgr: np.ndarray,
        tracks: Sequence[Track],
        selected_id: Optional[int],
        fps: float,
        scale: Tuple[float, float] = (1.0, 1.0),
    ) -> np.ndarray:
        """
        `scale` maps source-frame boxes into `frame_bgr` when it was resized for display.
        """
        out = frame_bgr.copy()
        sx, sy = scale

        if self.show_boxes:
            for tr in tracks:
                color = TRACK_COLOR
                thickness = 1
                if tr.track_id == selected_id:
                    color = SELECTED_COLOR
                    thickness = 2
                elif tr.age > 0:
                    # Coasting on predicted position, no detection this frame
                    color = COASTING_COLOR

                x1, y1 = int(tr.bbox.x * sx), int(tr.bbox.y * sy)
                x2, y2 = int(tr.bbox.x2 * sx), int(tr.bbox.y2 * sy)
                cv2.rectangle(out, (x1, y1), (x2, y2), color, thickness)
                cv2.putText(out, f"P{tr.track_id}", (x1, max(20, y1 - 10)), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)

        # Small HUD
        y = 30
        cv2.putText(out, f"{len(tracks)} detected", (20, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        y += 30
        if selected_id is not None:
            status, color = f"LOCKED - Person #{selected_id}", SELECTED_COLOR
        else:
            status, color = "Click to focus", (255, 255, 255)
        cv2.putText(out, status, (20, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
        y += 30
        if self.show_fps:
            cv2.putText(out, f"FPS: {fps:.1f}", (20, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)

        return out
