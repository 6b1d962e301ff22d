from __future__ import annotations

"""
Selective blur compositing:
- the whole frame is Gaussian-blurred
- the selected track's box is pasted back sharp

The tracker's box is used as-is (no smoothing between frames).
"""

import math
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from smartfocus.types import Track


def _find_track(tracks: Sequence[Track], track_id: Optional[int]) -> Optional[Track]:
    if track_id is None:
        return None
    for tr in tracks:
        if tr.track_id == track_id:
            return tr
    return None


def render_with_selective_blur(
    frame_bgr: np.ndarray,
    tracks: Sequence[Track],
    selected_id: Optional[int],
    blur_amount: float = 15,
    canvas_size: Optional[Tuple[int, int]] = None,
) -> np.ndarray:
    """
    Returns a new image; `frame_bgr` is not modified.

    `canvas_size` is (width, height) of the output. Track boxes are in source-frame
    pixels and are scaled into the canvas.
    """
    if frame_bgr is None or frame_bgr.size == 0:
        return frame_bgr

    vh, vw = frame_bgr.shape[:2]
    if canvas_size is not None and tuple(canvas_size) != (vw, vh):
        cw, ch = int(canvas_size[0]), int(canvas_size[1])
        sharp = cv2.resize(frame_bgr, (cw, ch))
    else:
        cw, ch = vw, vh
        sharp = frame_bgr

    if blur_amount > 0:
        out = cv2.GaussianBlur(sharp, (0, 0), sigmaX=float(blur_amount))
    else:
        out = sharp.copy()

    person = _find_track(tracks, selected_id)
    if person is None:
        return out

    sx = cw / vw
    sy = ch / vh
    b = person.bbox
    x0 = max(0, int(math.floor(b.x * sx)))
    y0 = max(0, int(math.floor(b.y * sy)))
    x1 = min(cw, int(math.ceil(b.x2 * sx)))
    y1 = min(ch, int(math.ceil(b.y2 * sy)))
    if x1 > x0 and y1 > y0:
        out[y0:y1, x0:x1] = sharp[y0:y1, x0:x1]
    return out
