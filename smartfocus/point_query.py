from __future__ import annotations

from typing import Optional, Sequence, Tuple

from smartfocus.types import Track


def canvas_to_video(
    x: float,
    y: float,
    canvas_width: float,
    canvas_height: float,
    video_width: float,
    video_height: float,
) -> Tuple[float, float]:
    """Map a display (canvas) pixel to source-frame pixels with independent x/y scales."""
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas size must be positive, got {canvas_width}x{canvas_height}")
    return x * (video_width / canvas_width), y * (video_height / canvas_height)


def find_person_at_point(
    tracks: Sequence[Track],
    x: float,
    y: float,
    canvas_width: float,
    canvas_height: float,
    video_width: float,
    video_height: float,
) -> Optional[Track]:
    """
    Returns the first track whose box contains the clicked point, or None.

    Boxes overlap often in crowds; scan order decides, not box size or depth.
    """
    vx, vy = canvas_to_video(x, y, canvas_width, canvas_height, video_width, video_height)
    for tr in tracks:
        if tr.bbox.contains(vx, vy):
            return tr
    return None
