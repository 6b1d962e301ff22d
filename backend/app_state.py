from __future__ import annotations

"""
Shared state for the FastAPI backend.

We keep this intentionally simple (in-memory, single-process demo):
- One active pipeline runner thread (it alone owns the tracker)
- Latest rendered JPEG frame for MJPEG streaming
- Latest track snapshots, for click resolution and /api/tracks
- Focus selection and blur strength (set from the browser)
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional

from smartfocus.selection import FocusSelection
from smartfocus.types import Track


@dataclass
class SharedState:
    # Latest JPEG bytes for MJPEG streaming
    latest_jpeg: Optional[bytes] = None

    # Latest tracker output (copies, never the tracker's own records)
    latest_tracks: List[Track] = field(default_factory=list)

    # Frame size (set once we decode first frame)
    frame_w: Optional[int] = None
    frame_h: Optional[int] = None

    selection: FocusSelection = field(default_factory=FocusSelection)
    blur_amount: int = 15

    # Runner control
    running: bool = False
    stop_flag: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock)
    frame_ready: threading.Condition = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.frame_ready is None:
            self.frame_ready = threading.Condition(self.lock)

    def clear_frame_state(self) -> None:
        """Forget everything tied to the previous source. Caller holds `lock`."""
        self.latest_jpeg = None
        self.latest_tracks = []
        self.frame_w = None
        self.frame_h = None
        self.selection.clear()


STATE = SharedState()
