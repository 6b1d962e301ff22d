from __future__ import annotations

import time
from typing import Optional


def clamp(val: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, val))


class FpsMeter:
    """Frames-per-second from the gap between consecutive ticks."""

    def __init__(self) -> None:
        self._prev_ts: Optional[float] = None
        self.fps = 0.0

    def tick(self, now: Optional[float] = None) -> float:
        now = time.time() if now is None else now
        if self._prev_ts is not None:
            self.fps = 1.0 / max(1e-6, (now - self._prev_ts))
        self._prev_ts = now
        return self.fps
