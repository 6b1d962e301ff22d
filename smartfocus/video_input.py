from __future__ import annotations

"""
Video source handling for the focus demo:
- Webcam index (e.g. "0")
- Local file path (played on loop)
- http(s) / rtsp stream URL, opened with OpenCV's FFMPEG backend

Each source is treated as a single feed; the tracker must be reset whenever
the source changes.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np
from loguru import logger


_STREAM_PREFIXES = ("http://", "https://", "rtsp://", "rtmp://")


class LoopingCapture:
    """
    A VideoCapture-like wrapper that rewinds a file to frame 0 when it ends.

    Only one rewind is attempted per read, so an unreadable file still ends the loop.
    """

    def __init__(self, cap: cv2.VideoCapture):
        self.cap = cap

    def read(self):
        ok, frame = self.cap.read()
        if ok and frame is not None:
            return ok, frame
        self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
        return self.cap.read()

    def isOpened(self) -> bool:
        return self.cap.isOpened()

    def get(self, propId: int) -> float:
        return self.cap.get(propId)

    def release(self) -> None:
        self.cap.release()


def _is_int_string(s: str) -> bool:
    try:
        int(s)
        return True
    except ValueError:
        return False


def _open_stream(url: str) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(url, cv2.CAP_FFMPEG)
    cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
    cap.set(cv2.CAP_PROP_OPEN_TIMEOUT_MSEC, 15000)
    cap.set(cv2.CAP_PROP_READ_TIMEOUT_MSEC, 10000)
    if not cap.isOpened():
        # Fallback: try default backend
        cap = cv2.VideoCapture(url)
    return cap


def open_video_source(source: Union[str, int], loop_files: bool = True) -> Union[cv2.VideoCapture, LoopingCapture]:
    """
    Returns an OpenCV VideoCapture for a given source.

    `source`:
    - webcam index string like "0" (or int 0)
    - stream URL
    - local path (wrapped in LoopingCapture unless `loop_files` is False)
    """
    is_file = False
    if isinstance(source, int):
        cap = cv2.VideoCapture(source)
    else:
        src = str(source).strip()
        if _is_int_string(src):
            cap = cv2.VideoCapture(int(src))
        elif src.lower().startswith(_STREAM_PREFIXES):
            cap = _open_stream(src)
        else:
            if not Path(src).exists():
                raise RuntimeError(f"Video file not found: {src}")
            cap = cv2.VideoCapture(src)
            is_file = True

    if not cap.isOpened():
        raise RuntimeError(f"Could not open video source: {source}")

    logger.info(f"Opened video source: {source}")
    if is_file and loop_files:
        return LoopingCapture(cap)
    return cap


def probe_video_source(source: Union[str, int]) -> None:
    """
    Lightweight check used by the API to fail fast:
    - Tries to open the source
    - Reads a single frame
    - Raises RuntimeError with a clear message if anything fails
    """
    cap = None
    try:
        cap = open_video_source(source, loop_files=False)
        ok, frame = cap.read()
        if not ok or frame is None:
            raise RuntimeError(f"Source opened but no frames could be read: {source}")
    finally:
        if cap is not None:
            cap.release()


def read_first_frame(cap) -> np.ndarray:
    ok, frame = cap.read()
    if not ok or frame is None:
        raise RuntimeError("Could not read from video source.")
    return frame
