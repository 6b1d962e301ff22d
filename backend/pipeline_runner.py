from __future__ import annotations

"""
Headless pipeline runner for browser-based UI.

Runs the same core pipeline as `main.py`, but:
- no OpenCV windows
- writes the rendered frame into shared state as JPEG for MJPEG streaming
- publishes track snapshots so the API can resolve clicks
"""

import threading
import time
from typing import Callable, Optional

import cv2
import numpy as np
from loguru import logger

from smartfocus.config import AppConfig
from smartfocus.detector import PersonDetector
from smartfocus.pipeline import Detector, FocusPipeline
from smartfocus.video_input import open_video_source, read_first_frame

from backend.app_state import STATE


DetectorFactory = Callable[[AppConfig], Detector]


def _encode_jpeg(frame_bgr: np.ndarray, quality: int = 80) -> Optional[bytes]:
    ok, buf = cv2.imencode(".jpg", frame_bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        return None
    return buf.tobytes()


def start_pipeline_if_needed(cfg: AppConfig, source: str, detector_factory: DetectorFactory = PersonDetector) -> None:
    """
    Starts (or restarts) the background pipeline thread.

    Here we:
    - signal any existing runner to stop
    - wait until it has fully stopped
    - reset shared state (the new runner gets a fresh tracker, ids restart at 1)
    - start a fresh runner with the new source
    """
    # Ask any existing pipeline to stop
    with STATE.lock:
        if STATE.running:
            STATE.stop_flag = True

    # Wait for previous runner to exit
    while True:
        with STATE.lock:
            if not STATE.running:
                STATE.clear_frame_state()
                STATE.blur_amount = cfg.blur_amount
                STATE.stop_flag = False
                STATE.running = True
                break
        time.sleep(0.05)

    t = threading.Thread(target=_run_loop, args=(cfg, source, detector_factory), daemon=True)
    t.start()


def stop_pipeline() -> None:
    with STATE.lock:
        STATE.stop_flag = True
        STATE.selection.clear()


def _run_loop(cfg: AppConfig, source: str, detector_factory: DetectorFactory = PersonDetector) -> None:
    cap = None
    try:
        cap = open_video_source(source)
        first = read_first_frame(cap)

        h, w = first.shape[:2]
        with STATE.lock:
            STATE.frame_w = w
            STATE.frame_h = h
            # Immediately show the first raw frame so the browser UI can display video
            first_jpg = _encode_jpeg(first)
            if first_jpg is not None:
                STATE.latest_jpeg = first_jpg
                STATE.frame_ready.notify_all()

        pipeline = FocusPipeline(detector_factory(cfg), cfg)

        frame = first
        while True:
            if frame is None:
                ok, frame = cap.read()
                if not ok or frame is None:
                    break

            with STATE.lock:
                if STATE.stop_flag:
                    break
                pipeline.selection.selected_id = STATE.selection.selected_id
                pipeline.set_blur(STATE.blur_amount)

            result = pipeline.process(frame)
            jpg = _encode_jpeg(result.output)
            with STATE.lock:
                STATE.latest_tracks = result.tracks
                if jpg is not None:
                    STATE.latest_jpeg = jpg
                    STATE.frame_ready.notify_all()

            frame = None

    finally:
        if cap is not None:
            cap.release()
        with STATE.lock:
            STATE.running = False
        logger.info(f"Pipeline runner stopped for source {source}")
