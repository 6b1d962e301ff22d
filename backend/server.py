from __future__ import annotations

"""
FastAPI backend for the browser UI.

Endpoints:
- POST   /api/config            : set source + settings and start pipeline
- POST   /api/stop              : stop pipeline, drop focus
- GET    /api/meta              : frame width/height, focus, blur
- GET    /api/tracks            : latest track snapshots
- POST   /api/select            : click on the canvas to lock/unlock focus
- POST   /api/select/{track_id} : lock focus on a known track
- DELETE /api/select            : clear focus
- POST   /api/blur              : set background blur strength
- GET    /api/stream            : MJPEG stream of rendered frames
"""

from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from smartfocus.config import AppConfig, TrackerConfig
from smartfocus.point_query import find_person_at_point
from smartfocus.video_input import probe_video_source
from backend.app_state import STATE
from backend.pipeline_runner import start_pipeline_if_needed, stop_pipeline


app = FastAPI(title="Smart Focus Tracker (Local)")

# Dev-friendly CORS so React can call backend from another port.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ConfigIn(BaseModel):
    source: str = Field(..., description="Local path OR stream URL OR webcam index string like '0'")
    device: str = "CPU"
    det_model_xml: str = "models/person-detection-retail-0013.xml"
    det_conf_threshold: float = Field(0.3, ge=0.0, le=1.0)
    max_detections: int = Field(10, ge=1)
    detect_every_n: int = Field(3, ge=1)
    blur_amount: int = Field(15, ge=5, le=30)
    match_threshold: float = Field(0.1, ge=0.0)
    max_age: int = Field(15, ge=1)


class ClickIn(BaseModel):
    x: float
    y: float
    canvas_w: float = Field(..., gt=0)
    canvas_h: float = Field(..., gt=0)


class BlurIn(BaseModel):
    amount: int = Field(..., ge=5, le=30)


def _tracks_payload() -> list[dict]:
    return [t.to_dict() for t in STATE.latest_tracks]


@app.post("/api/config")
def set_config_and_start(cfg_in: ConfigIn) -> dict:
    # Fail fast if the video source cannot be opened, so the UI shows a clear error
    try:
        probe_video_source(cfg_in.source)
    except RuntimeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    cfg = AppConfig(
        det_model_xml=cfg_in.det_model_xml,
        device=cfg_in.device,
        det_conf_threshold=cfg_in.det_conf_threshold,
        max_detections=cfg_in.max_detections,
        detect_every_n=cfg_in.detect_every_n,
        blur_amount=cfg_in.blur_amount,
        tracker=TrackerConfig(match_threshold=cfg_in.match_threshold, max_age=cfg_in.max_age),
    )
    start_pipeline_if_needed(cfg, cfg_in.source)
    return {"ok": True, "config": asdict(cfg)}


@app.post("/api/stop")
def stop() -> dict:
    stop_pipeline()
    return {"ok": True}


@app.get("/api/meta")
def meta() -> dict:
    with STATE.lock:
        return {
            "frame_w": STATE.frame_w,
            "frame_h": STATE.frame_h,
            "running": STATE.running,
            "selected_id": STATE.selection.selected_id,
            "blur_amount": STATE.blur_amount,
        }


@app.get("/api/tracks")
def tracks() -> dict:
    with STATE.lock:
        return {"tracks": _tracks_payload(), "selected_id": STATE.selection.selected_id}


@app.post("/api/select")
def select_at_point(click: ClickIn) -> dict:
    """Same toggle as the desktop window: hit the locked person to unlock, empty space clears."""
    with STATE.lock:
        if STATE.frame_w is None or STATE.frame_h is None:
            raise HTTPException(status_code=400, detail="Frame size unknown yet. Call /api/config first.")
        person = find_person_at_point(
            STATE.latest_tracks,
            click.x,
            click.y,
            click.canvas_w,
            click.canvas_h,
            STATE.frame_w,
            STATE.frame_h,
        )
        selected = STATE.selection.click(person)
        return {
            "ok": True,
            "selected_id": selected,
            "track": person.to_dict() if person is not None else None,
        }


@app.post("/api/select/{track_id}")
def select_track(track_id: int) -> dict:
    with STATE.lock:
        if not any(t.track_id == track_id for t in STATE.latest_tracks):
            raise HTTPException(status_code=404, detail=f"Person #{track_id} is not being tracked")
        STATE.selection.select(track_id)
        return {"ok": True, "selected_id": track_id}


@app.delete("/api/select")
def clear_selection() -> dict:
    with STATE.lock:
        STATE.selection.clear()
    return {"ok": True, "selected_id": None}


@app.post("/api/blur")
def set_blur(blur: BlurIn) -> dict:
    with STATE.lock:
        STATE.blur_amount = blur.amount
    return {"ok": True, "blur_amount": blur.amount}


def _mjpeg_generator():
    boundary = b"--frame"
    while True:
        with STATE.lock:
            # Wait until a frame is available
            if STATE.latest_jpeg is None:
                STATE.frame_ready.wait(timeout=1.0)
            jpg: Optional[bytes] = STATE.latest_jpeg
        if jpg is None:
            continue
        yield boundary + b"\r\n" + b"Content-Type: image/jpeg\r\n\r\n" + jpg + b"\r\n"


@app.get("/api/stream")
def stream():
    return StreamingResponse(
        _mjpeg_generator(),
        media_type="multipart/x-mixed-replace; boundary=frame",
    )
