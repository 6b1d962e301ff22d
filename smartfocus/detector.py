from __future__ import annotations

"""
OpenVINO person detector (person-detection-retail-0013 or any SSD model with
the same [1, 1, N, 7] output layout).

Kept as a thin wrapper so you can easily swap devices or models later.
"""

from dataclasses import dataclass
from typing import Dict, List

import cv2
import numpy as np
from loguru import logger
from openvino import CompiledModel, Core, Model

from smartfocus.config import AppConfig
from smartfocus.types import BBox, Detection
from smartfocus.utils import clamp


# SSD class index -> label. Anything else is reported as "other".
SSD_LABELS: Dict[int, str] = {1: "person"}


@dataclass(frozen=True)
class _OVModelIO:
    compiled: CompiledModel
    input_name: str
    output_name: str
    input_shape: tuple


def parse_ssd_output(
    raw: np.ndarray,
    frame_w: int,
    frame_h: int,
    conf_threshold: float,
    max_detections: int,
) -> List[Detection]:
    """
    SSD output rows: image_id, label, conf, x_min, y_min, x_max, y_max (normalized).

    Boxes are clamped to the frame and returned as x, y, w, h in pixels, highest
    confidence first, at most `max_detections` of them.
    """
    rows = np.asarray(raw, dtype=np.float32).reshape(-1, 7)
    dets: List[Detection] = []
    for image_id, label, conf, x_min, y_min, x_max, y_max in rows:
        if image_id < 0:
            # End-of-detections marker
            break
        if conf < conf_threshold:
            continue
        x1 = clamp(float(x_min) * frame_w, 0.0, float(frame_w))
        y1 = clamp(float(y_min) * frame_h, 0.0, float(frame_h))
        x2 = clamp(float(x_max) * frame_w, 0.0, float(frame_w))
        y2 = clamp(float(y_max) * frame_h, 0.0, float(frame_h))
        if x2 <= x1 or y2 <= y1:
            continue
        dets.append(
            Detection(
                bbox=BBox(x1, y1, x2 - x1, y2 - y1),
                score=float(conf),
                label=SSD_LABELS.get(int(label), "other"),
            )
        )
    dets.sort(key=lambda d: d.score, reverse=True)
    return dets[:max_detections]


class PersonDetector:
    def __init__(self, cfg: AppConfig):
        core = Core()
        det_m: Model = core.read_model(cfg.det_model_xml)
        det_c = core.compile_model(det_m, cfg.device)
        self.det = self._wrap(det_c)
        self.conf_threshold = cfg.det_conf_threshold
        self.max_detections = cfg.max_detections
        logger.info(f"Loaded detector {cfg.det_model_xml} on {cfg.device}, input {self.det.input_shape}")

    @staticmethod
    def _wrap(compiled: CompiledModel) -> _OVModelIO:
        inp = compiled.inputs[0]
        out = compiled.outputs[0]
        return _OVModelIO(
            compiled=compiled,
            input_name=inp.get_any_name(),
            output_name=out.get_any_name(),
            input_shape=tuple(inp.shape),
        )

    def detect(self, frame_bgr: np.ndarray) -> List[Detection]:
        h, w = frame_bgr.shape[:2]
        n, c, ih, iw = self.det.input_shape  # NCHW

        resized = cv2.resize(frame_bgr, (iw, ih))
        blob = resized.transpose(2, 0, 1)[None, ...].astype(np.float32)  # 1x3xHxW

        raw = self.det.compiled([blob])[self.det.output_name]
        return parse_ssd_output(raw, w, h, self.conf_threshold, self.max_detections)
