"""Unit tests for SSD output parsing, no model file needed."""
from __future__ import annotations

import numpy as np
import pytest

from smartfocus.detector import parse_ssd_output


def ssd(rows) -> np.ndarray:
    return np.asarray(rows, dtype=np.float32).reshape(1, 1, -1, 7)


def test_parse_converts_to_pixel_xywh():
    raw = ssd([[0, 1, 0.9, 0.1, 0.2, 0.3, 0.6]])
    dets = parse_ssd_output(raw, frame_w=200, frame_h=100, conf_threshold=0.3, max_detections=10)
    assert len(dets) == 1
    d = dets[0]
    assert d.label == "person"
    assert d.score == pytest.approx(0.9)
    assert d.bbox.x == pytest.approx(20)
    assert d.bbox.y == pytest.approx(20)
    assert d.bbox.w == pytest.approx(40)
    assert d.bbox.h == pytest.approx(40)


def test_parse_filters_low_confidence_and_labels_other_classes():
    raw = ssd(
        [
            [0, 1, 0.2, 0.1, 0.1, 0.2, 0.2],
            [0, 2, 0.8, 0.1, 0.1, 0.2, 0.2],
        ]
    )
    dets = parse_ssd_output(raw, 100, 100, conf_threshold=0.3, max_detections=10)
    assert [d.label for d in dets] == ["other"]


def test_parse_clamps_and_skips_empty_boxes():
    raw = ssd(
        [
            [0, 1, 0.9, -0.5, -0.5, 0.5, 0.5],
            [0, 1, 0.9, 0.5, 0.5, 0.5, 0.9],
        ]
    )
    dets = parse_ssd_output(raw, 100, 100, conf_threshold=0.3, max_detections=10)
    assert len(dets) == 1
    assert (dets[0].bbox.x, dets[0].bbox.y) == (0.0, 0.0)
    assert dets[0].bbox.w == pytest.approx(50)


def test_parse_stops_at_end_marker():
    raw = ssd(
        [
            [0, 1, 0.9, 0.1, 0.1, 0.2, 0.2],
            [-1, 0, 0, 0, 0, 0, 0],
            [0, 1, 0.9, 0.5, 0.5, 0.6, 0.6],
        ]
    )
    assert len(parse_ssd_output(raw, 100, 100, 0.3, 10)) == 1


def test_parse_keeps_top_scoring_up_to_limit():
    raw = ssd([[0, 1, 0.4 + 0.1 * i, 0.1 * i, 0.0, 0.1 * i + 0.05, 0.5] for i in range(5)])
    dets = parse_ssd_output(raw, 100, 100, conf_threshold=0.3, max_detections=2)
    assert [round(d.score, 2) for d in dets] == [0.8, 0.7]
