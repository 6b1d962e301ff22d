"""Unit tests for selective blur compositing and the overlay."""
from __future__ import annotations

import cv2
import numpy as np
import pytest

from smartfocus.renderer import render_with_selective_blur
from smartfocus.types import BBox, Track
from smartfocus.visualizer import Visualizer


@pytest.fixture()
def frame() -> np.ndarray:
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, size=(120, 160, 3), dtype=np.uint8)


@pytest.fixture()
def tracks() -> list[Track]:
    return [
        Track(track_id=1, bbox=BBox(40, 30, 40, 40), score=0.9),
        Track(track_id=2, bbox=BBox(100, 60, 30, 50), score=0.8),
    ]


def test_selected_region_stays_sharp(frame, tracks):
    out = render_with_selective_blur(frame, tracks, selected_id=1, blur_amount=15)
    assert out.shape == frame.shape
    assert np.array_equal(out[30:70, 40:80], frame[30:70, 40:80])
    # Everything else is blurred noise
    assert not np.array_equal(out[0:20, 0:20], frame[0:20, 0:20])
    assert not np.array_equal(out[60:110, 100:130], frame[60:110, 100:130])


def test_no_selection_blurs_whole_frame(frame, tracks):
    out = render_with_selective_blur(frame, tracks, selected_id=None)
    expected = cv2.GaussianBlur(frame, (0, 0), sigmaX=15.0)
    assert np.array_equal(out, expected)


def test_selected_id_not_in_tracks_blurs_whole_frame(frame, tracks):
    out = render_with_selective_blur(frame, tracks, selected_id=99)
    expected = cv2.GaussianBlur(frame, (0, 0), sigmaX=15.0)
    assert np.array_equal(out, expected)


def test_input_frame_is_not_modified(frame, tracks):
    before = frame.copy()
    render_with_selective_blur(frame, tracks, selected_id=1)
    assert np.array_equal(frame, before)


def test_canvas_size_scales_frame_and_box(frame, tracks):
    out = render_with_selective_blur(frame, tracks, selected_id=1, canvas_size=(80, 60))
    assert out.shape == (60, 80, 3)
    sharp = cv2.resize(frame, (80, 60))
    # Box (40, 30, 40, 40) at half scale -> (20, 15, 20, 20)
    assert np.array_equal(out[15:35, 20:40], sharp[15:35, 20:40])


def test_box_partly_outside_frame_is_clipped(frame):
    edge = [Track(track_id=1, bbox=BBox(140, 100, 50, 50), score=0.9)]
    out = render_with_selective_blur(frame, edge, selected_id=1)
    assert np.array_equal(out[100:120, 140:160], frame[100:120, 140:160])


def test_zero_blur_returns_sharp_copy(frame, tracks):
    out = render_with_selective_blur(frame, tracks, selected_id=None, blur_amount=0)
    assert np.array_equal(out, frame)
    assert out is not frame


def test_empty_frame_passthrough():
    empty = np.zeros((0, 0, 3), dtype=np.uint8)
    assert render_with_selective_blur(empty, [], None) is empty


def test_visualizer_draws_on_copy(frame, tracks):
    vis = Visualizer(show_boxes=True, show_fps=True)
    before = frame.copy()
    out = vis.draw(frame, tracks, selected_id=1, fps=24.0, scale=(1.0, 1.0))
    assert out.shape == frame.shape
    assert np.array_equal(frame, before)
    assert not np.array_equal(out, frame)
