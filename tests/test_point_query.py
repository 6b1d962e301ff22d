"""Unit tests for display-space click resolution."""
from __future__ import annotations

import pytest

from smartfocus.point_query import canvas_to_video, find_person_at_point
from smartfocus.types import BBox, Track


def track(track_id, x, y, w, h) -> Track:
    return Track(track_id=track_id, bbox=BBox(x, y, w, h), score=0.9)


def test_click_inside_scaled_box():
    tracks = [track(1, 100, 100, 40, 40)]
    hit = find_person_at_point(tracks, 60, 60, 640, 360, 1280, 720)
    assert hit is not None
    assert hit.track_id == 1


def test_click_outside_scaled_box():
    tracks = [track(1, 100, 100, 40, 40)]
    assert find_person_at_point(tracks, 10, 10, 640, 360, 1280, 720) is None


def test_edges_are_inclusive():
    tracks = [track(1, 100, 100, 40, 40)]
    # (70, 70) -> (140, 140): bottom-right corner
    assert find_person_at_point(tracks, 70, 70, 640, 360, 1280, 720) is not None
    # (50, 50) -> (100, 100): top-left corner
    assert find_person_at_point(tracks, 50, 50, 640, 360, 1280, 720) is not None


def test_independent_axis_scales():
    # Canvas squashed vertically only
    tracks = [track(1, 0, 300, 100, 100)]
    assert find_person_at_point(tracks, 50, 175, 1280, 360, 1280, 720) is not None
    assert find_person_at_point(tracks, 50, 100, 1280, 360, 1280, 720) is None


def test_first_overlapping_track_wins():
    big = track(1, 0, 0, 500, 500)
    small = track(2, 90, 90, 20, 20)
    assert find_person_at_point([big, small], 100, 100, 640, 480, 640, 480).track_id == 1
    assert find_person_at_point([small, big], 100, 100, 640, 480, 640, 480).track_id == 2


def test_empty_track_list():
    assert find_person_at_point([], 100, 100, 640, 480, 640, 480) is None


def test_canvas_to_video():
    assert canvas_to_video(60, 60, 640, 360, 1280, 720) == (120, 120)


@pytest.mark.parametrize("size", [(0, 360), (640, 0), (-1, 360)])
def test_non_positive_canvas_raises(size):
    with pytest.raises(ValueError):
        find_person_at_point([track(1, 0, 0, 10, 10)], 1, 1, size[0], size[1], 1280, 720)
