"""Unit tests for video source helpers (OpenCV capture mocked)."""
from __future__ import annotations

from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from smartfocus.video_input import LoopingCapture, _is_int_string, open_video_source, read_first_frame


def test_is_int_string():
    assert _is_int_string("0")
    assert _is_int_string(" 2 ")
    assert not _is_int_string("video.mp4")


def test_missing_file_raises(tmp_path):
    with pytest.raises(RuntimeError, match="not found"):
        open_video_source(str(tmp_path / "missing.mp4"))


def test_looping_capture_rewinds_at_end():
    frame = np.zeros((4, 4, 3), dtype=np.uint8)
    cap = MagicMock()
    cap.read.side_effect = [(True, frame), (False, None), (True, frame)]
    loop = LoopingCapture(cap)

    assert loop.read()[0]
    ok, again = loop.read()
    assert ok
    assert again is frame
    cap.set.assert_called_once_with(cv2.CAP_PROP_POS_FRAMES, 0)


def test_looping_capture_gives_up_after_one_rewind():
    cap = MagicMock()
    cap.read.return_value = (False, None)
    ok, frame = LoopingCapture(cap).read()
    assert not ok
    assert frame is None


def test_read_first_frame_raises_on_empty_source():
    cap = MagicMock()
    cap.read.return_value = (False, None)
    with pytest.raises(RuntimeError):
        read_first_frame(cap)
