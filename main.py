from __future__ import annotations

import argparse

import cv2
from loguru import logger

from smartfocus.config import AppConfig, TrackerConfig
from smartfocus.detector import PersonDetector
from smartfocus.log import setup_logging
from smartfocus.pipeline import FocusPipeline
from smartfocus.utils import clamp
from smartfocus.video_input import open_video_source
from smartfocus.visualizer import Visualizer


WINDOW = "Smart Focus (click a person to lock focus)"
BLUR_MIN, BLUR_MAX = 5, 30


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Smart focus: track people and blur everyone but the selected one")
    p.add_argument(
        "--source",
        required=True,
        help='Local video path, stream URL OR webcam index (e.g. "0").',
    )
    p.add_argument("--device", default="CPU", help="OpenVINO device, e.g. CPU, GPU, AUTO")
    p.add_argument("--det-model", default="models/person-detection-retail-0013.xml")
    p.add_argument("--conf", type=float, default=0.3, help="Detection confidence threshold")
    p.add_argument("--max-dets", type=int, default=10, help="Max detections kept per frame")
    p.add_argument("--detect-every", type=int, default=3, help="Run the detector every N frames")
    p.add_argument("--blur", type=int, default=15, help="Background blur strength (px)")
    p.add_argument("--match-thr", type=float, default=0.1, help="Minimum combined score to match a track")
    p.add_argument("--max-age", type=int, default=15, help="Frames a lost track survives")
    p.add_argument("--display-width", type=int, default=None)
    p.add_argument("--display-height", type=int, default=None)
    p.add_argument("--show-boxes", action="store_true")
    p.add_argument("--show-fps", action="store_true")
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--log-file", default=None)
    return p.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(args.log_level, args.log_file)

    cfg = AppConfig(
        det_model_xml=args.det_model,
        device=args.device,
        det_conf_threshold=args.conf,
        max_detections=args.max_dets,
        detect_every_n=args.detect_every,
        blur_amount=int(clamp(args.blur, BLUR_MIN, BLUR_MAX)),
        tracker=TrackerConfig(match_threshold=args.match_thr, max_age=args.max_age),
    )

    cap = open_video_source(args.source)

    canvas_size = None
    if args.display_width and args.display_height:
        canvas_size = (args.display_width, args.display_height)

    pipeline = FocusPipeline(
        PersonDetector(cfg),
        cfg,
        visualizer=Visualizer(show_boxes=bool(args.show_boxes), show_fps=bool(args.show_fps)),
        canvas_size=canvas_size,
    )

    shown = {"w": 0, "h": 0}

    def on_mouse(event, x, y, _flags, _param):
        if event == cv2.EVENT_LBUTTONDOWN and shown["w"] > 0:
            pipeline.click(x, y, shown["w"], shown["h"])

    cv2.namedWindow(WINDOW, cv2.WINDOW_AUTOSIZE)
    cv2.setMouseCallback(WINDOW, on_mouse)

    try:
        while True:
            ok, frame = cap.read()
            if not ok or frame is None:
                break

            result = pipeline.process(frame)
            shown["h"], shown["w"] = result.output.shape[:2]
            cv2.imshow(WINDOW, result.output)

            k = cv2.waitKey(1) & 0xFF
            if k == ord("q"):
                break
            if k == ord("c"):
                pipeline.clear_selection()
            elif k == ord("r"):
                pipeline.reset()
            elif k in (ord("+"), ord("=")):
                pipeline.set_blur(clamp(pipeline.blur_amount + 1, BLUR_MIN, BLUR_MAX))
            elif k == ord("-"):
                pipeline.set_blur(clamp(pipeline.blur_amount - 1, BLUR_MIN, BLUR_MAX))
    finally:
        cap.release()
        cv2.destroyAllWindows()

    logger.info(f"Stopped; {len(pipeline.tracks)} people tracked at exit")


if __name__ == "__main__":
    main()
